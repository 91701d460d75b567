import asyncio
import logging
from datetime import date

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.database import async_session
from medicare.models.user import UserRole
from medicare.models.visit import MedicalVisit
from medicare.models.worker import Worker
from medicare.roles import Role
from medicare.schemas.dashboard import AdminStats, DoctorStats
from medicare.services.visit_service import visit_service

logger = logging.getLogger(__name__)


class DashboardService:
    """Aggregate counts. Each count is an independent read on its own session."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory

    @property
    def session_factory(self):
        return self._session_factory or async_session

    async def _count(self, stmt) -> int:
        async with self.session_factory() as session:
            return await session.scalar(stmt) or 0

    async def _gather_counts(self, **statements) -> dict[str, int]:
        """Run counts concurrently; a failed count is logged and reported as 0."""
        names = list(statements)
        results = await asyncio.gather(
            *(self._count(statements[name]) for name in names),
            return_exceptions=True,
        )
        counts = {}
        for name, value in zip(names, results):
            if isinstance(value, Exception):
                logger.error("Dashboard count %r failed: %s", name, value)
                value = 0
            counts[name] = value
        return counts

    async def admin_stats(self) -> AdminStats:
        counts = await self._gather_counts(
            workers=select(func.count(Worker.id)),
            doctors=select(func.count(UserRole.id)).where(UserRole.role == Role.DOCTOR),
            visits=select(func.count(MedicalVisit.id)),
        )
        return AdminStats(**counts)

    async def doctor_stats(self, doctor_id: str) -> DoctorStats:
        counts = await self._gather_counts(
            my_visits=select(func.count(MedicalVisit.id)).where(MedicalVisit.doctor_id == doctor_id),
            today_visits=select(func.count(MedicalVisit.id)).where(
                MedicalVisit.doctor_id == doctor_id,
                MedicalVisit.visit_date >= date.today(),
            ),
            total_workers=select(func.count(Worker.id)),
        )
        return DoctorStats(**counts)

    async def recent_visits(self, db: AsyncSession, doctor_id: str = None):
        return await visit_service.recent(db, doctor_id=doctor_id)


dashboard_service = DashboardService()
