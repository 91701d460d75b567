import logging
from typing import Optional

from sqlalchemy import select, func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.config import get_settings
from medicare.exceptions import PlatformError, WorkerNotFound
from medicare.models.sequence import IdSequence
from medicare.models.visit import MedicalVisit
from medicare.models.worker import Worker
from medicare.schemas.worker import WorkerCreate

logger = logging.getLogger(__name__)


WORKER_SEQUENCE = "worker_id"


class WorkerService:
    async def _next_number(self, db: AsyncSession, skip: int = 0) -> int:
        """Advance the worker counter. Deleted workers never give their number back."""
        result = await db.execute(
            update(IdSequence)
            .where(IdSequence.name == WORKER_SEQUENCE)
            .values(value=IdSequence.value + 1 + skip)
            .returning(IdSequence.value)
            .execution_options(synchronize_session=False)
        )
        value = result.scalar_one_or_none()
        if value is None:
            # First registration: continue after any rows that predate the counter
            start = await db.scalar(select(func.max(Worker.id))) or 0
            value = start + 1 + skip
            db.add(IdSequence(name=WORKER_SEQUENCE, value=value))
            await db.flush()
        return value

    async def generate_worker_id(self, db: AsyncSession, skip: int = 0) -> str:
        """Next identifier in sequence, e.g. WKR-000123."""
        settings = get_settings()
        next_num = await self._next_number(db, skip=skip)
        return f"{settings.worker_id_prefix}-{str(next_num).zfill(6)}"

    async def register(self, db: AsyncSession, data: WorkerCreate, created_by: Optional[str]) -> Worker:
        attempts = get_settings().worker_id_attempts
        for attempt in range(attempts):
            try:
                # Savepoint: a collision only discards this attempt, not the caller's work
                async with db.begin_nested():
                    worker_id = await self.generate_worker_id(db, skip=attempt)
                    worker = Worker(worker_id=worker_id, created_by=created_by, **data.model_dump())
                    db.add(worker)
                    await db.flush()
            except IntegrityError:
                logger.warning("Worker ID allocation collided (attempt %d), retrying", attempt + 1)
                continue
            await db.refresh(worker)
            logger.info("Registered worker %s (%s)", worker.worker_id, worker.full_name)
            return worker
        raise PlatformError("Could not allocate a unique worker ID")

    async def get_by_worker_id(self, db: AsyncSession, worker_id: str) -> Worker:
        result = await db.execute(select(Worker).where(Worker.worker_id == worker_id.strip()))
        worker = result.scalar_one_or_none()
        if worker is None:
            raise WorkerNotFound(worker_id)
        return worker

    async def list_workers(self, db: AsyncSession, search: str = "") -> list[tuple[Worker, int]]:
        """Workers newest first, each paired with its visit count."""
        visit_count = (
            select(func.count(MedicalVisit.id))
            .where(MedicalVisit.worker_id == Worker.id)
            .correlate(Worker)
            .scalar_subquery()
        )
        query = select(Worker, visit_count.label("visit_count"))
        if search:
            query = query.where(
                or_(
                    Worker.full_name.ilike(f"%{search}%"),
                    Worker.worker_id.ilike(f"%{search}%"),
                )
            )
        query = query.order_by(Worker.created_at.desc(), Worker.id.desc())
        result = await db.execute(query)
        return [(row.Worker, row.visit_count or 0) for row in result.all()]

    async def search_ids(self, db: AsyncSession, search: str) -> list[int]:
        result = await db.execute(
            select(Worker.id).where(
                or_(
                    Worker.full_name.ilike(f"%{search}%"),
                    Worker.worker_id.ilike(f"%{search}%"),
                )
            )
        )
        return list(result.scalars().all())

    async def delete(self, db: AsyncSession, worker_id: str) -> None:
        worker = await self.get_by_worker_id(db, worker_id)
        await db.delete(worker)
        await db.flush()
        logger.info("Deleted worker %s and their visit history", worker_id)


worker_service = WorkerService()
