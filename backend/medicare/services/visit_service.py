import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from medicare.auth import UserPrincipal
from medicare.exceptions import ValidationError
from medicare.models.user import Profile
from medicare.models.visit import MedicalVisit
from medicare.models.worker import Worker
from medicare.schemas.visit import VisitCreate, VisitResponse
from medicare.services.worker_service import worker_service

logger = logging.getLogger(__name__)

UNKNOWN_DOCTOR = "Unknown"
RECENT_LIMIT = 5


class VisitService:
    async def record_visit(
        self,
        db: AsyncSession,
        worker: Worker,
        doctor: UserPrincipal,
        data: VisitCreate,
    ) -> MedicalVisit:
        """Append one visit. Symptoms and diagnosis are required free text."""
        symptoms = (data.symptoms or "").strip()
        diagnosis = (data.diagnosis or "").strip()
        missing = [name for name, value in (("symptoms", symptoms), ("diagnosis", diagnosis)) if not value]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

        visit = MedicalVisit(
            worker_id=worker.id,
            doctor_id=doctor.user_id,
            visit_date=data.visit_date or date.today(),
            symptoms=symptoms,
            diagnosis=diagnosis,
            notes=(data.notes or "").strip() or None,
        )
        db.add(visit)
        await db.flush()
        await db.refresh(visit)
        logger.info("Doctor %s recorded visit %s for worker %s", doctor.user_id, visit.id, worker.worker_id)
        return visit

    async def history(self, db: AsyncSession, worker: Worker) -> list[VisitResponse]:
        """All visits for a worker, latest visit date first, with author names."""
        result = await db.execute(
            select(MedicalVisit, Profile.full_name)
            .outerjoin(Profile, Profile.user_id == MedicalVisit.doctor_id)
            .where(MedicalVisit.worker_id == worker.id)
            .order_by(MedicalVisit.visit_date.desc(), MedicalVisit.created_at.desc(), MedicalVisit.id.desc())
        )
        return [
            VisitResponse.model_validate(visit).model_copy(update={"doctor_name": name or UNKNOWN_DOCTOR})
            for visit, name in result.all()
        ]

    async def doctor_records(self, db: AsyncSession, doctor_id: str, search: str = "") -> list[MedicalVisit]:
        """
        A doctor's own visits. A search term restricts to matching workers
        (by name or identifier); when no worker matches, it matches diagnosis.
        """
        query = (
            select(MedicalVisit)
            .options(selectinload(MedicalVisit.worker))
            .where(MedicalVisit.doctor_id == doctor_id)
            .order_by(MedicalVisit.visit_date.desc(), MedicalVisit.id.desc())
        )
        if search:
            worker_ids = await worker_service.search_ids(db, search)
            if worker_ids:
                query = query.where(MedicalVisit.worker_id.in_(worker_ids))
            else:
                query = query.where(MedicalVisit.diagnosis.ilike(f"%{search}%"))
        result = await db.execute(query)
        return list(result.scalars().all())

    async def recent(self, db: AsyncSession, doctor_id: Optional[str] = None, limit: int = RECENT_LIMIT) -> list[MedicalVisit]:
        query = select(MedicalVisit).options(selectinload(MedicalVisit.worker))
        if doctor_id is not None:
            query = query.where(MedicalVisit.doctor_id == doctor_id)
        query = query.order_by(MedicalVisit.created_at.desc(), MedicalVisit.id.desc()).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())


visit_service = VisitService()
