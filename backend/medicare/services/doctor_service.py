import logging

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.exceptions import DoctorNotFound
from medicare.models.user import User, Profile, UserRole
from medicare.roles import Role
from medicare.schemas.doctor import DoctorResponse

logger = logging.getLogger(__name__)


class DoctorService:
    async def list_doctors(self, db: AsyncSession, search: str = "") -> list[DoctorResponse]:
        query = (
            select(Profile.id, Profile.user_id, Profile.full_name, Profile.created_at, User.email)
            .join(User, User.id == Profile.user_id)
            .join(UserRole, UserRole.user_id == Profile.user_id)
            .where(UserRole.role == Role.DOCTOR)
            .order_by(Profile.created_at.desc(), Profile.id.desc())
        )
        if search:
            query = query.where(Profile.full_name.ilike(f"%{search}%"))
        result = await db.execute(query)
        return [
            DoctorResponse(
                id=row.id,
                user_id=row.user_id,
                full_name=row.full_name,
                email=row.email,
                created_at=row.created_at,
            )
            for row in result.all()
        ]

    async def delete_doctor(self, db: AsyncSession, user_id: str) -> None:
        """
        Remove the doctor's profile and role. The account row is kept so visits
        they authored still reference it; those visits then show an unknown author.
        """
        role = await db.scalar(
            select(UserRole).where(UserRole.user_id == user_id, UserRole.role == Role.DOCTOR)
        )
        if role is None:
            raise DoctorNotFound(f"Doctor {user_id} not found")
        await db.execute(delete(UserRole).where(UserRole.user_id == user_id))
        await db.execute(delete(Profile).where(Profile.user_id == user_id))
        await db.flush()
        logger.info("Removed doctor %s", user_id)


doctor_service = DoctorService()
