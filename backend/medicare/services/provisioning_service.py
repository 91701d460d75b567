import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from medicare.database import async_session
from medicare.exceptions import AlreadyProvisioned, PlatformError, ValidationError
from medicare.models.user import Profile, UserRole
from medicare.roles import Role
from medicare.services.identity_service import identity_service

logger = logging.getLogger(__name__)

DEMO_ACCOUNTS = [
    {"email": "admin@medicare.demo", "password": "admin123", "full_name": "System Admin", "role": Role.ADMIN},
    {"email": "doctor1@medicare.demo", "password": "doctor123", "full_name": "Dr. Demo Doctor", "role": Role.DOCTOR},
]


class ProvisioningService:
    """Multi-step account provisioning: identity, then profile, then role."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory

    @property
    def session_factory(self):
        return self._session_factory or async_session

    async def admin_exists(self) -> bool:
        async with self.session_factory() as session:
            found = await session.scalar(
                select(UserRole.id).where(UserRole.role == Role.ADMIN).limit(1)
            )
        return found is not None

    async def insert_profile(self, user_id: str, full_name: str) -> None:
        async with self.session_factory() as session:
            session.add(Profile(user_id=user_id, full_name=full_name))
            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PlatformError(f"Failed to create profile: {e}") from e

    async def assign_role(self, user_id: str, role: Role) -> None:
        async with self.session_factory() as session:
            session.add(UserRole(user_id=user_id, role=role))
            try:
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                raise PlatformError(f"Failed to assign role: {e}") from e

    async def create_demo_accounts(self) -> list[dict]:
        """Provision one admin and one doctor. Refuses once any admin exists."""
        if await self.admin_exists():
            raise AlreadyProvisioned()

        accounts = []
        for account in DEMO_ACCOUNTS:
            role = account["role"]
            try:
                user = await identity_service.create_user(account["email"], account["password"])
            except (ValidationError, PlatformError) as e:
                raise PlatformError(f"Failed to create {role.value}: {e.message}") from e
            try:
                await self.insert_profile(user.id, account["full_name"])
            except PlatformError as e:
                raise PlatformError(f"Failed to create {role.value} profile: {e.message}") from e
            try:
                await self.assign_role(user.id, role)
            except PlatformError as e:
                raise PlatformError(f"Failed to assign {role.value} role: {e.message}") from e
            accounts.append({"email": account["email"], "password": account["password"], "role": role.value})

        logger.info("Demo accounts provisioned: %s", ", ".join(a["email"] for a in accounts))
        return accounts

    async def create_doctor(self, email: Optional[str], password: Optional[str], full_name: Optional[str]) -> dict:
        """
        Create a doctor account. If the profile or role step fails the new
        account is deleted again so no orphaned identity is left behind.
        """
        if not email or not password or not full_name:
            raise ValidationError("Email, password, and full name are required")

        try:
            user = await identity_service.create_user(email, password)
        except PlatformError as e:
            raise ValidationError(e.message) from e

        try:
            await self.insert_profile(user.id, full_name)
            await self.assign_role(user.id, Role.DOCTOR)
        except PlatformError as e:
            logger.error("Doctor provisioning failed for %s, rolling back account: %s", user.email, e.message)
            await identity_service.delete_user(user.id)
            raise ValidationError(e.message) from e

        logger.info("Doctor account created: %s (%s)", user.id, user.email)
        return {"id": user.id, "email": user.email, "fullName": full_name}


provisioning_service = ProvisioningService()
