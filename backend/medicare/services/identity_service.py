"""
Identity administration: create, delete and authenticate accounts.

Each call runs in its own session and commits immediately, the same way a
hosted auth admin API would. Callers that chain further steps after
create_user are responsible for compensating with delete_user.
"""

import logging
from typing import Optional

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.auth import hash_password, verify_password
from medicare.database import async_session
from medicare.exceptions import ValidationError, PlatformError
from medicare.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class IdentityService:
    def __init__(self, session_factory=None):
        self._session_factory = session_factory

    @property
    def session_factory(self):
        return self._session_factory or async_session

    async def create_user(self, email: str, password: str) -> User:
        email = normalize_email(email)
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise ValidationError("Unable to validate email address: invalid format")
        if not password or len(password) < 6:
            raise ValidationError("Password should be at least 6 characters")

        user = User(email=email, password_hash=hash_password(password))
        async with self.session_factory() as session:
            session.add(user)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise ValidationError("A user with this email address has already been registered")
            except SQLAlchemyError as e:
                await session.rollback()
                raise PlatformError(f"Failed to create user: {e}") from e
        logger.info("Created account %s (%s)", user.id, email)
        return user

    async def delete_user(self, user_id: str) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(User).where(User.id == user_id))
            await session.commit()
        logger.info("Deleted account %s", user_id)

    async def get_user(self, user_id: str) -> Optional[User]:
        async with self.session_factory() as session:
            return await session.get(User, user_id)

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> Optional[User]:
        """Return the account when the password matches; None otherwise."""
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password or "", user.password_hash):
            logger.warning("Failed login for %s", normalize_email(email))
            return None
        return user


identity_service = IdentityService()
