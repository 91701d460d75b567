"""
Auth module: password hashing, JWT creation/validation and the FastAPI
dependencies that resolve and gate the acting user.

Tokens only carry the account id. The role is always re-read from the
user_roles table, so a token issued before a role change (or a forged role
claim) never grants anything the database does not.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import bcrypt
from fastapi import Depends, Request
from jose import jwt, JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.config import get_settings
from medicare.database import get_db
from medicare.exceptions import Unauthorized, Forbidden
from medicare.roles import Role

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


@dataclass
class UserPrincipal:
    """Resolved identity attached to each request."""
    user_id: str
    email: str
    display_name: str
    role: Optional[Role] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_doctor(self) -> bool:
        return self.role is Role.DOCTOR

    def has_role(self, *roles: Role) -> bool:
        return self.role is not None and self.role in roles


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def create_token(user_id: str) -> str:
    """Create a signed JWT for the given account id."""
    settings = get_settings()
    now = int(time.time())
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + settings.token_expire_seconds,
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[str]:
    """Decode and validate a JWT. Returns the account id, or None if invalid/expired."""
    try:
        settings = get_settings()
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub") or None


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return auth_header[7:].strip() or None


async def load_principal(db: AsyncSession, user_id: str) -> Optional[UserPrincipal]:
    """Build a principal for an account id from the users/profiles/user_roles tables."""
    from medicare.models.user import User, Profile, UserRole

    result = await db.execute(
        select(User.id, User.email, Profile.full_name, UserRole.role)
        .outerjoin(Profile, Profile.user_id == User.id)
        .outerjoin(UserRole, UserRole.user_id == User.id)
        .where(User.id == user_id)
    )
    row = result.first()
    if row is None:
        return None
    return UserPrincipal(
        user_id=row.id,
        email=row.email,
        display_name=row.full_name or row.email,
        role=Role.parse(row.role) if row.role is not None else None,
    )


async def principal_from_request(request: Request, db: AsyncSession) -> UserPrincipal:
    """Verify the bearer credential and resolve its principal, raising Unauthorized."""
    token = bearer_token(request)
    if token is None:
        raise Unauthorized()
    user_id = decode_token(token)
    if user_id is None:
        logger.warning("Rejected invalid or expired token for %s %s", request.method, request.url.path)
        raise Unauthorized()
    principal = await load_principal(db, user_id)
    if principal is None:
        logger.warning("Token subject %s no longer exists", user_id)
        raise Unauthorized()
    return principal


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> UserPrincipal:
    """FastAPI dependency. 401 when the Authorization header is absent or invalid."""
    return await principal_from_request(request, db)


def require_role(*roles: Role):
    """Dependency factory gating an endpoint to the given roles."""
    allowed = ", ".join(r.value for r in roles)

    async def dependency(current_user: UserPrincipal = Depends(get_current_user)) -> UserPrincipal:
        if not current_user.has_role(*roles):
            logger.warning(
                "Forbidden: user %s with role %s requires %s",
                current_user.user_id,
                current_user.role.value if current_user.role else None,
                allowed,
            )
            raise Forbidden(f"This operation requires the {allowed} role")
        return current_user

    return dependency


require_admin = require_role(Role.ADMIN)
require_doctor = require_role(Role.DOCTOR)
require_staff = require_role(Role.ADMIN, Role.DOCTOR)
