import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.auth import UserPrincipal, create_token, get_current_user, load_principal
from medicare.database import get_db
from medicare.exceptions import PlatformError, Unauthorized, ValidationError
from medicare.schemas.auth import LoginRequest, MeResponse, SignupRequest, TokenResponse
from medicare.services.identity_service import identity_service
from medicare.services.provisioning_service import provisioning_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _me(principal: UserPrincipal) -> dict:
    return {
        "id": principal.user_id,
        "email": principal.email,
        "full_name": principal.display_name,
        "role": principal.role.value if principal.role else None,
        "home_path": principal.role.home_path if principal.role else None,
    }


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Exchange email + password for a bearer token."""
    user = await identity_service.authenticate(db, body.email, body.password)
    if user is None:
        raise Unauthorized("Invalid credentials")

    principal = await load_principal(db, user.id)
    return TokenResponse(access_token=create_token(user.id), **_me(principal))


@router.post("/signup", response_model=MeResponse, status_code=201)
async def signup(body: SignupRequest):
    """
    Self-service account creation. The account gets a profile but no role;
    an administrator must provision it before any privileged operation works.
    """
    user = await identity_service.create_user(body.email, body.password)
    try:
        await provisioning_service.insert_profile(user.id, body.full_name)
    except PlatformError as e:
        await identity_service.delete_user(user.id)
        raise ValidationError(e.message) from e
    return MeResponse(id=user.id, email=user.email, full_name=body.full_name)


@router.get("/me", response_model=MeResponse)
async def me(current_user: UserPrincipal = Depends(get_current_user)):
    return MeResponse(**_me(current_user))
