from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.auth import UserPrincipal, require_admin
from medicare.database import get_db
from medicare.schemas.doctor import DoctorListResponse
from medicare.services.doctor_service import doctor_service

router = APIRouter()


@router.get("", response_model=DoctorListResponse)
async def list_doctors(
    search: str = Query("", description="Filter by doctor name"),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_admin),
):
    doctors = await doctor_service.list_doctors(db, search.strip())
    return DoctorListResponse(doctors=doctors, total=len(doctors))


@router.delete("/{user_id}")
async def delete_doctor(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_admin),
):
    await doctor_service.delete_doctor(db, user_id)
    return {"deleted": True, "user_id": user_id}
