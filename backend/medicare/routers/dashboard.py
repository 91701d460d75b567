from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.auth import UserPrincipal, require_admin, require_doctor
from medicare.database import get_db
from medicare.schemas.dashboard import AdminDashboardResponse, DoctorDashboardResponse
from medicare.schemas.visit import VisitWithWorker
from medicare.services.dashboard_service import dashboard_service

router = APIRouter()


@router.get("/admin", response_model=AdminDashboardResponse)
async def admin_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_admin),
):
    stats = await dashboard_service.admin_stats()
    recent = await dashboard_service.recent_visits(db)
    return AdminDashboardResponse(
        stats=stats,
        recent_visits=[VisitWithWorker.model_validate(v) for v in recent],
    )


@router.get("/doctor", response_model=DoctorDashboardResponse)
async def doctor_dashboard(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    stats = await dashboard_service.doctor_stats(current_user.user_id)
    recent = await dashboard_service.recent_visits(db, doctor_id=current_user.user_id)
    return DoctorDashboardResponse(
        stats=stats,
        recent_visits=[VisitWithWorker.model_validate(v) for v in recent],
    )
