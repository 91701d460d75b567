from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.auth import UserPrincipal, require_doctor
from medicare.database import get_db
from medicare.schemas.visit import VisitCreate, VisitListResponse, VisitResponse, VisitWithWorker
from medicare.services.visit_service import visit_service
from medicare.services.worker_service import worker_service

router = APIRouter()


@router.get("/mine", response_model=VisitListResponse)
async def my_records(
    search: str = Query("", description="Worker name, worker ID, or diagnosis"),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    visits = await visit_service.doctor_records(db, current_user.user_id, search.strip())
    return VisitListResponse(
        visits=[VisitWithWorker.model_validate(v) for v in visits],
        total=len(visits),
    )


@router.post("/workers/{worker_id}", response_model=VisitResponse, status_code=201)
async def record_visit(
    worker_id: str,
    data: VisitCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    worker = await worker_service.get_by_worker_id(db, worker_id)
    visit = await visit_service.record_visit(db, worker, current_user, data)
    return VisitResponse.model_validate(visit).model_copy(update={"doctor_name": current_user.display_name})
