from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.auth import UserPrincipal, require_admin, require_staff
from medicare.database import get_db
from medicare.schemas.visit import VisitHistoryResponse
from medicare.schemas.worker import WorkerCreate, WorkerListItem, WorkerListResponse, WorkerResponse
from medicare.services.qr_service import qr_service
from medicare.services.visit_service import visit_service
from medicare.services.worker_service import worker_service

router = APIRouter()


@router.get("", response_model=WorkerListResponse)
async def list_workers(
    search: str = Query("", description="Search by name or worker ID"),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_admin),
):
    rows = await worker_service.list_workers(db, search.strip())
    workers = [
        WorkerListItem.model_validate(worker).model_copy(update={"visit_count": count})
        for worker, count in rows
    ]
    return WorkerListResponse(workers=workers, total=len(workers))


@router.post("", response_model=WorkerResponse, status_code=201)
async def register_worker(
    data: WorkerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_admin),
):
    worker = await worker_service.register(db, data, created_by=current_user.user_id)
    return WorkerResponse.model_validate(worker)


@router.get("/{worker_id}", response_model=WorkerResponse)
async def get_worker(
    worker_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_staff),
):
    worker = await worker_service.get_by_worker_id(db, worker_id)
    return WorkerResponse.model_validate(worker)


@router.delete("/{worker_id}")
async def delete_worker(
    worker_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_admin),
):
    await worker_service.delete(db, worker_id)
    return {"deleted": True, "worker_id": worker_id}


@router.get("/{worker_id}/visits", response_model=VisitHistoryResponse)
async def worker_visit_history(
    worker_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_staff),
):
    worker = await worker_service.get_by_worker_id(db, worker_id)
    visits = await visit_service.history(db, worker)
    return VisitHistoryResponse(worker_id=worker.worker_id, visits=visits, total=len(visits))


@router.get("/{worker_id}/qr.png")
async def worker_qr_png(
    worker_id: str,
    size: int = Query(200, ge=64, le=2048),
    download: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_staff),
):
    worker = await worker_service.get_by_worker_id(db, worker_id)
    headers = {}
    if download:
        headers["Content-Disposition"] = f'attachment; filename="{qr_service.download_filename(worker.worker_id)}"'
    return Response(
        content=qr_service.encode_png(worker.worker_id, size=size),
        media_type="image/png",
        headers=headers,
    )


@router.get("/{worker_id}/qr.svg")
async def worker_qr_svg(
    worker_id: str,
    size: int = Query(200, ge=64, le=2048),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_staff),
):
    worker = await worker_service.get_by_worker_id(db, worker_id)
    return Response(content=qr_service.encode_svg(worker.worker_id, size=size), media_type="image/svg+xml")


@router.get("/{worker_id}/print", response_class=HTMLResponse)
async def worker_qr_print(
    worker_id: str,
    size: int = Query(200, ge=64, le=2048),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_staff),
):
    worker = await worker_service.get_by_worker_id(db, worker_id)
    return HTMLResponse(qr_service.render_print_document(worker.worker_id, worker.full_name, size=size))
