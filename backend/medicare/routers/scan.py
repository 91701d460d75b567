import logging

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from medicare.auth import UserPrincipal, require_doctor
from medicare.config import get_settings
from medicare.database import get_db
from medicare.exceptions import ValidationError
from medicare.scanner.validation import validate_manual_id
from medicare.schemas.worker import WorkerResponse
from medicare.services.qr_service import qr_service
from medicare.services.worker_service import worker_service

logger = logging.getLogger(__name__)

router = APIRouter()


class ManualScanRequest(BaseModel):
    worker_id: str = ""


class ScanResult(BaseModel):
    worker_id: str
    source: str
    worker: WorkerResponse


@router.post("/image", response_model=ScanResult)
async def scan_image(
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    """Decode a worker QR code from an uploaded photo or screenshot."""
    limit = get_settings().scan_max_upload_bytes
    content = await file.read(limit + 1)
    if len(content) > limit:
        raise ValidationError(f"Image is too large (max {limit} bytes)")
    worker_id = await run_in_threadpool(qr_service.decode_image, content)
    logger.info("Decoded worker ID %s from uploaded image %s", worker_id, file.filename)
    worker = await worker_service.get_by_worker_id(db, worker_id)
    return ScanResult(worker_id=worker.worker_id, source="image", worker=WorkerResponse.model_validate(worker))


@router.post("/manual", response_model=ScanResult)
async def scan_manual(
    body: ManualScanRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(require_doctor),
):
    """Camera-free fallback: resolve a typed worker ID."""
    worker_id = validate_manual_id(body.worker_id)
    worker = await worker_service.get_by_worker_id(db, worker_id)
    return ScanResult(worker_id=worker.worker_id, source="manual", worker=WorkerResponse.model_validate(worker))
