from pydantic import BaseModel
from datetime import date, datetime
from typing import Optional
from medicare.schemas.worker import WorkerSummary


class VisitCreate(BaseModel):
    visit_date: Optional[date] = None
    symptoms: Optional[str] = None
    diagnosis: Optional[str] = None
    notes: Optional[str] = None


class VisitResponse(BaseModel):
    id: int
    visit_date: date
    symptoms: str
    diagnosis: str
    notes: Optional[str] = None
    doctor_id: str
    doctor_name: str = "Unknown"
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VisitWithWorker(BaseModel):
    id: int
    visit_date: date
    symptoms: str
    diagnosis: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    worker: Optional[WorkerSummary] = None

    class Config:
        from_attributes = True


class VisitHistoryResponse(BaseModel):
    worker_id: str
    visits: list[VisitResponse]
    total: int


class VisitListResponse(BaseModel):
    visits: list[VisitWithWorker]
    total: int
