from pydantic import BaseModel, Field
from datetime import datetime
from typing import Literal, Optional


class WorkerBase(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    age: int = Field(..., ge=18, le=100)
    gender: Literal["male", "female", "other"] = "male"


class WorkerCreate(WorkerBase):
    pass


class WorkerResponse(WorkerBase):
    id: int
    worker_id: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WorkerListItem(WorkerResponse):
    visit_count: int = 0


class WorkerListResponse(BaseModel):
    workers: list[WorkerListItem]
    total: int


class WorkerSummary(BaseModel):
    worker_id: str
    full_name: str
    age: Optional[int] = None
    gender: Optional[str] = None

    class Config:
        from_attributes = True
