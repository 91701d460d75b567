from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class DoctorResponse(BaseModel):
    id: int
    user_id: str
    full_name: str
    email: str
    created_at: Optional[datetime] = None


class DoctorListResponse(BaseModel):
    doctors: list[DoctorResponse]
    total: int
