from pydantic import BaseModel
from medicare.schemas.visit import VisitWithWorker


class AdminStats(BaseModel):
    workers: int
    doctors: int
    visits: int


class DoctorStats(BaseModel):
    my_visits: int
    today_visits: int
    total_workers: int


class AdminDashboardResponse(BaseModel):
    stats: AdminStats
    recent_visits: list[VisitWithWorker]


class DoctorDashboardResponse(BaseModel):
    stats: DoctorStats
    recent_visits: list[VisitWithWorker]
