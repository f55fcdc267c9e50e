from pydantic import BaseModel
from typing import List

from app.schemas.applications import ApplicationResponse


class DashboardStatsResponse(BaseModel):
    total_students: int
    total_teachers: int
    total_classes: int
    pending_applications: int
    unread_notifications: int


class DashboardOverviewResponse(BaseModel):
    stats: DashboardStatsResponse
    recent_applications: List[ApplicationResponse]
