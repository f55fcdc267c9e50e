from app.schemas.applications import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationDecision,
)
from app.schemas.users import (
    StudentCreate,
    StudentUpdate,
    StudentResponse,
    StudentDetailResponse,
    TeacherCreate,
    TeacherUpdate,
    TeacherResponse,
    TeacherDetailResponse,
)
from app.schemas.communication import NotificationCreate, NotificationResponse
from app.schemas.website import EventCreate, EventResponse
from app.schemas.dashboard import DashboardOverviewResponse, DashboardStatsResponse
