from app.api.v1.admin import router as admin_router
from app.api.v1.applications import router as applications_router
from app.api.v1.auth import router as auth_router
from app.api.v1.students import router as students_router
from app.api.v1.teachers import router as teachers_router
from app.api.v1.lms import router as lms_router
from app.api.v1.timetable import router as timetable_router
from app.api.v1.notifications import router as notifications_router
from app.api.v1.website import router as events_router
from app.api.v1.portal import router as portal_router
from app.api.v1.marks import router as marks_router
from app.api.v1.achievements import router as achievements_router

__all__ = [
    "admin_router",
    "applications_router",
    "auth_router",
    "students_router",
    "teachers_router",
    "lms_router",
    "timetable_router",
    "notifications_router",
    "events_router",
    "portal_router",
    "marks_router",
    "achievements_router",
]
