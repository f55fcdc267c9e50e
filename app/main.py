import logging
import os

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.api.v1 import (
    admin_router,
    applications_router,
    auth_router,
    students_router,
    teachers_router,
    lms_router,
    timetable_router,
    notifications_router,
    events_router,
    portal_router,
    marks_router,
    achievements_router,
)
from app.services.admissions import AdmissionError

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME, openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

# Set up CORS
origins = [
    "http://localhost:3000",  # school portal front end
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)

# Mount static files for uploads
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# Include Routers
app.include_router(auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["Auth"])
app.include_router(
    applications_router,
    prefix=f"{settings.API_V1_STR}/applications",
    tags=["Applications"],
)
app.include_router(admin_router, prefix=f"{settings.API_V1_STR}/admin", tags=["Admin"])
app.include_router(
    students_router, prefix=f"{settings.API_V1_STR}/admin/students", tags=["Students"]
)
app.include_router(
    teachers_router, prefix=f"{settings.API_V1_STR}/admin/teachers", tags=["Teachers"]
)
app.include_router(
    timetable_router, prefix=f"{settings.API_V1_STR}/timetables", tags=["Timetables"]
)
app.include_router(
    notifications_router,
    prefix=f"{settings.API_V1_STR}/notifications",
    tags=["Notifications"],
)
app.include_router(
    lms_router,
    prefix=f"{settings.API_V1_STR}/learning-materials",
    tags=["Learning Materials"],
)
app.include_router(events_router, prefix=f"{settings.API_V1_STR}/events", tags=["Events"])
app.include_router(portal_router, prefix=f"{settings.API_V1_STR}/portal", tags=["Portal"])
app.include_router(marks_router, prefix=f"{settings.API_V1_STR}/marks", tags=["Marks"])
app.include_router(
    achievements_router,
    prefix=f"{settings.API_V1_STR}/achievements",
    tags=["Achievements"],
)


@app.exception_handler(AdmissionError)
async def admission_exception_handler(request: Request, exc: AdmissionError):
    logger.error("Admission decision failed: %s", exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation Error on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}"}
