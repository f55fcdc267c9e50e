import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session

from app.api import deps
from app.core.database import get_db
from app.models.applications import Application, ApplicationStatus
from app.models.auth import User
from app.models.users import UserRole
from app.schemas.applications import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationDecision,
)
from app.services import admissions
from app.services.admissions import AdmissionError

logger = logging.getLogger(__name__)

router = APIRouter()

DECISION_ROLES = (UserRole.admin, UserRole.principal)

SORT_COLUMNS = {
    "first_name": func.lower(Application.first_name),
    "last_name": func.lower(Application.last_name),
    "term3": Application.term3_average,
    "term4": Application.term4_average,
    "overall": Application.overall_average,
    "date": Application.created_at,
    "status": Application.status,
}


@router.post("/", response_model=ApplicationResponse, status_code=201)
def submit_application(application_in: ApplicationCreate, db: Session = Depends(get_db)):
    return admissions.submit_application(db, application_in)


@router.get("/", response_model=List[ApplicationResponse])
def list_applications(
    status: Optional[ApplicationStatus] = None,
    search: Optional[str] = None,
    min_average: Optional[float] = None,
    sort_by: str = Query("date", pattern="^(first_name|last_name|term3|term4|overall|date|status)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_admin),
):
    query = db.query(Application)
    if status:
        query = query.filter(Application.status == status)
    if search and search.strip():
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Application.first_name).like(term),
                func.lower(Application.last_name).like(term),
                func.lower(cast(Application.id, String)).like(term),
            )
        )
    if min_average is not None:
        query = query.filter(
            Application.overall_average.isnot(None),
            Application.overall_average >= min_average,
        )

    column = SORT_COLUMNS[sort_by]
    query = query.order_by(column.desc() if order == "desc" else column.asc())
    return query.all()


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_admin),
):
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return application


# --- Admission decisions ---
# These two return {"success": ..., "error": ...} bodies; AdmissionError is
# rendered by the handler registered in app.main.


@router.post("/approve-application")
def approve_application(
    decision: ApplicationDecision,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(deps.get_current_user_optional),
):
    if not current_user:
        raise AdmissionError("Unauthorized", 401)
    if current_user.role not in DECISION_ROLES:
        raise AdmissionError("Forbidden", 403)
    logger.info("User %s approving application %s", current_user.email, decision.id)
    return admissions.approve_application(db, decision.id, decision.comments)


@router.post("/reject-application")
def reject_application(
    decision: ApplicationDecision,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(deps.get_current_user_optional),
):
    if not current_user:
        raise AdmissionError("Unauthorized", 401)
    if current_user.role not in DECISION_ROLES:
        raise AdmissionError("Forbidden", 403)
    logger.info("User %s rejecting application %s", current_user.email, decision.id)
    return admissions.reject_application(db, decision.id, decision.comments)
