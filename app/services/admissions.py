"""Admission decisions for Grade-8 applications.

Approving an application provisions everything the new learner needs: a
sequential student ID, a login, the student and parent records and a
welcome notification. All of it is written in one transaction.
"""
import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core import security
from app.core.config import settings
from app.models.applications import Application, ApplicationStatus
from app.models.auth import User
from app.models.users import UserRole, Student, Parent, StudentParent
from app.schemas.applications import ApplicationCreate
from app.services.notifications import notify, notify_safely
from app.utils import email

logger = logging.getLogger(__name__)

PARENT_RELATIONSHIP = "Parent/Guardian"


class AdmissionError(Exception):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def submit_application(db: Session, data: ApplicationCreate) -> Application:
    payload = data.model_dump()
    payload["academic_year"] = payload.get("academic_year") or date.today().year
    application = Application(**payload, status=ApplicationStatus.pending)
    db.add(application)
    db.flush()
    notify(
        db,
        "New Application Received",
        f"{application.first_name} {application.last_name} applied for "
        f"{settings.ADMISSION_GRADE} ({application.academic_year}).",
        "application",
    )
    db.commit()
    db.refresh(application)
    logger.info("Application %s submitted", application.id)
    return application


def next_student_id(db: Session, academic_year: int) -> str:
    """Academic year followed by a zero-padded sequence, e.g. 202500001.

    Continues from the highest sequence issued for the year, so ids freed by
    deleted students are not handed out again.
    """
    prefix = str(academic_year)
    width = settings.STUDENT_ID_SEQUENCE_WIDTH
    rows = db.query(Student.student_id).filter(Student.student_id.like(f"{prefix}%")).all()
    sequences = [
        int(code[len(prefix):])
        for (code,) in rows
        if len(code) == len(prefix) + width and code[len(prefix):].isdigit()
    ]
    return f"{prefix}{max(sequences, default=0) + 1:0{width}d}"


def temporary_password(application: Application) -> str:
    return f"{application.last_name.lower()}{application.academic_year}"


def split_parent_name(parent_name: str):
    parts = parent_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def _load_pending(db: Session, application_id: Optional[UUID]) -> Application:
    if not application_id:
        raise AdmissionError("Application ID is required", 400)
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise AdmissionError("Application not found", 404)
    if application.status != ApplicationStatus.pending:
        raise AdmissionError(
            f"Application has already been {application.status.value}", 400
        )
    return application


def approve_application(
    db: Session, application_id: Optional[UUID], comments: Optional[str] = None
) -> dict:
    application = _load_pending(db, application_id)

    if db.query(User).filter(User.email == application.email).first():
        raise AdmissionError(f"A user account already exists for {application.email}", 409)

    try:
        application.status = ApplicationStatus.approved
        application.comments = security.sanitize_input(comments)
        application.updated_at = security.utcnow()

        student_id = next_student_id(db, application.academic_year)
        password = temporary_password(application)

        user = User(
            email=application.email,
            password_hash=security.get_password_hash(password),
            role=UserRole.student,
            first_name=application.first_name,
            last_name=application.last_name,
            is_active=True,
        )
        db.add(user)
        db.flush()

        student = Student(
            student_id=student_id,
            user_id=user.id,
            first_name=application.first_name,
            last_name=application.last_name,
            email=application.email,
            phone=application.phone,
            date_of_birth=application.date_of_birth,
            gender=application.gender,
            address=application.address,
            profile_image_url=None,
        )
        db.add(student)

        parent_first, parent_last = split_parent_name(application.parent_name)
        parent = Parent(
            first_name=parent_first,
            last_name=parent_last,
            email=application.parent_email or None,
            phone=application.parent_phone,
            address=application.address,
        )
        db.add(parent)
        db.flush()

        db.add(
            StudentParent(
                student_id=student.id,
                parent_id=parent.id,
                relationship_type=PARENT_RELATIONSHIP,
            )
        )
        db.flush()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error approving application %s", application_id)
        raise AdmissionError(str(e.orig) if getattr(e, "orig", None) else str(e), 500)

    notify_safely(
        db,
        "Application Approved",
        f"Congratulations! Your application has been approved. Your student ID is "
        f"{student_id}. Please log in to your account to complete your profile.",
        "application_status",
        user_id=user.id,
    )

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error approving application %s", application_id)
        raise AdmissionError(str(e), 500)

    logger.info("Application %s approved as student %s", application.id, student_id)
    email.send_application_approved_email(
        application.email, application.first_name, student_id, password
    )

    return {
        "success": True,
        "message": "Application approved successfully",
        "studentId": student_id,
    }


def reject_application(
    db: Session, application_id: Optional[UUID], comments: Optional[str] = None
) -> dict:
    application = _load_pending(db, application_id)

    application.status = ApplicationStatus.rejected
    application.comments = security.sanitize_input(comments)
    application.updated_at = security.utcnow()
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error rejecting application %s", application_id)
        raise AdmissionError(str(e), 500)

    logger.info("Application %s rejected", application.id)
    email.send_application_rejected_email(
        application.email, application.first_name, application.comments
    )

    return {"success": True, "message": "Application rejected successfully"}
