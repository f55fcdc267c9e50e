import io
import logging
import random
from datetime import date
from typing import List, Optional
from uuid import UUID

import pandas as pd
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.api import deps
from app.core import security
from app.core.database import get_db
from app.models import (
    Achievement,
    Class,
    ClassRepresentative,
    Grade,
    Mark,
    Notification,
    Parent,
    Student,
    StudentParent,
    StudentSubject,
    User,
    UserRole,
)
from app.schemas.lms import SubjectAssignmentResult
from app.schemas.users import (
    BulkEnrollError,
    BulkEnrollResult,
    ParentResponse,
    StudentCreate,
    StudentDetailResponse,
    StudentResponse,
    StudentSubjectItem,
    StudentUpdate,
)
from app.services.admissions import split_parent_name
from app.services.subject_assignment import (
    SubjectAssignmentError,
    assign_subjects_to_student,
    try_assign_subjects,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(deps.require_admin)])

BULK_REQUIRED_COLUMNS = ["first_name", "last_name", "email"]


def generate_student_code(db: Session) -> str:
    """Random STU#### code for manually added students."""
    for _ in range(20):
        code = f"STU{random.randint(1000, 9999)}"
        if not db.query(Student).filter(Student.student_id == code).first():
            return code
    raise HTTPException(status_code=500, detail="Could not allocate a student ID")


def _get_student(db: Session, student_id: UUID) -> Student:
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student


def student_detail(student: Student) -> StudentDetailResponse:
    return StudentDetailResponse(
        **StudentResponse.model_validate(student).model_dump(),
        class_name=student.class_.display_name if student.class_ else None,
        parents=[
            ParentResponse(
                id=link.parent.id,
                first_name=link.parent.first_name,
                last_name=link.parent.last_name,
                email=link.parent.email,
                phone=link.parent.phone,
                address=link.parent.address,
                relationship=link.relationship_type,
            )
            for link in student.parent_links
        ],
        subjects=[
            StudentSubjectItem(
                subject_id=ss.subject_id, name=ss.subject.name, academic_year=ss.academic_year
            )
            for ss in sorted(student.subjects, key=lambda ss: (ss.academic_year, ss.subject.name))
        ],
    )


@router.get("/", response_model=List[StudentResponse])
def get_students(
    search: Optional[str] = None,
    class_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Student)
    if class_id:
        query = query.filter(Student.class_id == class_id)
    if search and search.strip():
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Student.first_name).like(term),
                func.lower(Student.last_name).like(term),
                func.lower(Student.student_id).like(term),
            )
        )
    return query.order_by(Student.last_name, Student.first_name).all()


def enroll_student(db: Session, student_in: StudentCreate) -> Student:
    """Create the login, student row, optional parent and subject set; the caller commits."""
    cls = None
    if student_in.class_id:
        cls = db.query(Class).filter(Class.id == student_in.class_id).first()
        if not cls:
            raise HTTPException(status_code=404, detail="Class not found")

    code = generate_student_code(db)
    user = User(
        email=student_in.email,
        password_hash=security.get_password_hash(f"{code}@school"),
        role=UserRole.student,
        first_name=student_in.first_name,
        last_name=student_in.last_name,
        is_active=True,
    )
    db.add(user)
    db.flush()

    student = Student(
        student_id=code,
        user_id=user.id,
        class_id=cls.id if cls else None,
        **student_in.model_dump(
            include={
                "first_name",
                "last_name",
                "email",
                "phone",
                "gender",
                "date_of_birth",
                "address",
                "profile_image_url",
            }
        ),
    )
    db.add(student)
    db.flush()

    if student_in.parent_name:
        first, last = split_parent_name(student_in.parent_name)
        parent = Parent(
            first_name=first,
            last_name=last,
            email=student_in.parent_email,
            phone=student_in.parent_phone,
            address=student_in.address,
        )
        db.add(parent)
        db.flush()
        db.add(StudentParent(student_id=student.id, parent_id=parent.id))

    if cls:
        try_assign_subjects(db, student.id, cls.id, cls.academic_year)
    return student


@router.post("/", response_model=StudentDetailResponse, status_code=201)
def create_student(student_in: StudentCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == student_in.email).first():
        raise HTTPException(status_code=409, detail="A user with this email already exists")

    student = enroll_student(db, student_in)
    db.commit()
    db.refresh(student)
    logger.info("Student %s added", student.student_id)
    return student_detail(student)


def _class_for_row(db: Session, grade_name: Optional[str], class_name: Optional[str], year: int):
    if not grade_name and not class_name:
        return None
    cls = (
        db.query(Class)
        .join(Grade)
        .filter(
            Grade.name == grade_name,
            Class.name == class_name,
            Class.academic_year == year,
        )
        .first()
    )
    if not cls:
        raise LookupError(f"Class {grade_name} {class_name} not found for {year}")
    return cls.id


@router.post("/bulk-enroll", response_model=BulkEnrollResult)
async def bulk_enroll(
    file: UploadFile = File(...),
    academic_year: Optional[int] = Form(None),
    db: Session = Depends(get_db),
):
    """Enroll students from a CSV export.

    Columns: first_name, last_name, email (required) and optionally gender,
    date_of_birth, phone, address, grade, class, parent_name, parent_phone,
    parent_email. ``grade`` + ``class`` place the student in that class for
    the academic year. Bad rows are reported and skipped.
    """
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="Only CSV files allowed")
    content = await file.read()
    try:
        # Keep blank lines so the index still maps to the file line
        df = pd.read_csv(io.BytesIO(content), dtype=str, skip_blank_lines=False)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Could not read CSV file")

    missing = [c for c in BULK_REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise HTTPException(
            status_code=400, detail=f"Missing columns: {', '.join(missing)}"
        )

    df = df.dropna(how="all")
    year = academic_year or date.today().year

    created, errors = [], []
    for index, row in df.iterrows():
        line = index + 2  # header is line 1
        # Empty cells come back as NaN or NA depending on the pandas version
        record = {
            k: None if pd.isna(v) else v.strip() if isinstance(v, str) else v
            for k, v in row.to_dict().items()
        }
        fields = {k: v for k, v in record.items() if k in StudentCreate.model_fields and v}
        try:
            fields["class_id"] = _class_for_row(db, record.get("grade"), record.get("class"), year)
            student_in = StudentCreate(**fields)
        except LookupError as e:
            errors.append(BulkEnrollError(line=line, error=str(e)))
            continue
        except ValidationError as e:
            problems = "; ".join(f"{err['loc'][0]}: {err['msg']}" for err in e.errors())
            errors.append(BulkEnrollError(line=line, error=problems))
            continue
        if db.query(User).filter(User.email == student_in.email).first():
            errors.append(BulkEnrollError(line=line, error=f"{student_in.email} already has an account"))
            continue

        student = enroll_student(db, student_in)
        created.append(student.student_id)

    db.commit()
    logger.info("Bulk enrolment: %d created, %d rejected", len(created), len(errors))
    return BulkEnrollResult(created=len(created), student_ids=created, errors=errors)


@router.get("/{student_id}", response_model=StudentDetailResponse)
def get_student(student_id: UUID, db: Session = Depends(get_db)):
    return student_detail(_get_student(db, student_id))


@router.patch("/{student_id}", response_model=StudentResponse)
def update_student(
    student_id: UUID, student_in: StudentUpdate, db: Session = Depends(get_db)
):
    student = _get_student(db, student_id)
    update_data = student_in.model_dump(exclude_unset=True)

    new_class = None
    if update_data.get("class_id"):
        new_class = db.query(Class).filter(Class.id == update_data["class_id"]).first()
        if not new_class:
            raise HTTPException(status_code=404, detail="Class not found")
        if new_class.id == student.class_id:
            new_class = None

    for field, value in update_data.items():
        setattr(student, field, value)
    if student.user and ("first_name" in update_data or "last_name" in update_data):
        student.user.first_name = student.first_name
        student.user.last_name = student.last_name
    if student.user and "is_active" in update_data:
        student.user.is_active = student.is_active

    if new_class:
        db.flush()
        result = try_assign_subjects(db, student.id, new_class.id, new_class.academic_year)
        logger.info(
            "Student %s moved to %s: %s", student.student_id, new_class.display_name, result.message
        )

    db.commit()
    db.refresh(student)
    return student


@router.delete("/{student_id}")
def delete_student(student_id: UUID, db: Session = Depends(get_db)):
    student = _get_student(db, student_id)
    user = student.user
    db.query(ClassRepresentative).filter(ClassRepresentative.student_id == student.id).delete()
    db.query(Mark).filter(Mark.student_id == student.id).delete()
    db.query(Achievement).filter(Achievement.student_id == student.id).delete()
    db.delete(student)
    if user:
        db.query(Notification).filter(Notification.user_id == user.id).delete()
        db.delete(user)
    db.commit()
    return {"message": "Student deleted successfully"}


@router.post("/{student_id}/assign-subjects", response_model=SubjectAssignmentResult)
def assign_subjects(
    student_id: UUID,
    academic_year: Optional[int] = None,
    db: Session = Depends(get_db),
):
    student = _get_student(db, student_id)
    if not student.class_id:
        raise HTTPException(status_code=400, detail="Student is not assigned to a class")
    try:
        result = assign_subjects_to_student(db, student.id, student.class_id, academic_year)
    except SubjectAssignmentError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=e.message)
    db.commit()
    return result


@router.delete("/{student_id}/subjects/{subject_id}")
def remove_student_subject(
    student_id: UUID,
    subject_id: UUID,
    academic_year: int,
    db: Session = Depends(get_db),
):
    deleted = (
        db.query(StudentSubject)
        .filter(
            StudentSubject.student_id == student_id,
            StudentSubject.subject_id == subject_id,
            StudentSubject.academic_year == academic_year,
        )
        .delete()
    )
    if not deleted:
        raise HTTPException(status_code=404, detail="Subject assignment not found")
    db.commit()
    return {"message": "Subject removed from student"}
