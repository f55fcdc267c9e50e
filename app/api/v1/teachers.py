import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.api import deps
from app.core import security
from app.core.database import get_db
from app.models import (
    Class,
    ClassSubject,
    Grade,
    LearningMaterial,
    Mark,
    Notification,
    Subject,
    Teacher,
    TeacherSubject,
    User,
    UserRole,
)
from app.schemas.users import (
    TeacherClassItem,
    TeacherCreate,
    TeacherDetailResponse,
    TeacherResponse,
    TeacherUpdate,
)
from app.services.notifications import notify

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(deps.require_admin)])


def default_teacher_password(last_name: str) -> str:
    return f"{last_name.lower()}123"


def _get_teacher(db: Session, teacher_id: UUID) -> Teacher:
    teacher = db.query(Teacher).filter(Teacher.id == teacher_id).first()
    if not teacher:
        raise HTTPException(status_code=404, detail="Teacher not found")
    return teacher


def _load_subjects(db: Session, subject_ids: List[UUID]) -> List[Subject]:
    if not subject_ids:
        return []
    subjects = db.query(Subject).filter(Subject.id.in_(set(subject_ids))).all()
    if len(subjects) != len(set(subject_ids)):
        raise HTTPException(status_code=404, detail="Subject not found")
    return subjects


def teacher_detail(teacher: Teacher) -> TeacherDetailResponse:
    return TeacherDetailResponse(
        **TeacherResponse.model_validate(teacher).model_dump(),
        subjects=[
            {"id": link.subject.id, "name": link.subject.name}
            for link in sorted(teacher.subject_links, key=lambda l: l.subject.name)
        ],
        classes=[
            TeacherClassItem(
                id=cls.id,
                name=cls.name,
                grade=cls.grade.name if cls.grade else None,
                academic_year=cls.academic_year,
            )
            for cls in teacher.classes
        ],
    )


@router.get("/", response_model=List[TeacherResponse])
def get_teachers(
    search: Optional[str] = None,
    subject_id: Optional[UUID] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Teacher)
    if subject_id:
        query = query.join(TeacherSubject).filter(TeacherSubject.subject_id == subject_id)
    if search and search.strip():
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Teacher.first_name).like(term),
                func.lower(Teacher.last_name).like(term),
            )
        )
    return query.order_by(Teacher.last_name, Teacher.first_name).all()


@router.post("/", response_model=TeacherDetailResponse, status_code=201)
def create_teacher(teacher_in: TeacherCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == teacher_in.email).first():
        raise HTTPException(status_code=409, detail="A user with this email already exists")
    subjects = _load_subjects(db, teacher_in.subject_ids)

    # 1. Create User Account
    user = User(
        email=teacher_in.email,
        password_hash=security.get_password_hash(default_teacher_password(teacher_in.last_name)),
        role=UserRole.teacher,
        first_name=teacher_in.first_name,
        last_name=teacher_in.last_name,
        is_active=True,
    )
    db.add(user)
    db.flush()

    # 2. Teacher record
    teacher = Teacher(
        user_id=user.id,
        first_name=teacher_in.first_name,
        last_name=teacher_in.last_name,
        email=teacher_in.email,
        phone=teacher_in.phone,
    )
    db.add(teacher)
    db.flush()

    # 3. Subjects taught
    for subject in subjects:
        db.add(TeacherSubject(teacher_id=teacher.id, subject_id=subject.id))

    # 4. Class teacher of a new class
    if teacher_in.is_class_teacher and teacher_in.class_grade_id and teacher_in.class_name:
        grade = db.query(Grade).filter(Grade.id == teacher_in.class_grade_id).first()
        if not grade:
            raise HTTPException(status_code=404, detail="Grade not found")
        year = date.today().year
        exists = (
            db.query(Class)
            .filter(
                Class.name == teacher_in.class_name,
                Class.grade_id == grade.id,
                Class.academic_year == year,
            )
            .first()
        )
        if exists:
            db.rollback()
            raise HTTPException(
                status_code=409,
                detail="A class with this name already exists for the selected grade and academic year.",
            )
        db.add(
            Class(
                name=teacher_in.class_name,
                grade_id=grade.id,
                teacher_id=teacher.id,
                academic_year=year,
            )
        )

    notify(
        db,
        "New Teacher Added",
        f"{teacher.first_name} {teacher.last_name} has been added as a teacher.",
        "teacher",
    )
    db.commit()
    db.refresh(teacher)
    logger.info("Teacher %s %s added", teacher.first_name, teacher.last_name)
    return teacher_detail(teacher)


@router.get("/{teacher_id}", response_model=TeacherDetailResponse)
def get_teacher(teacher_id: UUID, db: Session = Depends(get_db)):
    return teacher_detail(_get_teacher(db, teacher_id))


@router.patch("/{teacher_id}", response_model=TeacherDetailResponse)
def update_teacher(
    teacher_id: UUID, teacher_in: TeacherUpdate, db: Session = Depends(get_db)
):
    teacher = _get_teacher(db, teacher_id)
    update_data = teacher_in.model_dump(exclude_unset=True)
    subject_ids = update_data.pop("subject_ids", None)

    for field, value in update_data.items():
        setattr(teacher, field, value)
    if teacher.user:
        teacher.user.first_name = teacher.first_name
        teacher.user.last_name = teacher.last_name

    if subject_ids is not None:
        subjects = _load_subjects(db, subject_ids)
        wanted = {s.id for s in subjects}
        current = {link.subject_id: link for link in teacher.subject_links}
        for subject_id in wanted - current.keys():
            db.add(TeacherSubject(teacher_id=teacher.id, subject_id=subject_id))
        for subject_id in current.keys() - wanted:
            db.delete(current[subject_id])

    db.commit()
    db.refresh(teacher)
    return teacher_detail(teacher)


@router.delete("/{teacher_id}")
def delete_teacher(teacher_id: UUID, db: Session = Depends(get_db)):
    teacher = _get_teacher(db, teacher_id)
    db.query(Class).filter(Class.teacher_id == teacher.id).update({"teacher_id": None})
    db.query(ClassSubject).filter(ClassSubject.teacher_id == teacher.id).update({"teacher_id": None})
    db.query(Mark).filter(Mark.teacher_id == teacher.id).update({"teacher_id": None})
    user = teacher.user
    db.delete(teacher)
    if user:
        db.query(LearningMaterial).filter(LearningMaterial.uploaded_by == user.id).update(
            {"uploaded_by": None}
        )
        db.query(Notification).filter(Notification.user_id == user.id).delete()
        db.delete(user)
    db.commit()
    return {"message": "Teacher deleted successfully"}
