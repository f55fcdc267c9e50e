import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api import deps
from app.core.database import get_db
from app.models import Class, ClassSubject, Mark, Student, Subject, Teacher, User, UserRole
from app.schemas.marks import (
    ClassMarkItem,
    MarkEntry,
    MarkResponse,
    ResultsResponse,
    SchoolPerformance,
    TeacherPerformance,
    TopStudent,
)
from app.services import performance
from app.services.notifications import notify

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_class(db: Session, class_id: UUID) -> Class:
    cls = db.query(Class).filter(Class.id == class_id).first()
    if not cls:
        raise HTTPException(status_code=404, detail="Class not found")
    return cls


def _check_can_mark(db: Session, user: User, cls: Class, class_subject: ClassSubject) -> Optional[Teacher]:
    """Teachers may capture marks for subjects they teach in the class or for
    the class they lead. Admins may capture any."""
    if user.role == UserRole.admin:
        return None
    teacher = db.query(Teacher).filter(Teacher.user_id == user.id).first()
    if not teacher:
        raise HTTPException(status_code=404, detail="Teacher profile not found")
    if teacher.id not in (class_subject.teacher_id, cls.teacher_id):
        raise HTTPException(
            status_code=403, detail="You do not teach this subject in this class"
        )
    return teacher


@router.put("/", response_model=List[MarkResponse])
def save_marks(
    entry: MarkEntry,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_teacher),
):
    """Capture or correct term marks for a class and subject."""
    cls = _get_class(db, entry.class_id)
    subject = db.query(Subject).filter(Subject.id == entry.subject_id).first()
    if not subject:
        raise HTTPException(status_code=404, detail="Subject not found")
    class_subject = (
        db.query(ClassSubject)
        .filter(ClassSubject.class_id == cls.id, ClassSubject.subject_id == subject.id)
        .first()
    )
    if not class_subject:
        raise HTTPException(status_code=400, detail="Subject is not offered in this class")
    teacher = _check_can_mark(db, current_user, cls, class_subject)

    members = {s.id: s for s in cls.students}
    outsiders = [str(item.student_id) for item in entry.marks if item.student_id not in members]
    if outsiders:
        raise HTTPException(
            status_code=400, detail=f"Students not in this class: {', '.join(outsiders)}"
        )

    year = entry.academic_year or cls.academic_year
    saved = []
    for item in entry.marks:
        mark = (
            db.query(Mark)
            .filter(
                Mark.student_id == item.student_id,
                Mark.subject_id == subject.id,
                Mark.academic_year == year,
                Mark.term == entry.term,
            )
            .first()
        )
        if not mark:
            mark = Mark(
                student_id=item.student_id,
                subject_id=subject.id,
                academic_year=year,
                term=entry.term,
            )
            db.add(mark)
        mark.mark = item.mark
        mark.comments = item.comments
        mark.class_id = cls.id
        mark.teacher_id = teacher.id if teacher else class_subject.teacher_id
        saved.append(mark)

        student = members[item.student_id]
        if student.user_id:
            notify(
                db,
                "Marks Published",
                f"Your Term {entry.term} mark for {subject.name} is now available.",
                "marks",
                user_id=student.user_id,
            )

    db.commit()
    for mark in saved:
        db.refresh(mark)
    logger.info(
        "%d %s marks saved for %s term %d/%d",
        len(saved), subject.name, cls.display_name, entry.term, year,
    )
    return saved


@router.get("/class/{class_id}", response_model=List[ClassMarkItem])
def get_class_marks(
    class_id: UUID,
    subject_id: Optional[UUID] = None,
    term: Optional[int] = None,
    academic_year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_staff),
):
    cls = _get_class(db, class_id)
    query = db.query(Mark).filter(
        Mark.class_id == cls.id,
        Mark.academic_year == (academic_year or cls.academic_year),
    )
    if subject_id:
        query = query.filter(Mark.subject_id == subject_id)
    if term:
        query = query.filter(Mark.term == term)

    marks = sorted(
        query.all(),
        key=lambda m: (m.subject.name, m.term, m.student.last_name, m.student.first_name),
    )
    return [
        ClassMarkItem(
            **MarkResponse.model_validate(m).model_dump(),
            student_code=m.student.student_id,
            student_name=f"{m.student.first_name} {m.student.last_name}",
            subject_name=m.subject.name,
        )
        for m in marks
    ]


@router.get("/my-results", response_model=ResultsResponse)
def get_my_results(
    academic_year: Optional[int] = None,
    student: Student = Depends(deps.get_current_student),
    db: Session = Depends(get_db),
):
    return performance.student_results(db, student, academic_year or date.today().year)


@router.get("/students/{student_id}/results", response_model=ResultsResponse)
def get_student_results(
    student_id: UUID,
    academic_year: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_staff),
):
    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return performance.student_results(db, student, academic_year or date.today().year)


# Principal reports


@router.get("/performance/school", response_model=SchoolPerformance)
def get_school_performance(
    academic_year: Optional[int] = None,
    term: Optional[int] = Query(None, ge=1, le=4),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_principal),
):
    return performance.school_performance(db, academic_year or date.today().year, term)


@router.get("/performance/teachers", response_model=List[TeacherPerformance])
def get_teacher_performance(
    academic_year: Optional[int] = None,
    term: Optional[int] = Query(None, ge=1, le=4),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_principal),
):
    return performance.teacher_performance(db, academic_year or date.today().year, term)


@router.get("/performance/top-students", response_model=List[TopStudent])
def get_top_students(
    academic_year: Optional[int] = None,
    term: Optional[int] = Query(None, ge=1, le=4),
    grade_id: Optional[UUID] = None,
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_principal),
):
    return performance.top_students(
        db, academic_year or date.today().year, term, grade_id, limit
    )
