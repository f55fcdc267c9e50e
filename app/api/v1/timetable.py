import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api import deps
from app.core.database import get_db
from app.models import Class, ClassSubject, Student, Subject, Teacher, User, UserRole
from app.models.timetable import Timetable
from app.schemas import timetable as schemas
from app.services.notifications import notify

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_ids(values) -> set:
    ids = set()
    for value in values:
        if not value:
            continue
        try:
            ids.add(UUID(str(value)))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid id in schedule: {value}")
    return ids


def _validate_schedule(db: Session, schedule: dict) -> None:
    slots = [slot for periods in schedule.values() for slot in periods.values()]
    subject_ids = _parse_ids(s.get("subject_id") for s in slots)
    teacher_ids = _parse_ids(s.get("teacher_id") for s in slots)
    if subject_ids and db.query(Subject).filter(Subject.id.in_(subject_ids)).count() != len(subject_ids):
        raise HTTPException(status_code=400, detail="Schedule references an unknown subject")
    if teacher_ids and db.query(Teacher).filter(Teacher.id.in_(teacher_ids)).count() != len(teacher_ids):
        raise HTTPException(status_code=400, detail="Schedule references an unknown teacher")


@router.put("/", response_model=schemas.Timetable)
def save_timetable(
    timetable_in: schemas.TimetableSave,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_admin),
):
    cls = db.query(Class).filter(Class.id == timetable_in.class_id).first()
    if not cls:
        raise HTTPException(status_code=404, detail="Class not found")

    schedule = {
        day: {str(period): slot.model_dump() for period, slot in periods.items()}
        for day, periods in timetable_in.schedule.items()
    }
    _validate_schedule(db, schedule)

    timetable = db.query(Timetable).filter(
        Timetable.class_id == cls.id,
        Timetable.academic_year == timetable_in.academic_year,
        Timetable.term == timetable_in.term,
    ).first()

    if timetable:
        timetable.schedule = schedule
        title = "Timetable Updated"
        verb = "updated"
    else:
        timetable = Timetable(
            class_id=cls.id,
            academic_year=timetable_in.academic_year,
            term=timetable_in.term,
            schedule=schedule,
        )
        db.add(timetable)
        title = "New Timetable Created"
        verb = "created"

    notify(
        db,
        title,
        f"A timetable has been {verb} for {cls.display_name} for Term "
        f"{timetable_in.term}, {timetable_in.academic_year}.",
        "timetable",
    )
    db.commit()
    db.refresh(timetable)
    logger.info("Timetable %s %s", timetable.id, verb)
    return timetable


@router.get("/", response_model=List[schemas.Timetable])
def get_timetables(
    class_id: Optional[UUID] = None,
    academic_year: Optional[int] = None,
    term: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    query = db.query(Timetable)
    if class_id:
        query = query.filter(Timetable.class_id == class_id)
    if academic_year:
        query = query.filter(Timetable.academic_year == academic_year)
    if term:
        query = query.filter(Timetable.term == term)
    return query.order_by(Timetable.academic_year.desc(), Timetable.term).all()


@router.get("/terms", response_model=List[schemas.TermOption])
def get_terms(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    rows = (
        db.query(Timetable.academic_year, Timetable.term)
        .distinct()
        .order_by(Timetable.academic_year.desc(), Timetable.term)
        .all()
    )
    return [
        schemas.TermOption(
            academic_year=year, term=term, label=f"Term {term}, {year}"
        )
        for year, term in rows
    ]


@router.get("/my", response_model=List[schemas.Timetable])
def get_my_timetables(
    academic_year: Optional[int] = None,
    term: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    academic_year = academic_year or date.today().year

    if current_user.role == UserRole.student:
        student = db.query(Student).filter(Student.user_id == current_user.id).first()
        if not student or not student.class_id:
            return []
        class_ids = {student.class_id}
    elif current_user.role == UserRole.teacher:
        teacher = db.query(Teacher).filter(Teacher.user_id == current_user.id).first()
        if not teacher:
            return []
        led = db.query(Class.id).filter(Class.teacher_id == teacher.id)
        taught = db.query(ClassSubject.class_id).filter(ClassSubject.teacher_id == teacher.id)
        class_ids = {row[0] for row in led} | {row[0] for row in taught}
    else:
        raise HTTPException(status_code=400, detail="Only students and teachers have a personal timetable")

    if not class_ids:
        return []

    query = db.query(Timetable).filter(
        Timetable.class_id.in_(class_ids), Timetable.academic_year == academic_year
    )
    if term:
        query = query.filter(Timetable.term == term)
    return query.order_by(Timetable.term).all()


@router.get("/{timetable_id}", response_model=schemas.Timetable)
def get_timetable(
    timetable_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    timetable = db.query(Timetable).filter(Timetable.id == timetable_id).first()
    if not timetable:
        raise HTTPException(status_code=404, detail="Timetable not found")
    return timetable


@router.delete("/{timetable_id}")
def delete_timetable(
    timetable_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_admin),
):
    timetable = db.query(Timetable).filter(Timetable.id == timetable_id).first()
    if not timetable:
        raise HTTPException(status_code=404, detail="Timetable not found")
    db.delete(timetable)
    db.commit()
    return {"message": "Timetable deleted successfully"}
