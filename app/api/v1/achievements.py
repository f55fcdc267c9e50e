import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.api import deps
from app.core.database import get_db
from app.models import Achievement, AchievementType, Class, Grade, Student, User
from app.schemas.achievements import AchievementCreate, AchievementResponse
from app.services.notifications import notify

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_FIELDS = {
    "rank": (Achievement.rank, Achievement.achievement_date.desc()),
    "date": (Achievement.achievement_date.desc(), Achievement.rank),
    "title": (Achievement.title,),
    "type": (Achievement.achievement_type, Achievement.rank),
}


def achievement_response(achievement: Achievement) -> AchievementResponse:
    student = achievement.student
    grade = achievement.grade or (achievement.class_.grade if achievement.class_ else None)
    return AchievementResponse(
        id=achievement.id,
        student_id=achievement.student_id,
        achievement_type=achievement.achievement_type,
        title=achievement.title,
        description=achievement.description,
        achievement_date=achievement.achievement_date,
        class_id=achievement.class_id,
        grade_id=achievement.grade_id,
        rank=achievement.rank,
        student_name=f"{student.first_name} {student.last_name}",
        student_code=student.student_id,
        class_name=achievement.class_.display_name if achievement.class_ else None,
        grade_name=grade.name if grade else None,
        created_at=achievement.created_at,
    )


def _get_achievement(db: Session, achievement_id: UUID) -> Achievement:
    achievement = db.query(Achievement).filter(Achievement.id == achievement_id).first()
    if not achievement:
        raise HTTPException(status_code=404, detail="Achievement not found")
    return achievement


def _apply(db: Session, achievement: Achievement, data: AchievementCreate) -> Achievement:
    student = db.query(Student).filter(Student.id == data.student_id).first()
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    values = data.model_dump()
    values["achievement_type"] = data.achievement_type.value
    if data.class_id:
        cls = db.query(Class).filter(Class.id == data.class_id).first()
        if not cls:
            raise HTTPException(status_code=404, detail="Class not found")
        # A class implies its grade
        values["grade_id"] = values["grade_id"] or cls.grade_id
    if values["grade_id"] and not db.query(Grade).filter(Grade.id == values["grade_id"]).first():
        raise HTTPException(status_code=404, detail="Grade not found")

    for field, value in values.items():
        setattr(achievement, field, value)
    return achievement


@router.get("/", response_model=List[AchievementResponse])
def get_achievements(
    search: Optional[str] = None,
    achievement_type: Optional[AchievementType] = None,
    grade_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
    sort: str = "rank",
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    query = db.query(Achievement).join(Student, Achievement.student_id == Student.id)
    if achievement_type:
        query = query.filter(Achievement.achievement_type == achievement_type.value)
    if grade_id:
        query = query.outerjoin(Class, Achievement.class_id == Class.id).filter(
            or_(Achievement.grade_id == grade_id, Class.grade_id == grade_id)
        )
    if student_id:
        query = query.filter(Achievement.student_id == student_id)
    if search and search.strip():
        term = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Achievement.title).like(term),
                func.lower(Achievement.description).like(term),
                func.lower(Student.first_name).like(term),
                func.lower(Student.last_name).like(term),
            )
        )
    if sort not in SORT_FIELDS:
        raise HTTPException(
            status_code=400, detail=f"sort must be one of: {', '.join(SORT_FIELDS)}"
        )
    return [achievement_response(a) for a in query.order_by(*SORT_FIELDS[sort]).all()]


@router.get("/{achievement_id}", response_model=AchievementResponse)
def get_achievement(
    achievement_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_user),
):
    return achievement_response(_get_achievement(db, achievement_id))


@router.post("/", response_model=AchievementResponse, status_code=201)
def create_achievement(
    achievement_in: AchievementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_admin),
):
    achievement = _apply(db, Achievement(), achievement_in)
    db.add(achievement)
    db.flush()

    student = achievement.student
    if student.user_id:
        notify(
            db,
            "Achievement Recorded",
            f"Congratulations! '{achievement.title}' has been added to your achievements.",
            "achievement",
            user_id=student.user_id,
        )
    db.commit()
    db.refresh(achievement)
    logger.info("Achievement %r recorded for student %s", achievement.title, student.student_id)
    return achievement_response(achievement)


@router.put("/{achievement_id}", response_model=AchievementResponse)
def update_achievement(
    achievement_id: UUID,
    achievement_in: AchievementCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_admin),
):
    achievement = _apply(db, _get_achievement(db, achievement_id), achievement_in)
    db.commit()
    db.refresh(achievement)
    return achievement_response(achievement)


@router.delete("/{achievement_id}")
def delete_achievement(
    achievement_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.require_admin),
):
    db.delete(_get_achievement(db, achievement_id))
    db.commit()
    return {"message": "Achievement deleted successfully"}
