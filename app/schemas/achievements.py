from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import Optional
from datetime import date, datetime

from app.models.achievements import AchievementType


class AchievementBase(BaseModel):
    student_id: UUID
    achievement_type: AchievementType = AchievementType.academic
    title: str = Field(min_length=2)
    description: str = Field(min_length=10)
    achievement_date: date
    class_id: Optional[UUID] = None
    grade_id: Optional[UUID] = None
    rank: int = Field(default=1, ge=1)


class AchievementCreate(AchievementBase):
    pass


class AchievementResponse(AchievementBase):
    id: UUID
    student_name: str
    student_code: str
    class_name: Optional[str] = None
    grade_name: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
