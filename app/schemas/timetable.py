from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import Dict, Optional
from datetime import datetime


class PeriodSlot(BaseModel):
    model_config = ConfigDict(extra="ignore")
    subject_id: Optional[str] = ""
    teacher_id: Optional[str] = ""


# day -> period -> slot
Schedule = Dict[str, Dict[str, PeriodSlot]]


class TimetableSave(BaseModel):
    class_id: UUID
    academic_year: int
    term: int = Field(ge=1, le=4)
    schedule: Schedule = {}


class Timetable(BaseModel):
    id: UUID
    class_id: UUID
    academic_year: int
    term: int
    schedule: Schedule
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class TermOption(BaseModel):
    academic_year: int
    term: int
    label: str
