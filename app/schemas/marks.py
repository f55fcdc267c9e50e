from pydantic import BaseModel, ConfigDict, Field, field_validator
from uuid import UUID
from typing import Optional, List, Dict
from datetime import datetime


# --- Mark capture ---


class MarkEntryItem(BaseModel):
    student_id: UUID
    mark: float = Field(ge=0, le=100)
    comments: Optional[str] = None


class MarkEntry(BaseModel):
    class_id: UUID
    subject_id: UUID
    term: int = Field(ge=1, le=4)
    academic_year: Optional[int] = None
    marks: List[MarkEntryItem] = Field(min_length=1)

    @field_validator("marks")
    @classmethod
    def one_mark_per_student(cls, v):
        ids = [item.student_id for item in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Each student may only appear once")
        return v


class MarkResponse(BaseModel):
    id: UUID
    student_id: UUID
    subject_id: UUID
    class_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    academic_year: int
    term: int
    mark: float
    comments: Optional[str] = None
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ClassMarkItem(MarkResponse):
    student_code: str
    student_name: str
    subject_name: str


# --- Student results ---


class SubjectResult(BaseModel):
    subject_id: UUID
    subject: str
    terms: Dict[int, float]
    average: float
    symbol: str


class ResultsResponse(BaseModel):
    academic_year: int
    subjects: List[SubjectResult]
    term_averages: Dict[int, float]
    overall_average: Optional[float] = None
    overall_symbol: Optional[str] = None


# --- Principal reports ---


class GroupAverage(BaseModel):
    name: str
    average: float
    count: int


class SchoolPerformance(BaseModel):
    academic_year: int
    term: Optional[int] = None
    overall_average: Optional[float] = None
    pass_rate: Optional[float] = None
    mark_count: int
    grade_averages: List[GroupAverage]
    class_averages: List[GroupAverage]
    subject_averages: List[GroupAverage]


class TeacherPerformance(BaseModel):
    teacher_id: UUID
    name: str
    subjects: List[str]
    class_count: int
    average: Optional[float] = None
    pass_rate: Optional[float] = None
    mark_count: int


class TopStudent(BaseModel):
    position: int
    student_id: UUID
    student_code: str
    name: str
    class_name: Optional[str] = None
    average: float
    subject_count: int
