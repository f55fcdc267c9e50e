from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from typing import Optional, List
from datetime import datetime


# --- Grades ---


class GradeCreate(BaseModel):
    name: str
    level: Optional[int] = None


class GradeResponse(GradeCreate):
    id: UUID
    model_config = ConfigDict(from_attributes=True)


# --- Classes ---


class ClassCreate(BaseModel):
    name: str = Field(min_length=1)
    grade_id: UUID
    teacher_id: Optional[UUID] = None
    academic_year: Optional[int] = None


class ClassUpdate(BaseModel):
    name: Optional[str] = None
    grade_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    academic_year: Optional[int] = None


class ClassResponse(BaseModel):
    id: UUID
    name: str
    grade_id: UUID
    teacher_id: Optional[UUID] = None
    academic_year: int
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class ClassStudentItem(BaseModel):
    id: UUID
    student_id: str
    name: str


class ClassSubjectItem(BaseModel):
    id: UUID
    subject_id: UUID
    subject_name: str
    teacher_id: Optional[UUID] = None
    teacher_name: Optional[str] = None


class RepresentativeItem(BaseModel):
    role: str
    student_id: UUID
    student_name: str


class ClassDetailResponse(ClassResponse):
    grade_name: Optional[str] = None
    teacher_name: Optional[str] = None
    students: List[ClassStudentItem] = []
    subjects: List[ClassSubjectItem] = []
    representatives: List[RepresentativeItem] = []


class ClassSubjectsUpdate(BaseModel):
    subject_ids: List[UUID]


class SubjectTeacherAssign(BaseModel):
    teacher_id: UUID


class AddStudentToClass(BaseModel):
    student_id: UUID


class RepresentativeAssign(BaseModel):
    student_id: UUID
    role: str


# --- Subjects ---


class SubjectCreate(BaseModel):
    name: str = Field(min_length=1)
    code: Optional[str] = None
    description: Optional[str] = None
    is_compulsory: bool = False


class SubjectUpdate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None
    is_compulsory: Optional[bool] = None


class SubjectResponse(SubjectCreate):
    id: UUID
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class SubjectAssignmentResult(BaseModel):
    success: bool
    message: str
    assigned_subjects: List[str] = []


# --- Learning Materials ---


class LearningMaterialResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    file_url: str
    material_type: str
    subject_id: UUID
    grade_id: UUID
    uploaded_by: Optional[UUID] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
