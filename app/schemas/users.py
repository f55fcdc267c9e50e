from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID


# --- Student Schemas ---


class StudentBase(BaseModel):
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    profile_image_url: Optional[str] = None


class StudentCreate(StudentBase):
    email: str = Field(min_length=3)
    class_id: Optional[UUID] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    parent_email: Optional[str] = None


class StudentUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    profile_image_url: Optional[str] = None
    class_id: Optional[UUID] = None
    is_active: Optional[bool] = None


class StudentResponse(StudentBase):
    id: UUID
    student_id: str
    class_id: Optional[UUID] = None
    user_id: Optional[UUID] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParentResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    relationship: Optional[str] = None


class StudentSubjectItem(BaseModel):
    subject_id: UUID
    name: str
    academic_year: int


class StudentDetailResponse(StudentResponse):
    class_name: Optional[str] = None
    parents: List[ParentResponse] = []
    subjects: List[StudentSubjectItem] = []


# --- Teacher Schemas ---


class TeacherBase(BaseModel):
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class TeacherCreate(TeacherBase):
    email: str = Field(min_length=3)
    subject_ids: List[UUID] = []
    # Optional class-teacher assignment
    is_class_teacher: bool = False
    class_grade_id: Optional[UUID] = None
    class_name: Optional[str] = None


class TeacherUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject_ids: Optional[List[UUID]] = None


class TeacherResponse(TeacherBase):
    id: UUID
    user_id: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeacherClassItem(BaseModel):
    id: UUID
    name: str
    grade: Optional[str] = None
    academic_year: int


class TeacherDetailResponse(TeacherResponse):
    subjects: List[dict] = []
    classes: List[TeacherClassItem] = []


class BulkEnrollError(BaseModel):
    line: int
    error: str


class BulkEnrollResult(BaseModel):
    created: int
    student_ids: List[str] = []
    errors: List[BulkEnrollError] = []
