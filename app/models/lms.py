from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from app.core.database import Base


class RepresentativeRole(str, enum.Enum):
    class_captain = "class_captain"
    vice_captain = "vice_captain"
    prefect = "prefect"
    monitor = "monitor"


class MaterialType(str, enum.Enum):
    notes = "notes"
    worksheet = "worksheet"
    past_paper = "past_paper"
    presentation = "presentation"
    video = "video"
    other = "other"


class Grade(Base):
    __tablename__ = "grades"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, unique=True, nullable=False)  # e.g. "Grade 10"
    level = Column(Integer, nullable=True)  # 8, 9, 10...
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    classes = relationship("Class", back_populates="grade")


class Class(Base):
    __tablename__ = "classes"
    __table_args__ = (
        UniqueConstraint("name", "grade_id", "academic_year", name="uq_class_grade_year"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)  # Stream letter for grades 10-12
    grade_id = Column(UUID(as_uuid=True), ForeignKey("grades.id"), nullable=False)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id"), nullable=True)
    academic_year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    grade = relationship("Grade", back_populates="classes")
    teacher = relationship("app.models.users.Teacher", back_populates="classes")
    students = relationship("app.models.users.Student", back_populates="class_")
    class_subjects = relationship(
        "ClassSubject", back_populates="class_", cascade="all, delete-orphan"
    )
    representatives = relationship(
        "ClassRepresentative", back_populates="class_", cascade="all, delete-orphan"
    )

    @property
    def display_name(self) -> str:
        return f"{self.grade.name} {self.name}" if self.grade else self.name


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, unique=True, nullable=False)
    code = Column(String, unique=True, nullable=True)
    description = Column(Text)
    is_compulsory = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ClassSubject(Base):
    __tablename__ = "class_subjects"
    __table_args__ = (
        UniqueConstraint("class_id", "subject_id", name="uq_class_subject"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id"), nullable=False)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id"), nullable=False)
    # Subject teacher for this class
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    class_ = relationship("Class", back_populates="class_subjects")
    subject = relationship("Subject")
    teacher = relationship("app.models.users.Teacher")


class TeacherSubject(Base):
    __tablename__ = "teacher_subjects"
    __table_args__ = (
        UniqueConstraint("teacher_id", "subject_id", name="uq_teacher_subject"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id"), nullable=False)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id"), nullable=False)

    teacher = relationship("app.models.users.Teacher", back_populates="subject_links")
    subject = relationship("Subject")


class StudentSubject(Base):
    __tablename__ = "student_subjects"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "subject_id", "academic_year", name="uq_student_subject_year"
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=False)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id"), nullable=False)
    academic_year = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student = relationship("app.models.users.Student", back_populates="subjects")
    subject = relationship("Subject")


class ClassRepresentative(Base):
    __tablename__ = "class_representatives"
    __table_args__ = (
        UniqueConstraint("class_id", "role", name="uq_class_representative_role"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=False)
    role = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    class_ = relationship("Class", back_populates="representatives")
    student = relationship("app.models.users.Student")


class LearningMaterial(Base):
    __tablename__ = "learning_materials"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    description = Column(Text)
    file_url = Column(String, nullable=False)
    material_type = Column(String, nullable=False, default=MaterialType.notes.value)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id"), nullable=False)
    grade_id = Column(UUID(as_uuid=True), ForeignKey("grades.id"), nullable=False)
    # Uploading user (teacher or admin)
    uploaded_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    subject = relationship("Subject")
    grade = relationship("Grade")
