from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
import enum
from app.core.database import Base


class UserRole(str, enum.Enum):
    admin = "admin"
    principal = "principal"
    teacher = "teacher"
    student = "student"
    parent = "parent"


class Student(Base):
    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(String, unique=True, index=True, nullable=False)  # 202500001

    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String)
    phone = Column(String)
    gender = Column(String)
    date_of_birth = Column(String)
    address = Column(Text)
    profile_image_url = Column(String)

    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id"), nullable=True)

    # Linked User Account
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    class_ = relationship("app.models.lms.Class", back_populates="students")
    user = relationship("app.models.auth.User")
    parent_links = relationship(
        "StudentParent", back_populates="student", cascade="all, delete-orphan"
    )
    subjects = relationship(
        "app.models.lms.StudentSubject",
        back_populates="student",
        cascade="all, delete-orphan",
    )

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    email = Column(String)
    phone = Column(String)

    # Linked User Account
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    user = relationship("app.models.auth.User")
    subject_links = relationship(
        "app.models.lms.TeacherSubject",
        back_populates="teacher",
        cascade="all, delete-orphan",
    )
    classes = relationship("app.models.lms.Class", back_populates="teacher")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Parent(Base):
    __tablename__ = "parents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    email = Column(String)
    phone = Column(String)
    address = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    student_links = relationship("StudentParent", back_populates="parent")


class StudentParent(Base):
    __tablename__ = "student_parents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=False)
    parent_id = Column(UUID(as_uuid=True), ForeignKey("parents.id"), nullable=False)
    relationship_type = Column("relationship", String, default="Parent/Guardian")

    student = relationship("Student", back_populates="parent_links")
    parent = relationship("Parent", back_populates="student_links")
