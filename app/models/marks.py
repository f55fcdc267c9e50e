from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base

PASS_MARK = 50.0

# Lower bound of each symbol, highest first
SYMBOLS = [(80, "A"), (70, "B"), (60, "C"), (50, "D"), (40, "E")]


def mark_symbol(percentage: float) -> str:
    for bound, symbol in SYMBOLS:
        if percentage >= bound:
            return symbol
    return "F"


class Mark(Base):
    """A student's term mark (percentage) for one subject."""

    __tablename__ = "marks"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "subject_id", "academic_year", "term", name="uq_mark_student_subject_term"
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=False, index=True)
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id"), nullable=False)
    # Class the student was in when the mark was captured
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id"), nullable=True)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id"), nullable=True)
    academic_year = Column(Integer, nullable=False)
    term = Column(Integer, nullable=False)
    mark = Column(Float, nullable=False)
    comments = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student = relationship("app.models.users.Student")
    subject = relationship("app.models.lms.Subject")
    class_ = relationship("app.models.lms.Class")
    teacher = relationship("app.models.users.Teacher")
