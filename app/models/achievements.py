from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
import enum
from app.core.database import Base


class AchievementType(str, enum.Enum):
    academic = "academic"
    sports = "sports"
    cultural = "cultural"
    leadership = "leadership"
    community = "community"
    other = "other"


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id"), nullable=False)
    achievement_type = Column(String, nullable=False, default=AchievementType.academic.value)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    achievement_date = Column(Date, nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id"), nullable=True)
    grade_id = Column(UUID(as_uuid=True), ForeignKey("grades.id"), nullable=True)
    rank = Column(Integer, nullable=False, default=1)  # 1st, 2nd, 3rd...
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student = relationship("app.models.users.Student")
    class_ = relationship("app.models.lms.Class")
    grade = relationship("app.models.lms.Grade")
