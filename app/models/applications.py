from sqlalchemy import (
    Column,
    String,
    DateTime,
    Integer,
    JSON,
    Enum,
    Float,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
from app.core.database import Base
import enum


class ApplicationStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Application(Base):
    """Grade-8 admission request."""

    __tablename__ = "applications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    status = Column(Enum(ApplicationStatus), default=ApplicationStatus.pending, nullable=False)

    # Student Info
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    gender = Column(String, nullable=False)
    date_of_birth = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String)
    address = Column(Text, nullable=False)

    # Parent / Guardian Info
    parent_name = Column(String, nullable=False)
    parent_phone = Column(String, nullable=False)
    parent_email = Column(String)

    # Previous results
    term3_average = Column(Float)
    term4_average = Column(Float)
    overall_average = Column(Float)
    marks_data = Column(JSON)  # {"term3": {"mathematics": 6, ...}, "term4": {...}}
    results_document_url = Column(String)

    academic_year = Column(Integer, nullable=False)
    comments = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
