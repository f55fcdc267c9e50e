from pydantic import BaseModel, Field, model_validator
from typing import Optional, Dict, Any
from datetime import datetime
from uuid import UUID

from app.models.applications import ApplicationStatus


class ApplicationBase(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    gender: str
    date_of_birth: str
    email: str = Field(min_length=3)
    phone: Optional[str] = None
    address: str
    parent_name: str = Field(min_length=1)
    parent_phone: str
    parent_email: Optional[str] = None
    term3_average: Optional[float] = Field(default=None, ge=0, le=100)
    term4_average: Optional[float] = Field(default=None, ge=0, le=100)
    overall_average: Optional[float] = Field(default=None, ge=0, le=100)
    marks_data: Optional[Dict[str, Any]] = None
    results_document_url: Optional[str] = None


class ApplicationCreate(ApplicationBase):
    academic_year: Optional[int] = None

    @model_validator(mode="after")
    def fill_overall_average(self):
        if (
            self.overall_average is None
            and self.term3_average is not None
            and self.term4_average is not None
        ):
            self.overall_average = round((self.term3_average + self.term4_average) / 2, 2)
        return self


class ApplicationResponse(ApplicationBase):
    id: UUID
    status: ApplicationStatus
    academic_year: int
    comments: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApplicationDecision(BaseModel):
    # Optional so a missing id gets the workflow's own 400 instead of a 422
    id: Optional[UUID] = None
    comments: Optional[str] = None
