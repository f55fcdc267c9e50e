from pydantic import BaseModel, model_validator
from uuid import UUID
from typing import Optional
from datetime import datetime


class EventBase(BaseModel):
    title: str
    description: str
    location: Optional[str] = None
    start_date: datetime
    end_date: datetime
    is_all_day: bool = False
    event_type: str = "general"
    is_public: bool = True

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EventCreate(EventBase):
    pass


class EventResponse(EventBase):
    id: UUID
    created_by: Optional[UUID] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
