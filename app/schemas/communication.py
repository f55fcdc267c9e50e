from pydantic import BaseModel, ConfigDict
from uuid import UUID
from typing import Optional
from datetime import datetime


class NotificationCreate(BaseModel):
    title: str
    message: str
    notification_type: str = "general"
    user_id: Optional[UUID] = None


class NotificationResponse(NotificationCreate):
    id: UUID
    is_read: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
