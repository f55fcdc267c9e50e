from typing import Optional
from uuid import UUID
from pydantic import BaseModel

from app.models.users import UserRole


class Token(BaseModel):
    success: bool = True
    message: str = "Success"
    data: dict
    # Legacy fields for OAuth2 compatibility if needed by other clients
    access_token: Optional[str] = None
    token_type: Optional[str] = None


class TokenPayload(BaseModel):
    sub: Optional[str] = None
    type: Optional[str] = None


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    id: UUID
    email: str
    role: UserRole
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True
