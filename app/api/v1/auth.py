import logging
from datetime import timedelta
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Body, Request, Response, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.api import deps
from app.core import security
from app.core.config import settings
from app.core.database import get_db
from app.models.auth import User, UserSession
from app.models.users import UserRole
from app.schemas.auth import RefreshTokenRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter()

REDIRECTS = {
    UserRole.admin: "/admin/dashboard",
    UserRole.principal: "/principal/dashboard",
    UserRole.teacher: "/teacher/dashboard",
    UserRole.student: "/dashboard",
    UserRole.parent: "/dashboard",
}


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user:
        user = db.query(User).filter(User.email == email.strip()).first()
    if not user:
        return None

    now = security.utcnow()
    locked_until = user.locked_at(now)
    if locked_until:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Account locked. Try again after {locked_until.strftime('%H:%M:%S')}"
        )

    if not security.verify_password(password, user.password_hash):
        locked = user.record_failed_login(
            now, security.MAX_FAILED_LOGINS, timedelta(minutes=security.LOCKOUT_MINUTES)
        )
        db.commit()
        if locked:
            logger.warning("Locked account %s after repeated failed logins", user.email)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Account locked due to multiple failed attempts. Try again in {security.LOCKOUT_MINUTES} minutes."
            )
        return None

    user.record_login(now)
    db.commit()
    return user


def _set_cookie(response: Response, key: str, value: str, max_age: int) -> None:
    response.set_cookie(
        key=key,
        value=value,
        httponly=True,
        secure=False,  # Set to False for local dev
        samesite="lax",
        max_age=max_age,
    )


@router.post("/login")
def login_access_token(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
) -> Any:
    """
    OAuth2 compatible token login, get an access token for future requests
    """
    user = authenticate_user(db, form_data.username, form_data.password)

    if not user:
        return {"success": False, "message": "Invalid email or password", "data": None}
    if not user.is_active:
        return {"success": False, "message": "Account is inactive", "data": None}

    access_token = security.create_access_token(user.id)
    refresh_token = security.create_refresh_token(user.id)

    # Store refresh token in session
    db.add(
        UserSession(
            user_id=user.id,
            refresh_token=refresh_token,
            user_agent=request.headers.get("user-agent"),
            ip_address=request.client.host if request.client else None,
            expires_at=security.utcnow() + timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )
    )
    db.commit()

    _set_cookie(response, "access_token", access_token, settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)
    _set_cookie(response, "refresh_token", refresh_token, settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 3600)

    return {
        "success": True,
        "message": "Login successful",
        "data": {
            "token": access_token,
            "refresh_token": refresh_token,
            "role": user.role.value,
            "redirect_to": REDIRECTS.get(user.role, "/"),
            "name": user.full_name,
            "email": user.email,
        },
        "access_token": access_token,
        "token_type": "bearer",
    }


@router.post("/refresh")
def refresh_token(
    response: Response,
    refresh_data: RefreshTokenRequest,
    db: Session = Depends(get_db)
) -> Any:
    """
    Refresh access token using refresh token
    """
    session = db.query(UserSession).filter(
        UserSession.refresh_token == refresh_data.refresh_token
    ).first()

    if not session or session.is_expired(security.utcnow()):
        raise HTTPException(status_code=401, detail="Invalid or expired refresh token")

    new_access_token = security.create_access_token(session.user_id)
    _set_cookie(response, "access_token", new_access_token, settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)

    return {
        "access_token": new_access_token,
        "refresh_token": session.refresh_token,
        "token_type": "bearer",
        "role": session.user.role.value,
    }


@router.post("/logout")
def logout(
    response: Response,
    refresh_token: Optional[str] = Body(None, embed=True),
    db: Session = Depends(get_db)
):
    if refresh_token:
        db.query(UserSession).filter(UserSession.refresh_token == refresh_token).delete()
        db.commit()

    response.delete_cookie("access_token")
    response.delete_cookie("refresh_token")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def read_current_user(current_user: User = Depends(deps.get_current_user)):
    return current_user
