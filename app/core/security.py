from datetime import datetime, timedelta, timezone
from typing import Any, Union, Optional
from jose import jwt
import bcrypt
import re
import uuid
from app.core.config import settings

ALGORITHM = settings.ALGORITHM
SECRET_KEY = settings.SECRET_KEY

MAX_FAILED_LOGINS = 5
LOCKOUT_MINUTES = 15


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _create_token(subject: Union[str, Any], token_type: str, expires_delta: timedelta) -> str:
    to_encode = {
        "exp": utcnow() + expires_delta,
        "sub": str(subject),
        "type": token_type,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_access_token(
    subject: Union[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    return _create_token(
        subject,
        "access",
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(
    subject: Union[str, Any], expires_delta: Optional[timedelta] = None
) -> str:
    return _create_token(
        subject,
        "refresh",
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        # Malformed hash
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(12)).decode("utf-8")


def sanitize_input(text: Optional[str], max_length: int = 1000) -> Optional[str]:
    """Strip markup and control bytes from free text such as review comments."""
    if not text:
        return None

    text = text.replace("\x00", "").strip()
    text = text[:max_length]

    dangerous_patterns = [
        r"<script[^>]*>",
        r"</script>",
        r"javascript:",
        r"on\w+\s*=",
        r"<iframe[^>]*>",
    ]
    for pattern in dangerous_patterns:
        text = re.sub(pattern, "", text, flags=re.IGNORECASE)

    return text or None


def validate_file_extension(filename: str, allowed_extensions: list) -> bool:
    if not filename or "." not in filename:
        return False
    ext = filename.rsplit(".", 1)[-1].lower()
    return ext in [e.lower().lstrip(".") for e in allowed_extensions]


def generate_secure_filename(original_filename: str) -> str:
    """Random filename that keeps the original extension."""
    parts = (original_filename or "").rsplit(".", 1)
    ext = parts[-1].lower() if len(parts) > 1 else ""
    secure_name = uuid.uuid4().hex
    return f"{secure_name}.{ext}" if ext else secure_name
