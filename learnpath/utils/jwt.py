from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import HTTPException, status
from jose import JWTError
from jose.jwt import decode, encode

from learnpath.config import get_settings
from learnpath.schemas.auth_schemas import AuthTokenPayload
from learnpath.utils.logger import configure_logging

logger = configure_logging()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.warning("password verification failed: %s", e)
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storing."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def token_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=get_settings().access_token_expire_minutes)


def create_access_token(data: AuthTokenPayload) -> str:
    """Create a JWT access token."""
    settings = get_settings()
    return encode(data.model_dump(), settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: Optional[str]) -> AuthTokenPayload:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    settings = get_settings()
    try:
        payload = decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        return AuthTokenPayload(**payload)
    except JWTError as e:
        logger.info("rejected token: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
