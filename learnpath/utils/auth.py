from typing import Optional

from fastapi import Cookie, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from learnpath.config import get_db, get_settings
from learnpath.models.models import User as UserRow
from learnpath.schemas.auth_schemas import AuthTokenPayload
from learnpath.schemas.user_schemas import User
from learnpath.utils.jwt import create_access_token, get_password_hash, token_expiry, verify_password, verify_token
from learnpath.utils.logger import configure_logging

logger = configure_logging()

COOKIE_NAME = "access_token"


def get_current_user(access_token: Optional[str] = Cookie(None), db: Session = Depends(get_db)) -> User:
    if not access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
        )

    payload = verify_token(access_token)
    user = get_user_by_email(payload.sub, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return User(id=user.id, email=user.email, hashed_password=user.hashed_password)


def set_auth_cookie(response: Response, user: UserRow) -> None:
    token = create_access_token(AuthTokenPayload(sub=user.email, exp=token_expiry()))
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=False,
        samesite="lax",
        max_age=get_settings().access_token_expire_minutes * 60,
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=COOKIE_NAME,
        httponly=True,
        secure=False,
        samesite="lax",
    )


def get_user_by_email(email: str, db: Session) -> Optional[UserRow]:
    return db.query(UserRow).filter(UserRow.email == email).first()


def create_user(email: str, password: str, db: Session) -> UserRow:
    user = UserRow(email=email, hashed_password=get_password_hash(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user created id=%s", user.id)
    return user


def authenticate_user(email: str, password: str, db: Session) -> Optional[UserRow]:
    user = get_user_by_email(email, db)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
