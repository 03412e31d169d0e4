from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from learnpath.config import get_db
from learnpath.schemas.auth_schemas import LoginRequest, LoginResponse, LogoutResponse, RegisterRequest, RegisterResponse
from learnpath.schemas.user_schemas import User, UserResponse
from learnpath.utils.auth import (
    authenticate_user,
    clear_auth_cookie,
    create_user,
    get_current_user,
    get_user_by_email,
    set_auth_cookie,
)

auth_routes = APIRouter()


@auth_routes.post("/login")
def login(request: LoginRequest, response: Response, db: Session = Depends(get_db)) -> LoginResponse:
    """Authenticate user and set HTTP-only cookie with token."""
    user = authenticate_user(request.email, request.password, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    set_auth_cookie(response, user)
    return LoginResponse(message="Login successful", token_set=True)


@auth_routes.post("/register", status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, response: Response, db: Session = Depends(get_db)) -> RegisterResponse:
    """Register a new user and log them in."""
    if get_user_by_email(request.email, db):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    user = create_user(request.email, request.password, db)
    set_auth_cookie(response, user)
    return RegisterResponse(message="Registration successful", user_id=user.id)


@auth_routes.post("/logout")
def logout(response: Response) -> LogoutResponse:
    """Clear the authentication cookie."""
    clear_auth_cookie(response)
    return LogoutResponse(message="Logout successful")


@auth_routes.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse(id=current_user.id, email=current_user.email)
