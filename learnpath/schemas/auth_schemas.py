from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=8)
    confirm_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class LoginResponse(BaseModel):
    message: str
    token_set: bool


class RegisterResponse(BaseModel):
    message: str
    user_id: int


class LogoutResponse(BaseModel):
    message: str


class AuthTokenPayload(BaseModel):
    sub: str  # user email
    exp: Optional[datetime] = None
