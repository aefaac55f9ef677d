import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, field_validator

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 72
MAX_NAME_LENGTH = 50


def normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError('Please add a valid email.')
    return normalized


def normalize_name(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Please add a name.')
    if len(normalized) > MAX_NAME_LENGTH:
        raise ValueError(f'Name can not be more than {MAX_NAME_LENGTH} characters.')
    return normalized


def check_password(value: str) -> str:
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValueError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')
    if len(value.encode('utf-8')) > MAX_PASSWORD_LENGTH:
        raise ValueError(f'Password can not be more than {MAX_PASSWORD_LENGTH} bytes.')
    return value


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        return normalize_name(value)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password(value)


class LoginRequest(BaseModel):
    # Presence is checked by the service so a missing field fails like a bad password.
    email: str | None = None
    password: str | None = None


class UpdateMeRequest(BaseModel):
    name: str | None = None
    email: str | None = None

    class Config:
        extra = 'forbid'

    @field_validator('name')
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        return None if value is None else normalize_name(value)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return None if value is None else normalize_email(value)


class AdminUpdateUserRequest(UpdateMeRequest):
    role: Literal['user', 'admin'] | None = None


class UpdatePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return check_password(value)


class ForgotPasswordRequest(BaseModel):
    email: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        return value.strip().lower()


class ResetPasswordRequest(BaseModel):
    password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password(value)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime

    class Config:
        from_attributes = True
