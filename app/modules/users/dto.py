import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PASSWORD_SPECIAL_CHARACTERS = "@$!%*?&"
PASSWORD_MIN_LENGTH = 8

_PASSWORD_RULES = (
    (re.compile(r"[a-z]"), "one lowercase letter"),
    (re.compile(r"[A-Z]"), "one uppercase letter"),
    (re.compile(r"\d"), "one number"),
    (re.compile(f"[{re.escape(PASSWORD_SPECIAL_CHARACTERS)}]"), "one special character"),
)


def check_password_policy(password: str) -> str:
    """Reject passwords that are too short or miss a required character class."""
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
        )

    missing = [label for pattern, label in _PASSWORD_RULES if not pattern.search(password)]
    if missing:
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase "
            f"letter, one number, and one special character ({PASSWORD_SPECIAL_CHARACTERS})"
        )
    return password


class CreateUserDto(BaseModel):
    email: EmailStr = Field(..., description="Email address, unique per user")
    password: str = Field(..., description="Plaintext password, hashed before storage")
    first_name: str = Field(..., min_length=2, max_length=50, description="User's first name")
    last_name: str = Field(..., min_length=2, max_length=50, description="User's last name")

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_policy(value)


class LoginDto(BaseModel):
    email: EmailStr = Field(..., description="Registered email address")
    password: str = Field(..., min_length=1, description="Plaintext password")


class UpdateUserDto(BaseModel):
    email: Optional[EmailStr] = Field(None, description="New email address")
    password: Optional[str] = Field(None, description="New plaintext password")
    first_name: Optional[str] = Field(None, min_length=2, max_length=50, description="User's first name")
    last_name: Optional[str] = Field(None, min_length=2, max_length=50, description="User's last name")

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return check_password_policy(value)


class UserResponseDto(BaseModel):
    id: int = Field(..., description="Unique identifier for the user")
    email: str = Field(..., description="Email address")
    first_name: str = Field(..., description="User's first name")
    last_name: str = Field(..., description="User's last name")
    created_at: datetime = Field(..., description="When the user account was created")
    updated_at: Optional[datetime] = Field(None, description="When the user account was last updated")

    model_config = ConfigDict(from_attributes=True)
