from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

# Matches the String(255) columns on the users table
MAX_FIELD_LENGTH = 255


def _check_email_length(v: Optional[str]) -> Optional[str]:
    if v is not None and len(v) > MAX_FIELD_LENGTH:
        raise ValueError(f"Email cannot be longer than {MAX_FIELD_LENGTH} characters")
    return v


class CreateUserDto(BaseModel):
    email: EmailStr
    name: str = Field(..., max_length=MAX_FIELD_LENGTH)
    password: str

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str) -> str:
        return _check_email_length(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password cannot be empty")
        # bcrypt only looks at the first 72 bytes
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password cannot be longer than 72 bytes")
        return v


class UpdateUserDto(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, max_length=MAX_FIELD_LENGTH)
    password: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: Optional[str]) -> Optional[str]:
        return _check_email_length(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v.encode("utf-8")) > 72:
            raise ValueError("Password cannot be longer than 72 bytes")
        return v


class UserOut(BaseModel):
    """Public projection of a user. Never carries the password hash."""

    id: str
    name: Optional[str] = None
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
