from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator


class UserCreate(BaseModel):
    email: EmailStr
    username: str = Field(min_length=3, max_length=24, pattern=r"^[A-Za-z0-9_]+$")
    password: str = Field(min_length=8)
    full_name: str | None = Field(default=None, max_length=120)
    role: Literal["student", "admin"] = "student"
    school_id: str | None = Field(default=None, max_length=64)
    grade_level: str | None = Field(default=None, max_length=32)
    class_code: str | None = Field(default=None, max_length=64)

    @model_validator(mode="after")
    def _require_school_fields(self) -> "UserCreate":
        if not (self.school_id or "").strip():
            raise ValueError("School ID is required")
        if self.role == "student" and not (self.class_code or "").strip():
            raise ValueError("Class code is required for students")
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserProfile(BaseModel):
    id: UUID
    email: str
    username: str
    full_name: str | None = None
    role: str
    school_id: str | None = None
    grade_level: str | None = None
    class_code: str | None = None
    is_admin: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
