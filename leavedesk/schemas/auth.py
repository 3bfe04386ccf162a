from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

from leavedesk.core.config import settings
from leavedesk.schemas.user import UserResponse


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=settings.min_password_length)
    full_name: str
    department: Optional[str] = None
    position: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Full name is required")
        return v.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
