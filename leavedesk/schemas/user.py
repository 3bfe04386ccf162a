from pydantic import BaseModel, ConfigDict, EmailStr, Field
from datetime import datetime
from typing import Optional

from leavedesk.core.config import settings
from leavedesk.models.user import UserRole, UserStatus


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: str
    department: Optional[str] = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    full_name: str
    role: UserRole
    status: UserStatus
    department: Optional[str] = None
    position: Optional[str] = None
    manager_id: Optional[int] = None
    manager: Optional[UserSummary] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None
    emergency_contact: Optional[str] = None
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None
    emergency_contact: Optional[str] = None


class UserAdminUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    department: Optional[str] = None
    position: Optional[str] = None
    manager_id: Optional[int] = None
    status: Optional[UserStatus] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=settings.min_password_length)
