"""
User Model.
Carries the role and the direct-manager relationship that leave
authorization is evaluated against.
"""
from sqlalchemy import Column, Integer, String, Enum, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from leavedesk.database import Base


class UserRole(str, enum.Enum):
    """
    User roles.

    - ADMIN: sees and decides every leave request, manages users
    - MANAGER: sees and decides leave requests of direct reports
    - EMPLOYEE: self-service access
    """
    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    ON_LEAVE = "on-leave"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, nullable=False)

    role = Column(Enum(UserRole, values_callable=_enum_values), default=UserRole.EMPLOYEE, nullable=False)
    status = Column(Enum(UserStatus, values_callable=_enum_values), default=UserStatus.ACTIVE, nullable=False)
    department = Column(String, nullable=True)
    position = Column(String, nullable=True)

    # Direct manager; re-read on every authorization decision
    manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    # Profile
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    emergency_contact = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    manager = relationship("User", remote_side=[id], foreign_keys=[manager_id])

    def __repr__(self):
        return f"<User {self.email} ({self.role.value})>"
