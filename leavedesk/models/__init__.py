
# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import user, leave_request, notification

# Explicit class exports for cleaner imports
from .user import User, UserRole, UserStatus
from .leave_request import LeaveRequest, LeaveStatus, LeaveType
from .notification import Notification, NotificationType

__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "LeaveRequest",
    "LeaveStatus",
    "LeaveType",
    "Notification",
    "NotificationType",
]
