from sqlalchemy import Column, Integer, String, Date, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from leavedesk.database import Base
import enum


class LeaveStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING


class LeaveType(str, enum.Enum):
    ANNUAL = "Annual Leave"
    SICK = "Sick Leave"
    PERSONAL = "Personal Leave"
    BEREAVEMENT = "Bereavement"
    OTHER = "Other"


class LeaveRequest(Base):
    __tablename__ = "leave_requests"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    days = Column(Integer, nullable=False)  # caller supplied, not derived from the dates
    reason = Column(Text, nullable=False)
    status = Column(String, default=LeaveStatus.PENDING.value, nullable=False, index=True)  # Using String to store enum value for simplicity with SQLite

    # Decision; all null while Pending
    decided_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    decided_on = Column(DateTime(timezone=True), nullable=True)
    comments = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    requester = relationship("User", foreign_keys=[requester_id])
    decided_by = relationship("User", foreign_keys=[decided_by_id])
