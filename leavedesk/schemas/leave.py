from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import date, datetime
from typing import Optional

from leavedesk.models.leave_request import LeaveStatus, LeaveType
from leavedesk.schemas.user import UserSummary


class LeaveRequestCreate(BaseModel):
    type: LeaveType
    start_date: date
    end_date: date
    days: int = Field(..., gt=0, description="Working days requested, as supplied by the client")
    reason: str

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Reason is required")
        return v.strip()

    @model_validator(mode="after")
    def dates_in_order(self):
        if self.start_date > self.end_date:
            raise ValueError("End date must not be before start date")
        return self


class LeaveStatusUpdate(BaseModel):
    status: LeaveStatus
    comments: str

    @field_validator("status")
    @classmethod
    def decision_only(cls, v: LeaveStatus) -> LeaveStatus:
        if v == LeaveStatus.PENDING:
            raise ValueError("Status must be Approved or Rejected")
        return v

    @field_validator("comments")
    @classmethod
    def comments_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Comments are required")
        return v.strip()


class LeaveRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    requester_id: int
    requester: Optional[UserSummary] = None
    type: LeaveType
    start_date: date
    end_date: date
    days: int
    reason: str
    status: LeaveStatus
    decided_by_id: Optional[int] = None
    decided_by: Optional[UserSummary] = None
    decided_on: Optional[datetime] = None
    comments: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None


class MessageResponse(BaseModel):
    msg: str
