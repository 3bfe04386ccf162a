"""
Leave request lifecycle.

    [Pending] --transition_status(Approved)--> [Approved]   (terminal)
    [Pending] --transition_status(Rejected)--> [Rejected]   (terminal)
    [Pending] --cancel-------------------->   (deleted)

Every operation re-reads the current record, checks the policy against the
requester's current manager assignment, and writes through the conditional
statements in ``leave_store``.
"""
import enum
import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leavedesk.core.exceptions import (
    AccessDeniedError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from leavedesk.models.leave_request import LeaveRequest, LeaveStatus, LeaveType
from leavedesk.models.notification import NotificationType
from leavedesk.models.user import UserStatus
from leavedesk.services import leave_store, policy, user_service
from leavedesk.services.notification import NotificationService
from leavedesk.services.policy import Actor

logger = logging.getLogger(__name__)

LEAVE_NOT_FOUND = "Leave request not found"
DECISION_STATUSES = (LeaveStatus.APPROVED, LeaveStatus.REJECTED)


class LeaveScope(str, enum.Enum):
    MINE = "mine"
    TEAM = "team"
    PENDING_TEAM = "pending-team"
    ALL = "all"


def _get_or_404(db: Session, leave_id: int) -> LeaveRequest:
    leave = leave_store.get(db, leave_id)
    if leave is None:
        raise NotFoundError(LEAVE_NOT_FOUND)
    return leave


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create(
    db: Session,
    actor: Actor,
    type: LeaveType,
    start_date: date,
    end_date: date,
    days: int,
    reason: str,
) -> LeaveRequest:
    errors = []
    if type is None:
        errors.append({"field": "type", "msg": "Leave type is required"})
    elif type not in [t.value for t in LeaveType]:
        errors.append({"field": "type", "msg": f"Unknown leave type: {type}"})
    if start_date is None:
        errors.append({"field": "start_date", "msg": "Start date is required"})
    if end_date is None:
        errors.append({"field": "end_date", "msg": "End date is required"})
    if start_date and end_date and start_date > end_date:
        errors.append({"field": "end_date", "msg": "End date must not be before start date"})
    if not isinstance(days, int) or isinstance(days, bool) or days < 1:
        errors.append({"field": "days", "msg": "Number of days must be a positive whole number"})
    if _is_blank(reason):
        errors.append({"field": "reason", "msg": "Reason is required"})
    if errors:
        raise ValidationFailedError("Invalid leave request", errors=errors)

    leave = leave_store.add(db, LeaveRequest(
        requester_id=actor.id,
        type=LeaveType(type).value,
        start_date=start_date,
        end_date=end_date,
        days=days,
        reason=reason.strip(),
        status=LeaveStatus.PENDING.value,
    ))
    logger.info("Leave request created", extra={"leave_id": leave.id, "requester_id": actor.id})

    requester = user_service.get_user(db, actor.id)
    if requester is not None and requester.manager_id is not None:
        NotificationService.notify(
            db,
            recipient_id=requester.manager_id,
            type=NotificationType.LEAVE_REQUEST,
            content=f"New leave request from {requester.full_name}",
            related_leave_id=leave.id,
            link=f"/manager/approvals/{leave.id}",
        )
    return leave


def transition_status(
    db: Session,
    actor: Actor,
    leave_id: int,
    new_status: LeaveStatus,
    comments: str,
) -> LeaveRequest:
    leave = _get_or_404(db, leave_id)

    requester_manager_id = user_service.get_manager_id(db, leave.requester_id)
    if not policy.can_decide(actor, leave, requester_manager_id):
        raise AccessDeniedError("Not authorized to update this leave request")

    errors = []
    if new_status not in DECISION_STATUSES:
        errors.append({"field": "status", "msg": "Status must be Approved or Rejected"})
    if _is_blank(comments):
        errors.append({"field": "comments", "msg": "Comments are required"})
    if errors:
        raise ValidationFailedError("Invalid status update", errors=errors)

    if LeaveStatus(leave.status).is_terminal:
        raise ConflictError(f"Leave request has already been {leave.status.lower()}")

    new_status = LeaveStatus(new_status)
    decided_at = _utcnow()
    values = {
        LeaveRequest.status: new_status.value,
        LeaveRequest.decided_by_id: actor.id,
        LeaveRequest.decided_on: decided_at,
        LeaveRequest.comments: comments.strip(),
    }
    if new_status == LeaveStatus.REJECTED:
        values[LeaveRequest.rejection_reason] = comments.strip()

    if not leave_store.decide_if_pending(db, leave_id, values):
        logger.warning(
            "Leave decision lost to a concurrent update",
            extra={"leave_id": leave_id, "actor_id": actor.id},
        )
        raise ConflictError("Leave request is no longer pending")

    db.refresh(leave)
    logger.info(
        "Leave request decided",
        extra={"leave_id": leave.id, "status": new_status.value, "decided_by": actor.id},
    )

    approved = new_status == LeaveStatus.APPROVED
    NotificationService.notify(
        db,
        recipient_id=leave.requester_id,
        type=NotificationType.LEAVE_APPROVED if approved else NotificationType.LEAVE_REJECTED,
        content=f"Your leave request has been {new_status.value.lower()}",
        related_leave_id=leave.id,
        link=f"/employee/leaves/{leave.id}",
    )

    if approved and leave.start_date <= decided_at.date():
        # Separate write; the decision above stays committed if this fails
        try:
            user_service.set_status(db, leave.requester_id, UserStatus.ON_LEAVE)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Failed to mark requester on leave",
                extra={"leave_id": leave.id, "user_id": leave.requester_id},
            )
    return leave


def cancel(db: Session, actor: Actor, leave_id: int) -> None:
    leave = _get_or_404(db, leave_id)

    if actor.id != leave.requester_id:
        raise AccessDeniedError("Not authorized to cancel this leave request")
    if not policy.can_cancel(actor, leave):
        raise ConflictError("Can only cancel pending leave requests")

    if not leave_store.delete_if_pending(db, leave_id):
        raise ConflictError("Can only cancel pending leave requests")
    logger.info("Leave request cancelled", extra={"leave_id": leave_id, "requester_id": actor.id})

    # The manager's "new request" notice now points at nothing
    try:
        NotificationService.mark_read_for_leaves(db, [leave_id])
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to retire notifications for cancelled leave", extra={"leave_id": leave_id})


def get_by_id(db: Session, actor: Actor, leave_id: int) -> LeaveRequest:
    leave = _get_or_404(db, leave_id)
    requester_manager_id = user_service.get_manager_id(db, leave.requester_id)
    if not policy.can_view_leave(actor, leave, requester_manager_id):
        raise AccessDeniedError("Not authorized to view this leave request")
    return leave


def list_for(db: Session, actor: Actor, scope: LeaveScope) -> List[LeaveRequest]:
    if scope == LeaveScope.MINE:
        return leave_store.list_by_requesters(db, [actor.id])

    if scope == LeaveScope.ALL:
        if not policy.can_view_all_leaves(actor):
            raise AccessDeniedError("Access denied. Admin role required")
        return leave_store.list_all(db)

    if not policy.can_view_team_leaves(actor):
        raise AccessDeniedError("Access denied. Manager role required")
    report_ids = [u.id for u in user_service.find_direct_reports(db, actor.id)]
    status = LeaveStatus.PENDING if scope == LeaveScope.PENDING_TEAM else None
    return leave_store.list_by_requesters(db, report_ids, status=status)
