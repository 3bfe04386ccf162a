"""
Persistence for leave requests.

Status changes and cancellations go through conditional statements guarded
by ``status == Pending`` so two concurrent deciders (or a decider and the
requester cancelling) cannot both win: the loser sees zero affected rows.
"""
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from leavedesk.models.leave_request import LeaveRequest, LeaveStatus


def add(db: Session, leave: LeaveRequest) -> LeaveRequest:
    db.add(leave)
    db.commit()
    db.refresh(leave)
    return leave


def get(db: Session, leave_id: int) -> Optional[LeaveRequest]:
    return db.get(LeaveRequest, leave_id)


def _newest_first(query):
    return query.order_by(LeaveRequest.created_at.desc(), LeaveRequest.id.desc())


def list_by_requesters(
    db: Session,
    requester_ids: Iterable[int],
    status: Optional[LeaveStatus] = None,
) -> List[LeaveRequest]:
    ids = list(requester_ids)
    if not ids:
        return []
    query = db.query(LeaveRequest).filter(LeaveRequest.requester_id.in_(ids))
    if status is not None:
        query = query.filter(LeaveRequest.status == status.value)
    return _newest_first(query).all()


def list_all(db: Session) -> List[LeaveRequest]:
    return _newest_first(db.query(LeaveRequest)).all()


def decide_if_pending(db: Session, leave_id: int, values: Dict[str, Any]) -> bool:
    """Apply a decision only if the request is still Pending. Returns True on success."""
    changed = (
        db.query(LeaveRequest)
        .filter(
            LeaveRequest.id == leave_id,
            LeaveRequest.status == LeaveStatus.PENDING.value,
        )
        .update(values, synchronize_session=False)
    )
    db.commit()
    return changed == 1


def delete_if_pending(db: Session, leave_id: int) -> bool:
    """Delete the request only if it is still Pending. Returns True on success."""
    removed = (
        db.query(LeaveRequest)
        .filter(
            LeaveRequest.id == leave_id,
            LeaveRequest.status == LeaveStatus.PENDING.value,
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    return removed == 1


def delete_for_requester(db: Session, requester_id: int) -> int:
    """Remove every request owned by a user; caller commits."""
    return (
        db.query(LeaveRequest)
        .filter(LeaveRequest.requester_id == requester_id)
        .delete(synchronize_session=False)
    )
