from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from leavedesk.database import get_db
from leavedesk.models.user import User
from leavedesk.routers.auth_deps import get_current_actor, require_admin, require_manager
from leavedesk.schemas.leave import (
    LeaveRequestCreate,
    LeaveRequestResponse,
    LeaveStatusUpdate,
    MessageResponse,
)
from leavedesk.services import leave_service
from leavedesk.services.leave_service import LeaveScope
from leavedesk.services.policy import Actor

router = APIRouter(prefix="/leaves", tags=["leaves"])


@router.get("/all", response_model=List[LeaveRequestResponse])
def list_all_leaves(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    return leave_service.list_for(db, Actor.from_user(current_user), LeaveScope.ALL)


@router.get("/team", response_model=List[LeaveRequestResponse])
def list_team_leaves(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager()),
):
    return leave_service.list_for(db, Actor.from_user(current_user), LeaveScope.TEAM)


@router.get("/pending", response_model=List[LeaveRequestResponse])
def list_pending_team_leaves(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager()),
):
    return leave_service.list_for(db, Actor.from_user(current_user), LeaveScope.PENDING_TEAM)


@router.get("/me", response_model=List[LeaveRequestResponse])
def list_my_leaves(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    # Always an array, even when empty
    return leave_service.list_for(db, actor, LeaveScope.MINE)


@router.get("/{leave_id}", response_model=LeaveRequestResponse)
def get_leave(
    leave_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return leave_service.get_by_id(db, actor, leave_id)


@router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
def create_leave(
    payload: LeaveRequestCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    return leave_service.create(
        db,
        actor,
        type=payload.type,
        start_date=payload.start_date,
        end_date=payload.end_date,
        days=payload.days,
        reason=payload.reason,
    )


@router.put("/{leave_id}/status", response_model=LeaveRequestResponse)
def update_leave_status(
    leave_id: int,
    payload: LeaveStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager()),
):
    """Approve or reject a pending request (the requester's manager, or an admin)."""
    return leave_service.transition_status(
        db,
        Actor.from_user(current_user),
        leave_id,
        new_status=payload.status,
        comments=payload.comments,
    )


@router.delete("/{leave_id}", response_model=MessageResponse)
def cancel_leave(
    leave_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    """Cancel a request; only its owner, and only while Pending."""
    leave_service.cancel(db, actor, leave_id)
    return {"msg": "Leave request cancelled"}
