import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from leavedesk.database import get_db
from leavedesk.models.leave_request import LeaveRequest
from leavedesk.models.notification import Notification
from leavedesk.models.user import User, UserRole
from leavedesk.routers.auth_deps import get_current_user, require_admin, require_manager
from leavedesk.schemas.leave import MessageResponse
from leavedesk.schemas.user import PasswordChange, ProfileUpdate, UserAdminUpdate, UserResponse
from leavedesk.services import auth as auth_service
from leavedesk.services import leave_store, policy, user_service
from leavedesk.services.notification import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _get_user_or_404(db: Session, user_id: int) -> User:
    user = user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("", response_model=List[UserResponse])
def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    return db.query(User).order_by(User.full_name.asc()).all()


@router.get("/team", response_model=List[UserResponse])
def list_team_members(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager()),
):
    return user_service.find_direct_reports(db, current_user.id)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # Only provided, non-empty fields are applied
    for field, value in payload.model_dump(exclude_none=True).items():
        if value:
            setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    payload: PasswordChange,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not auth_service.verify_password(payload.current_password, current_user.hashed_password):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    current_user.hashed_password = auth_service.get_password_hash(payload.new_password)
    db.commit()
    return {"msg": "Password updated successfully"}


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = _get_user_or_404(db, user_id)
    # Only admin, the user themselves, or their manager can view
    is_self = current_user.id == user.id
    is_their_manager = current_user.role == UserRole.MANAGER and user.manager_id == current_user.id
    if not (is_self or policy.is_admin(current_user.role) or is_their_manager):
        raise HTTPException(status_code=403, detail="Not authorized to view this user")
    return user


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserAdminUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    user = _get_user_or_404(db, user_id)
    updates = payload.model_dump(exclude_none=True)

    if "manager_id" in updates:
        if updates["manager_id"] == user_id:
            raise HTTPException(status_code=400, detail="User cannot be their own manager")
        if user_service.get_user(db, updates["manager_id"]) is None:
            raise HTTPException(status_code=400, detail="Manager not found")
    if "email" in updates:
        updates["email"] = updates["email"].lower()
        clash = db.query(User).filter(User.email == updates["email"], User.id != user_id).first()
        if clash:
            raise HTTPException(status_code=400, detail="Email already in use")

    for field, value in updates.items():
        setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info("User updated", extra={"user_id": user_id, "fields": sorted(updates)})
    return user


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin()),
):
    user = _get_user_or_404(db, user_id)

    leave_ids = [row.id for row in db.query(LeaveRequest.id).filter(LeaveRequest.requester_id == user_id)]
    NotificationService.mark_read_for_leaves(db, leave_ids)
    leave_store.delete_for_requester(db, user_id)
    db.query(Notification).filter(Notification.recipient_id == user_id).delete(synchronize_session=False)
    db.query(User).filter(User.manager_id == user_id).update({User.manager_id: None}, synchronize_session=False)
    db.delete(user)
    db.commit()
    logger.info("User removed", extra={"user_id": user_id})
    return {"msg": "User removed"}
