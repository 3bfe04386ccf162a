"""
Read/write access to the user directory used by the leave core:
manager lookups, direct reports and the advisory on-leave status.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from leavedesk.models.user import User, UserStatus


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def get_manager_id(db: Session, user_id: int) -> Optional[int]:
    """Current manager assignment, read fresh from storage."""
    manager_id = db.query(User.manager_id).filter(User.id == user_id).scalar()
    return manager_id


def find_direct_reports(db: Session, manager_id: int) -> List[User]:
    return (
        db.query(User)
        .filter(User.manager_id == manager_id)
        .order_by(User.full_name.asc())
        .all()
    )


def set_status(db: Session, user_id: int, status: UserStatus) -> None:
    db.query(User).filter(User.id == user_id).update(
        {User.status: status}, synchronize_session=False
    )
    db.commit()
