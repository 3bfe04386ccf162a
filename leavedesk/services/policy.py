"""
Leave authorization policy.

Pure decision functions over an actor and a target leave request. Nothing
here touches the database: any decision that depends on "is the actor the
requester's manager" takes the requester's *current* manager id as an
argument, resolved by the caller at decision time. Reassigning a manager
therefore takes effect immediately for requests already in flight.
"""
from dataclasses import dataclass
from typing import Optional

from leavedesk.models.leave_request import LeaveRequest, LeaveStatus
from leavedesk.models.user import User, UserRole


@dataclass(frozen=True)
class Actor:
    """The authenticated identity performing an operation."""
    id: int
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=UserRole(user.role))


def is_admin(role: UserRole) -> bool:
    return role == UserRole.ADMIN


def is_manager_or_admin(role: UserRole) -> bool:
    return role in (UserRole.MANAGER, UserRole.ADMIN)


def can_view_all_leaves(actor: Actor) -> bool:
    return is_admin(actor.role)


def can_view_team_leaves(actor: Actor) -> bool:
    """Gate only; scoping to direct reports is done by the caller."""
    return is_manager_or_admin(actor.role)


def _manages(actor: Actor, requester_manager_id: Optional[int]) -> bool:
    return (
        actor.role == UserRole.MANAGER
        and requester_manager_id is not None
        and requester_manager_id == actor.id
    )


def can_view_leave(actor: Actor, leave: LeaveRequest, requester_manager_id: Optional[int]) -> bool:
    if actor.id == leave.requester_id:
        return True
    if is_admin(actor.role):
        return True
    return _manages(actor, requester_manager_id)


def can_decide(actor: Actor, leave: LeaveRequest, requester_manager_id: Optional[int]) -> bool:
    if is_admin(actor.role):
        return True
    return _manages(actor, requester_manager_id)


def can_cancel(actor: Actor, leave: LeaveRequest) -> bool:
    return actor.id == leave.requester_id and not LeaveStatus(leave.status).is_terminal
