"""
Authentication and role dependencies.
Resolves the bearer token to a current user and an explicit Actor for the
service layer. The role is always read from the users table, never trusted
from the token.
"""
import logging
from typing import Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from leavedesk.database import get_db
from leavedesk.models.user import User, UserRole
from leavedesk.services import auth as auth_service
from leavedesk.services import policy
from leavedesk.services.policy import Actor

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Extracts and validates the current user from the JWT token.
    """
    payload = auth_service.decode_access_token(token)

    if payload is None:
        logger.warning("Authentication failed: Invalid token")
        raise _unauthorized("Could not validate credentials")

    if payload.get("error") == "TOKEN_EXPIRED":
        logger.info("Authentication failed: Token expired")
        raise _unauthorized("TOKEN_EXPIRED")

    if payload.get("type") != "access":
        logger.warning("Authentication failed: Invalid token type")
        raise _unauthorized("Invalid token type")

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        logger.warning("Authentication failed: Missing subject in token")
        raise _unauthorized("Missing subject in token")

    user = db.get(User, int(subject))
    if user is None:
        logger.warning(f"Authentication failed: User {subject} not found in database")
        raise _unauthorized("User not found")
    return user


def get_current_actor(current_user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(current_user)


def _require(gate: Callable[[UserRole], bool], label: str) -> Callable:
    def role_checker(current_user: User = Depends(get_current_user)):
        if not gate(current_user.role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. {label} role required"
            )
        return current_user
    return role_checker


def require_manager():
    """
    Manager or admin.

    Usage:
        @router.get("/team")
        def team_endpoint(user: User = Depends(require_manager())):
            ...
    """
    return _require(policy.is_manager_or_admin, "Manager")


def require_admin():
    """Admin only."""
    return _require(policy.is_admin, "Admin")
