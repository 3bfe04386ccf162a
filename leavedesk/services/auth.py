import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from leavedesk.core.config import settings
from leavedesk.core.exceptions import AuthenticationError, ValidationFailedError
from leavedesk.models.user import User, UserRole, UserStatus

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Returns the payload, ``{"error": "TOKEN_EXPIRED"}`` for an expired token,
    or None when the token cannot be trusted.
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        return {"error": "TOKEN_EXPIRED"}
    except jwt.InvalidTokenError as e:
        logger.debug(f"Token rejected: {e}")
        return None


def token_for(user: User) -> str:
    role = user.role.value if hasattr(user.role, "value") else user.role
    return create_access_token(data={"sub": str(user.id), "role": role})


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not verify_password(password, user.hashed_password):
        logger.info("Failed login", extra={"email": email})
        raise AuthenticationError("Incorrect email or password")
    return user


def register_user(
    db: Session,
    email: str,
    password: str,
    full_name: str,
    department: Optional[str] = None,
    position: Optional[str] = None,
) -> User:
    email = email.lower()
    if db.query(User).filter(User.email == email).first():
        raise ValidationFailedError("User already exists")

    user = User(
        email=email,
        hashed_password=get_password_hash(password),
        full_name=full_name,
        department=department,
        position=position,
        role=UserRole.EMPLOYEE,
        status=UserStatus.ACTIVE,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.id})
    return user
