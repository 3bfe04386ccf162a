import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from leavedesk.core.limiter import AUTH_RATE_LIMIT, limiter
from leavedesk.database import get_db
from leavedesk.models.user import User
from leavedesk.routers.auth_deps import get_current_user
from leavedesk.schemas.auth import LoginRequest, RegisterRequest, Token
from leavedesk.schemas.user import UserResponse
from leavedesk.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
def register(request: Request, payload: RegisterRequest, db: Session = Depends(get_db)):
    user = auth_service.register_user(
        db,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
        department=payload.department,
        position=payload.position,
    )
    return {"access_token": auth_service.token_for(user), "token_type": "bearer", "user": user}


@router.post("/login", response_model=Token)
@limiter.limit(AUTH_RATE_LIMIT)
def login(request: Request, login_data: LoginRequest, db: Session = Depends(get_db)):
    # JSON body rather than form-data for frontend compatibility
    user = auth_service.authenticate(db, login_data.email, login_data.password)
    logger.info("Login", extra={"user_id": user.id})
    return {"access_token": auth_service.token_for(user), "token_type": "bearer", "user": user}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
