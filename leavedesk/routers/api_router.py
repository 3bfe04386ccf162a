from fastapi import APIRouter
from leavedesk.routers import auth, leaves, users, notifications

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(leaves.router, tags=["Leave Requests"])
api_router.include_router(users.router, tags=["Users"])
api_router.include_router(notifications.router, tags=["Notifications"])
