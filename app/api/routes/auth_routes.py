"""
Authentication API Routes.
Admin login, profile and token refresh endpoints.
"""

from fastapi import APIRouter, Depends
from typing import Dict, Any
from app.schemas.auth import LoginRequest
from app.core.auth_service import AuthService
from app.core.responses import ResponseHandler
from app.api.dependencies import get_current_user
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=Dict[str, Any])
async def login(request: LoginRequest):
    """
    Login with a predefined admin account and get a JWT access token.
    """
    result = AuthService.login(request.email, request.password)
    return ResponseHandler.success(data=result, message="Login successful")


@router.get("/profile", response_model=Dict[str, Any])
async def get_profile(current_user: Dict = Depends(get_current_user)):
    """Get the authenticated admin's profile."""
    return ResponseHandler.success(
        data=current_user,
        message="Profile retrieved successfully"
    )


@router.post("/refresh", response_model=Dict[str, Any])
async def refresh_token(current_user: Dict = Depends(get_current_user)):
    """Issue a new access token for the authenticated admin."""
    result = AuthService.refresh_token(current_user["id"])
    return ResponseHandler.success(data=result, message="Token refreshed successfully")
