"""Authentication API endpoints."""

from fastapi import APIRouter

from src.api.dependencies import CurrentUser
from src.schemas.auth import UserResponse

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: CurrentUser,
):
    """Get current user information."""
    return current_user
