"""Profile API endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_account_service, get_current_user
from app.models.user import User
from app.schemas.auth import ProfileUpdateRequest, UserResponse
from app.services.account import AccountService

router = APIRouter(prefix="/api/v1/profile", tags=["Profile"])


@router.get("", response_model=UserResponse)
def get_profile(user: User = Depends(get_current_user)) -> UserResponse:
    """Get the current user's profile."""
    return UserResponse.model_validate(user)


@router.put("", response_model=UserResponse)
def update_profile(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> UserResponse:
    """Update name and email. The password only changes when a new one is given."""
    result = accounts.update_profile(user, body.name, body.email, body.password)
    if not result.success:
        raise HTTPException(status_code=400, detail={"errors": result.errors})
    return UserResponse.model_validate(result.user)
