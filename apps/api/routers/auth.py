"""Login by user ID."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from apps.api.deps import get_app_settings, get_user_directory
from core.settings import Settings
from database.user_directory import UserDirectory
from domain.models import LoginRequest


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(
    payload: LoginRequest,
    directory: UserDirectory = Depends(get_user_directory),
    app_settings: Settings = Depends(get_app_settings)
):
    """
    Resolve a user ID against the directory.

    Args:
        payload: {user_id}, whitespace trimmed

    Returns:
        {success, user}
    """
    user_id = payload.user_id
    if len(user_id) < app_settings.min_user_id_length:
        raise HTTPException(
            status_code=422,
            detail=f"User ID must be at least {app_settings.min_user_id_length} characters"
        )

    user = directory.get(user_id)
    if user is None:
        logger.info(f"Login rejected for unknown user {user_id}")
        raise HTTPException(status_code=404, detail="User ID not found. Please check your ID and try again.")

    logger.info(f"User {user_id} logged in")
    return {"success": True, "user": user.model_dump()}
