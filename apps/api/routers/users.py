"""User directory endpoints."""

from fastapi import APIRouter, Depends

from apps.api.deps import get_user_directory
from database.user_directory import UserDirectory
from domain.models import UserEnvelope


router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
def list_users(directory: UserDirectory = Depends(get_user_directory)):
    """List every user as {success, users, count}."""
    users = directory.load_all()
    return {
        "success": True,
        "users": [user.model_dump() for user in users],
        "count": len(users),
    }


@router.post("")
def save_user(payload: UserEnvelope, directory: UserDirectory = Depends(get_user_directory)):
    """Add a user, or replace the one with the same user_id."""
    directory.save(payload.user)
    return {"success": True, "user": payload.user.model_dump()}
