"""
User account routes. Password hashes never leave the API.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from esports_arena.core.config import settings
from esports_arena.core.exceptions import StorageError
from esports_arena.core.logging import get_logger
from esports_arena.schemas import UserCreate, UserPublic
from esports_arena.storage import Storage, get_storage

logger = get_logger(__name__)

router = APIRouter(tags=["users"])


@router.get("/users/{user_id}", response_model=UserPublic)
async def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    """Fetch a user by id."""
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user.to_public()


@router.get("/user/profile", response_model=UserPublic)
async def get_profile(storage: Storage = Depends(get_storage)):
    """Profile of the demo user (no session layer exists)."""
    user = storage.get_user(settings.DEMO_USER_ID)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user.to_public()


@router.post("/users", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def create_user(request: UserCreate, storage: Storage = Depends(get_storage)):
    """
    Register a new account.

    Username and email must be unique; the password is hashed by storage.
    """
    try:
        if storage.get_user_by_username(request.username):
            raise HTTPException(status_code=400, detail="Username already exists")
        if storage.get_user_by_email(request.email):
            raise HTTPException(status_code=400, detail="Email already registered")

        user = storage.create_user(request)
        return user.to_public()

    except (HTTPException, StorageError):
        raise
    except Exception as e:
        logger.error(f"Error creating user: {e}")
        raise HTTPException(status_code=500, detail="Failed to create user")
