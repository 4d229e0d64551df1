"""
Password hashing and admin access control.
"""
from typing import Optional

from fastapi import Header, HTTPException, status
from passlib.context import CryptContext

from esports_arena.core.config import settings
from esports_arena.core.logging import get_logger

logger = get_logger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

ADMIN_TOKEN_HEADER = "X-Admin-Token"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def require_admin(x_admin_token: Optional[str] = Header(None, alias=ADMIN_TOKEN_HEADER)) -> int:
    """
    Guard for ``/api/admin`` routes.

    When ADMIN_TOKEN is not configured the admin surface is open (there is
    no user authentication layer) except in production, where it is refused.
    Returns the admin id recorded in audit logs.
    """
    if not settings.ADMIN_TOKEN:
        if settings.is_production():
            logger.warning("ADMIN_TOKEN not configured in production - rejecting admin request")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Admin token required. Configure ADMIN_TOKEN environment variable."
            )
        return settings.DEFAULT_ADMIN_ID

    if not x_admin_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Admin token missing. Provide {ADMIN_TOKEN_HEADER} header."
        )

    if x_admin_token != settings.ADMIN_TOKEN:
        logger.warning("Invalid admin token attempt")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid admin token.")

    return settings.DEFAULT_ADMIN_ID
