"""FastAPI caller-identity dependency.

Authentication happens upstream (gateway / session layer); by the time a
request reaches this service the caller's user ID is forwarded in the
X-User-Id header. This module only reads it.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, status
from loguru import logger


def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """FastAPI dependency returning the authenticated caller's user ID.

    Raises:
        HTTPException: 401 if no caller identity was forwarded
    """
    if not x_user_id:
        logger.warning("[API] Request without caller identity")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return x_user_id
