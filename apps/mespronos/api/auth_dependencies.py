"""
Authentication dependencies for FastAPI routes.
"""

import secrets
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from mespronos.database.db import get_db_session
from mespronos.services import settings_service
from mespronos.utils.constants import ADMIN_API_TOKEN_ENV, ADMIN_API_TOKEN_KEY

security = HTTPBearer()


async def _get_admin_token(session: AsyncSession) -> Optional[str]:
    """Configured admin API token (settings table first, then ADMIN_API_TOKEN)."""
    return await settings_service.get_setting_with_fallback(
        session, ADMIN_API_TOKEN_KEY, env_var=ADMIN_API_TOKEN_ENV
    )


async def require_admin_token(
    session: AsyncSession = Depends(get_db_session),
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> None:
    """
    Require the admin bearer token.

    Raises:
        HTTPException 503 if no admin token is configured, 403 if it does not match.
    """
    expected = await _get_admin_token(session)
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API is not configured",
        )

    if not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
