"""JWT validation for FastAPI routes."""

import os
from typing import Optional

import structlog
from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from web.user_store import get_or_create_user

logger = structlog.get_logger()

ALGORITHM = "HS256"

security = HTTPBearer(auto_error=False)


def _get_jwt_secret() -> str:
    secret = os.getenv("NEXTAUTH_SECRET")
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="NEXTAUTH_SECRET not configured",
        )
    return secret


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def user_from_token(token: str) -> dict:
    """Decode a JWT and register its subject on first sight."""
    try:
        payload = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError as e:
        logger.info("auth.token_rejected", error=str(e))
        raise _unauthorized("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: missing sub")
    get_or_create_user(user_id, email=payload.get("email"), name=payload.get("name"))
    return {
        "id": user_id,
        "email": payload.get("email"),
        "name": payload.get("name"),
    }


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> dict:
    """Bearer-token auth for JSON routes."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return user_from_token(credentials.credentials)


async def get_stream_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    token: Optional[str] = Query(None),
) -> dict:
    """Auth for event streams: EventSource cannot set headers, so ?token= is accepted too."""
    if credentials is not None:
        return user_from_token(credentials.credentials)
    if token:
        return user_from_token(token)
    raise _unauthorized("Not authenticated")
