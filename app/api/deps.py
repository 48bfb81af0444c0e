"""
Request dependencies for admin routes.
"""
from typing import Any, Dict, Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.exceptions import ForbiddenException, InvalidTokenException, UnauthorizedException
from app.core.security import decode_token, is_admin_payload, verify_token_type

bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """
    Claims of a valid access token.

    Raises:
        UnauthorizedException: no bearer token
        TokenExpiredException: token has expired
        InvalidTokenException: bad signature, wrong type or no subject
    """
    if not credentials:
        raise UnauthorizedException("Authentication required")

    payload = decode_token(credentials.credentials)
    if not payload or not verify_token_type(payload) or not payload.get("sub"):
        raise InvalidTokenException()
    return payload


async def get_admin_user(
    payload: Dict[str, Any] = Depends(get_token_payload),
) -> Dict[str, Any]:
    """Admin claims. Binds the admin subject into the log context so cascades are attributable."""
    if not is_admin_payload(payload):
        raise ForbiddenException("Admin access required")
    structlog.contextvars.bind_contextvars(admin=payload["sub"])
    return payload
