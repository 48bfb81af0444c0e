"""
Admin token handling.

There are no user accounts. An admin is whoever presents an access token
whose `role` claim equals `settings.admin_role`; `scripts/seed.py` mints
one for local development.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import settings
from app.core.exceptions import TokenExpiredException

ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    data: dict[str, Any],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Encode `data` as a signed access token.

    Args:
        data: Claims to include (`sub`, `role`, ...)
        expires_delta: Lifetime override; defaults to
            `settings.access_token_expire_minutes`
    """
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = {
        **data,
        "exp": datetime.now(timezone.utc) + lifetime,
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def create_admin_token(subject: str = "admin", expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token({"sub": subject, "role": settings.admin_role}, expires_delta)


def decode_token(token: str) -> Optional[dict[str, Any]]:
    """
    Decode and verify a token.

    Returns the claims, or None for a malformed or badly signed token.

    Raises:
        TokenExpiredException: signature is valid but `exp` has passed
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        raise TokenExpiredException()
    except JWTError:
        return None


def verify_token_type(payload: dict[str, Any], expected_type: str = ACCESS_TOKEN_TYPE) -> bool:
    return payload.get("type") == expected_type


def is_admin_payload(payload: dict[str, Any]) -> bool:
    return payload.get("role") == settings.admin_role
