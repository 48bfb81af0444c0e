"""
API package.
"""
from app.api.routes import api_router
from app.api.deps import (
    get_token_payload,
    get_admin_user,
)

__all__ = [
    "api_router",
    "get_token_payload",
    "get_admin_user",
]
