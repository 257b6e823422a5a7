from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from quicksell_admin.core.config import settings
from quicksell_admin.core.errors import AuthError
from quicksell_admin.core.security import TokenError, decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_current_user_id(token: Optional[str] = Depends(oauth2_scheme)) -> int:
    """
    Authentication only: turns the bearer token into a caller id.
    The admin check happens in the services (see services.access).
    """
    if not token:
        raise AuthError("Missing bearer token")

    try:
        payload = decode_token(token)
    except TokenError:
        raise AuthError("Invalid or expired token")

    # Support common claim keys
    user_id = payload.get("sub") or payload.get("user_id") or payload.get("id")
    if user_id is None:
        raise AuthError("Token missing user id (sub/user_id)")

    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise AuthError("Invalid user id in token")


def get_client_ip(request: Request) -> Optional[str]:
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
