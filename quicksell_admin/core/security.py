from __future__ import annotations

import jwt

from quicksell_admin.core.config import settings


class TokenError(Exception):
    pass


# -------------------------
# JWT tokens (issued by the main app; we only verify)
# -------------------------
def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALG])
    except jwt.ExpiredSignatureError as e:
        raise TokenError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise TokenError("Invalid token") from e
