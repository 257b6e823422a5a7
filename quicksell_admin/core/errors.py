from __future__ import annotations

from typing import Optional


class AdminError(Exception):
    """
    Base for every failure an admin operation can surface to the caller.

    `message` is what the client sees; anything sensitive belongs in the log,
    never here.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthError(AdminError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(AdminError):
    status_code = 403
    default_message = "Access denied. Admin privileges required."


class NotFound(AdminError):
    status_code = 404
    default_message = "Not found"


class ValidationError(AdminError):
    status_code = 400
    default_message = "Invalid request"


class StoreError(AdminError):
    status_code = 500
    default_message = "Database operation failed"
