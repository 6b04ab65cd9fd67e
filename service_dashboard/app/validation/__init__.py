"""Input validation for the dashboard service.

Exposes the username validator variants used by the proxy routes.
"""

from .username import (
    UsernameValidationError,
    UsernameValidator,
    dotted_username,
    strict_username,
)

__all__ = [
    "UsernameValidationError",
    "UsernameValidator",
    "dotted_username",
    "strict_username",
]
