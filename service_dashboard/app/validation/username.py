"""GFG username validation.

Usernames arrive as raw path parameters. They are checked against a length
window and a character allow-list before anything is sent to the backend.
Two allow-lists are in use: the strict one (letters, digits, ``_`` and ``-``)
and the dotted one, which also accepts ``.`` because GFG handles such as
``john.doe`` exist.

Only the first failing rule is reported, in the order minimum length, maximum
length, character set.
"""

from typing import Annotated, Any, Dict, Mapping

from pydantic import StringConstraints, TypeAdapter, ValidationError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50

STRICT_PATTERN = r"^[a-zA-Z0-9_-]+$"
DOTTED_PATTERN = r"^[a-zA-Z0-9_.-]+$"


class UsernameValidationError(ValueError):
    """Raised when a username fails validation; maps to HTTP 400."""

    def __init__(self, message: str, username: Any = None):
        super().__init__(message)
        self.message = message
        self.username = username


class UsernameValidator:
    """Validates raw usernames against a length window and a pattern.

    Parameters
    - pattern: Regular expression the whole username must match
    - messages: Maps ``too_short``, ``too_long`` and ``invalid`` to the text
      reported for each failure
    """

    def __init__(self, pattern: str, messages: Mapping[str, str]):
        self.pattern = pattern
        self.messages: Dict[str, str] = dict(messages)
        self._adapter = TypeAdapter(
            Annotated[
                str,
                StringConstraints(
                    min_length=USERNAME_MIN_LENGTH,
                    max_length=USERNAME_MAX_LENGTH,
                    pattern=pattern,
                ),
            ]
        )

    @property
    def allows_dot(self) -> bool:
        return "." in self.pattern

    def validate(self, raw: Any) -> str:
        """Return ``raw`` unchanged when valid, else raise ``UsernameValidationError``."""
        try:
            return self._adapter.validate_python(raw, strict=True)
        except ValidationError as exc:
            error_type = exc.errors()[0]["type"]
            raise UsernameValidationError(self._message_for(error_type), raw) from None

    def _message_for(self, error_type: str) -> str:
        if error_type == "string_too_short":
            return self.messages["too_short"]
        if error_type == "string_too_long":
            return self.messages["too_long"]
        # Pattern mismatch and non-string input both count as a bad format.
        return self.messages["invalid"]


strict_username = UsernameValidator(
    STRICT_PATTERN,
    {
        "too_short": f"String must contain at least {USERNAME_MIN_LENGTH} character(s)",
        "too_long": f"String must contain at most {USERNAME_MAX_LENGTH} character(s)",
        "invalid": "Invalid",
    },
)

dotted_username = UsernameValidator(
    DOTTED_PATTERN,
    {
        "too_short": "Username too short",
        "too_long": "Username too long",
        "invalid": "Invalid username format",
    },
)
