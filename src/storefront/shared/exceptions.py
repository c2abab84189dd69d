"""Caller-facing errors that Protean does not model.

``ValidationError`` and ``ObjectNotFoundError`` come from ``protean.exceptions``;
the two below cover who the caller is and what they may touch.
"""


class NotAuthenticated(Exception):
    """No caller identity was supplied with the request."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)
        self.message = message


class AccessDenied(Exception):
    """The caller is known but not allowed to perform the operation."""

    def __init__(self, message: str = "You do not have permission to perform this action") -> None:
        super().__init__(message)
        self.message = message
