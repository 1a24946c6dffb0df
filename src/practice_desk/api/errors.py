"""Exceptions raised by the practice API client."""

from typing import Any


class PracticeAPIError(Exception):
    """Base exception for practice API errors."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details

    @property
    def user_message(self) -> str | None:
        """Message supplied by the backend, if any."""
        if isinstance(self.details, dict):
            message = self.details.get("message") or self.details.get("error")
            if message:
                return str(message)
        return None


class AuthenticationError(PracticeAPIError):
    """Authentication failed."""

    pass


class NotFoundError(PracticeAPIError):
    """Requested record does not exist."""

    pass


class RateLimitError(PracticeAPIError):
    """Rate limit exceeded."""

    pass
