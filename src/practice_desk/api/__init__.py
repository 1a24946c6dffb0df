"""REST client for the practice management backend."""

from practice_desk.api.client import PracticeAPIClient
from practice_desk.api.errors import (
    AuthenticationError,
    NotFoundError,
    PracticeAPIError,
    RateLimitError,
)

__all__ = [
    "PracticeAPIClient",
    "PracticeAPIError",
    "AuthenticationError",
    "NotFoundError",
    "RateLimitError",
]
