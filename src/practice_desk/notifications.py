"""User-facing notifications.

Failures at the mutation boundary are turned into notifications instead
of propagating into the rendering layer. Hooks let a front end display
them as they arrive.
"""

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal

import structlog

logger = structlog.get_logger(__name__)

Variant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notification:
    """A transient message shown to the user."""

    title: str
    description: str
    variant: Variant = "default"
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


class Notifier:
    """Collects notifications and forwards them to registered hooks."""

    def __init__(self, buffer_size: int = 50):
        self._recent: deque[Notification] = deque(maxlen=buffer_size)
        self._hooks: list[Callable[[Notification], None]] = []
        self._logger = logger.bind(component="notifier")

    @property
    def recent(self) -> list[Notification]:
        return list(self._recent)

    @property
    def last(self) -> Notification | None:
        return self._recent[-1] if self._recent else None

    def add_hook(self, hook: Callable[[Notification], None]) -> None:
        self._hooks.append(hook)

    def remove_hook(self, hook: Callable[[Notification], None]) -> None:
        if hook in self._hooks:
            self._hooks.remove(hook)

    def notify(self, notification: Notification) -> Notification:
        self._recent.append(notification)
        for hook in self._hooks:
            try:
                hook(notification)
            except Exception as e:
                self._logger.error("notification_hook_error", error=str(e))
        return notification

    def success(self, title: str, description: str) -> Notification:
        return self.notify(Notification(title, description))

    def error(self, description: str, title: str = "Error") -> Notification:
        self._logger.info("error_notified", title=title, description=description)
        return self.notify(Notification(title, description, variant="destructive"))
