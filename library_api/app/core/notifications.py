"""
Transient UI notifications and the global loading indicator.

The coordinator reports the outcome of user actions through a
``Notifier``: each message becomes a toast that the UI shows until it
expires (three seconds by default).  The notifier also tracks a single
loading label so a client can render a spinner while the repository
fetches collections.  Everything here is kept in process memory and
is only touched from the event loop; a UI client polls it through
``GET /api/v1/notifications``.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, List, Optional


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Notification:
    message: str
    success: bool
    created_at: datetime
    expires_at: datetime

    @property
    def kind(self) -> str:
        return "success" if self.success else "error"


class Notifier:
    """Collects toasts and the current loading label."""

    def __init__(
        self,
        display_seconds: float = 3,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.display_seconds = display_seconds
        self.clock = clock
        self._notifications: List[Notification] = []
        self._loader_label: Optional[str] = None

    def show_message(self, message: str, success: bool = True) -> Notification:
        """Queue a toast that auto‑dismisses after ``display_seconds``."""
        now = self.clock()
        notification = Notification(
            message=message,
            success=success,
            created_at=now,
            expires_at=now + timedelta(seconds=self.display_seconds),
        )
        if success:
            logger.info("Notification: %s", message)
        else:
            logger.error("Notification: %s", message)
        self._prune(now)
        self._notifications.append(notification)
        return notification

    def active(self) -> List[Notification]:
        """Return toasts that have not expired yet, oldest first."""
        self._prune(self.clock())
        return list(self._notifications)

    def _prune(self, now: datetime) -> None:
        self._notifications = [n for n in self._notifications if n.expires_at > now]

    # Loading indicator -------------------------------------------------

    @property
    def loader_label(self) -> Optional[str]:
        return self._loader_label

    def show_loader(self, label: str) -> None:
        logger.debug("Loader shown: %s", label)
        self._loader_label = label

    def hide_loader(self) -> None:
        self._loader_label = None

    @contextmanager
    def loading(self, label: str) -> Iterator[None]:
        self.show_loader(label)
        try:
            yield
        finally:
            self.hide_loader()
