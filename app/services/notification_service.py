"""
User-facing notification collector
Scheduling code reports problems here instead of raising; the API returns
the collected toasts so the frontend can display them
"""

import logging
from typing import Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class Notification(BaseModel):
    """User-facing toast message"""

    title: str
    description: Optional[str] = None
    variant: str = "default"  # default, destructive


class Notifier:
    """Collects toast notifications for one scheduling session"""

    def __init__(self):
        self._pending: list[Notification] = []

    def notify(self, title: str, description: Optional[str] = None, variant: str = "default") -> None:
        notification = Notification(title=title, description=description, variant=variant)
        self._pending.append(notification)
        if variant == "destructive":
            logger.warning(f"⚠️ Notification: {title} - {description}")
        else:
            logger.info(f"🔔 Notification: {title} - {description}")

    def drain(self) -> list[Notification]:
        """Return and clear pending notifications"""
        pending, self._pending = self._pending, []
        return pending

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)


def notify_slot_load_failed(notifier: Notifier) -> None:
    notifier.notify(
        "Error loading time slots",
        "Failed to load available time slots. Please try again.",
        variant="destructive",
    )


def notify_no_slots_available(notifier: Notifier, role: str) -> None:
    notifier.notify(
        f"No {role} time slots available",
        f"There are no {role} windows for the selected date. Please choose another date.",
    )


def notify_selection_rejected(notifier: Notifier, what: str) -> None:
    notifier.notify(
        f"{what} is no longer available",
        "Your selection could not be applied. Please choose again.",
        variant="destructive",
    )


def notify_validation_errors(notifier: Notifier, errors: list[str]) -> None:
    """One toast per validation message, in validation order"""
    for message in errors:
        notifier.notify(message, "You need to complete this step to continue")
