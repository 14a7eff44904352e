"""Reminder delivery interface."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from lifepilot.services.reminders import ReminderRequest


@dataclass
class NotificationResult:
    status: str
    reason: str
    scheduled: int = 0


class ReminderService:
    """Base interface for reminder providers.

    Providers receive the complete set of pending reminders for a user and
    replace whatever they scheduled before.
    """

    def replace_reminders(
        self,
        *,
        user_id: str,
        reminders: Sequence[ReminderRequest],
        request_id: str | None,
    ) -> NotificationResult:
        raise NotImplementedError
