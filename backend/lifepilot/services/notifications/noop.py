"""No-op reminder provider (logs only)."""
from __future__ import annotations

import logging
from typing import Sequence

from lifepilot.services.notifications.base import NotificationResult, ReminderService
from lifepilot.services.reminders import ReminderRequest

logger = logging.getLogger(__name__)


class NoopReminderService(ReminderService):
    def replace_reminders(
        self,
        *,
        user_id: str,
        reminders: Sequence[ReminderRequest],
        request_id: str | None,
    ) -> NotificationResult:
        next_fire = reminders[0].fire_at.isoformat() if reminders else "-"
        logger.info(
            "Reminders replaced (noop) user=%s count=%s next=%s",
            user_id,
            len(reminders),
            next_fire,
        )
        return NotificationResult(status="noop", reason="reminder provider is noop", scheduled=len(reminders))
