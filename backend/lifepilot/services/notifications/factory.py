"""Reminder provider factory."""
from __future__ import annotations

import logging
from functools import lru_cache

from lifepilot.core.config import settings
from lifepilot.services.notifications.base import ReminderService
from lifepilot.services.notifications.noop import NoopReminderService

logger = logging.getLogger(__name__)


@lru_cache
def get_reminder_service() -> ReminderService:
    provider = settings.notifications_provider.lower()
    if provider != "noop":
        logger.warning("Unknown reminder provider %r; using noop", provider)
    return NoopReminderService()
