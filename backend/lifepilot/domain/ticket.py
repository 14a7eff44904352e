"""Generation ticket tracking an in-flight analysis request."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from lifepilot.domain.analysis import new_id
from lifepilot.domain.enums import GenerationStatus


class GenerationTicket(BaseModel):
    ticket_id: str = Field(default_factory=new_id)
    user_id: str
    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    status: GenerationStatus = GenerationStatus.pending
    reason: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.status == GenerationStatus.pending
