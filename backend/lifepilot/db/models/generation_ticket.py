"""Generation ticket ORM model."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, String, Text

from lifepilot.db.base import Base


class GenerationTicketRecord(Base):
    __tablename__ = "generation_tickets"
    __table_args__ = (
        Index("ix_generation_tickets_user_id", "user_id"),
        Index("ix_generation_tickets_status", "status"),
    )

    ticket_id = Column(String(64), primary_key=True)
    user_id = Column(String(128), nullable=False)
    status = Column(String(16), nullable=False, default="pending")
    started_at = Column(DateTime(timezone=True), nullable=False)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    reason = Column(Text, nullable=True)
