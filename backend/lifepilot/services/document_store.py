"""Per-user document persistence.

Profiles, analyses and schedules are stored as one JSON document per user.
Failures surface as ``PersistenceError`` subclasses tagged with a ``kind``;
nothing here retries.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifepilot.db.models.documents import AnalysisDocument, ScheduleDocument, UserProfileDocument
from lifepilot.db.models.generation_ticket import GenerationTicketRecord
from lifepilot.domain.analysis import PersonalizedAnalysis
from lifepilot.domain.enums import GenerationStatus
from lifepilot.domain.profile import UserProfile
from lifepilot.domain.schedule import WeeklySchedule, ensure_aware
from lifepilot.domain.ticket import GenerationTicket
from lifepilot.services.change_feed import ChangeFeed, change_feed

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

KIND_PROFILE = "profile"
KIND_ANALYSIS = "analysis"
KIND_SCHEDULE = "schedule"


class PersistenceError(Exception):
    kind = "persistence_error"

    def __init__(self, message: str, *, document: str | None = None, user_id: str | None = None) -> None:
        super().__init__(message)
        self.document = document
        self.user_id = user_id


class DocumentNotFound(PersistenceError):
    kind = "document_not_found"


class SaveError(PersistenceError):
    kind = "save_error"


class FetchError(PersistenceError):
    kind = "fetch_error"


class DocumentStore:
    def __init__(self, session: Session, feed: Optional[ChangeFeed] = None) -> None:
        self.session = session
        self.feed = feed or change_feed

    def save_profile(self, profile: UserProfile) -> UserProfile:
        self._save(UserProfileDocument, KIND_PROFILE, profile.id, profile)
        return profile

    def get_profile(self, user_id: str) -> UserProfile:
        return self._get(UserProfileDocument, KIND_PROFILE, user_id, UserProfile)

    def save_analysis(self, analysis: PersonalizedAnalysis) -> PersonalizedAnalysis:
        self._save(AnalysisDocument, KIND_ANALYSIS, analysis.user_id, analysis)
        return analysis

    def get_analysis(self, user_id: str) -> PersonalizedAnalysis:
        return self._get(AnalysisDocument, KIND_ANALYSIS, user_id, PersonalizedAnalysis)

    def observe_analysis(
        self,
        user_id: str,
        callback: Callable[[Optional[PersonalizedAnalysis]], None],
    ) -> Callable[[], None]:
        return self._observe(KIND_ANALYSIS, user_id, callback, self.get_analysis)

    def save_schedule(self, schedule: WeeklySchedule) -> WeeklySchedule:
        self._save(ScheduleDocument, KIND_SCHEDULE, schedule.user_id, schedule)
        return schedule

    def get_schedule(self, user_id: str) -> WeeklySchedule:
        return self._get(ScheduleDocument, KIND_SCHEDULE, user_id, WeeklySchedule)

    def observe_schedule(
        self,
        user_id: str,
        callback: Callable[[Optional[WeeklySchedule]], None],
    ) -> Callable[[], None]:
        return self._observe(KIND_SCHEDULE, user_id, callback, self.get_schedule)

    def save_ticket(self, ticket: GenerationTicket) -> GenerationTicket:
        try:
            row = self.session.get(GenerationTicketRecord, ticket.ticket_id)
            if row is None:
                row = GenerationTicketRecord(ticket_id=ticket.ticket_id, user_id=ticket.user_id)
                self.session.add(row)
            row.status = ticket.status.value
            row.started_at = ticket.started_at
            row.finished_at = ticket.finished_at
            row.reason = ticket.reason
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to save generation ticket %s: %s", ticket.ticket_id, exc)
            raise SaveError("Failed to save generation ticket", document="ticket", user_id=ticket.user_id) from exc
        return ticket

    def get_ticket(self, ticket_id: str) -> GenerationTicket:
        try:
            row = self.session.get(GenerationTicketRecord, ticket_id)
        except SQLAlchemyError as exc:
            raise FetchError("Failed to load generation ticket", document="ticket") from exc
        if row is None:
            raise DocumentNotFound(f"Generation ticket {ticket_id} not found", document="ticket")
        return _ticket_from_row(row)

    def latest_ticket(self, user_id: str) -> Optional[GenerationTicket]:
        try:
            row = (
                self.session.query(GenerationTicketRecord)
                .filter(GenerationTicketRecord.user_id == user_id)
                .order_by(GenerationTicketRecord.started_at.desc())
                .first()
            )
        except SQLAlchemyError as exc:
            raise FetchError("Failed to load generation tickets", document="ticket", user_id=user_id) from exc
        return _ticket_from_row(row) if row is not None else None

    def pending_tickets_started_before(self, cutoff: datetime) -> List[GenerationTicket]:
        try:
            rows = (
                self.session.query(GenerationTicketRecord)
                .filter(GenerationTicketRecord.status == GenerationStatus.pending.value)
                .all()
            )
        except SQLAlchemyError as exc:
            raise FetchError("Failed to load pending generation tickets", document="ticket") from exc
        tickets = [_ticket_from_row(row) for row in rows]
        # Filtered here because SQLite drops tz info from stored datetimes.
        return [ticket for ticket in tickets if ticket.started_at < ensure_aware(cutoff)]

    def _save(self, model, kind: str, user_id: str, document: BaseModel) -> None:
        try:
            row = self.session.get(model, user_id)
            if row is None:
                row = model(user_id=user_id, document=document)
                self.session.add(row)
            else:
                row.document = document
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error("Failed to save %s for user %s: %s", kind, user_id, exc)
            raise SaveError(f"Failed to save {kind}", document=kind, user_id=user_id) from exc

        logger.debug("Saved %s for user %s", kind, user_id)
        self.feed.publish(kind, user_id, document)

    def _get(self, model, kind: str, user_id: str, schema: Type[M]) -> M:
        try:
            row = self.session.get(model, user_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch %s for user %s: %s", kind, user_id, exc)
            raise FetchError(f"Failed to fetch {kind}", document=kind, user_id=user_id) from exc
        if row is None:
            raise DocumentNotFound(f"No {kind} stored for user {user_id}", document=kind, user_id=user_id)
        try:
            return schema.model_validate(row.document)
        except ValidationError as exc:
            logger.error("Stored %s for user %s is unreadable: %s", kind, user_id, exc)
            raise FetchError(f"Stored {kind} is unreadable", document=kind, user_id=user_id) from exc

    def _observe(self, kind: str, user_id: str, callback, loader) -> Callable[[], None]:
        unsubscribe = self.feed.subscribe(kind, user_id, callback)
        try:
            current = loader(user_id)
        except DocumentNotFound:
            current = None
        except PersistenceError:
            unsubscribe()
            raise
        callback(current)
        return unsubscribe


def _ticket_from_row(row: GenerationTicketRecord) -> GenerationTicket:
    return GenerationTicket(
        ticket_id=row.ticket_id,
        user_id=row.user_id,
        status=GenerationStatus(row.status),
        started_at=ensure_aware(row.started_at),
        finished_at=ensure_aware(row.finished_at) if row.finished_at else None,
        reason=row.reason,
    )
