"""Weekly schedule API routes."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status
from pydantic import ValidationError

from lifepilot.api.deps import get_store, http_error_for
from lifepilot.api.schemas.schedule import (
    ActivityCreateRequest,
    ActivityMutationResponse,
    ActivityUpdateRequest,
    CalendarImportRequest,
    CalendarImportResponse,
    ConflictCheckRequest,
    ConflictCheckResponse,
    ReminderOut,
    RemindersResponse,
    RescheduleRequest,
    ScheduleResponse,
    StatisticsResponse,
    UserScopedRequest,
)
from lifepilot.domain.schedule import ScheduledActivity
from lifepilot.observability.metrics import log_metric
from lifepilot.observability.tracing import trace
from lifepilot.services.calendar_import import import_calendar_events
from lifepilot.services.document_store import DocumentStore, PersistenceError
from lifepilot.services.reminders import build_reminder_requests
from lifepilot.services.schedule_service import load_editor, load_schedule, regenerate_for_user, schedule_timezone
from lifepilot.services.statistics import TimeRangeOption, get_activity_statistics

router = APIRouter()

USER_ID_QUERY = Query(..., min_length=1, max_length=128)


def _request_id(http_request: Request) -> str | None:
    return getattr(http_request.state, "request_id", None)


def _unprocessable(exc: ValidationError) -> HTTPException:
    messages = "; ".join(error["msg"] for error in exc.errors())
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=messages)


def _not_found(activity_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Activity {activity_id} not found")


@router.get("/schedule", response_model=ScheduleResponse, tags=["schedule"])
def get_schedule(
    http_request: Request,
    user_id: str = USER_ID_QUERY,
    store: DocumentStore = Depends(get_store),
) -> ScheduleResponse:
    request_id = _request_id(http_request)
    with trace("schedule.get", metadata={"route": "/schedule"}, user_id=user_id, request_id=request_id):
        try:
            schedule = store.get_schedule(user_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
    return ScheduleResponse(schedule=schedule, request_id=request_id or "")


@router.post("/schedule/regenerate", response_model=ScheduleResponse, tags=["schedule"])
def regenerate(
    payload: UserScopedRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> ScheduleResponse:
    """Rebuild generated activities from accepted recommendations, keeping custom ones."""
    request_id = _request_id(http_request)
    with trace("schedule.regenerate", user_id=payload.user_id, request_id=request_id):
        try:
            schedule = regenerate_for_user(store, payload.user_id, request_id=request_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
    log_metric("schedule.regenerate.success", 1)
    return ScheduleResponse(schedule=schedule, request_id=request_id or "")


@router.post("/schedule/activities", response_model=ActivityMutationResponse, tags=["schedule"])
def add_activity(
    payload: ActivityCreateRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> ActivityMutationResponse:
    request_id = _request_id(http_request)
    try:
        activity = ScheduledActivity(**payload.model_dump(exclude={"user_id"}))
    except ValidationError as exc:
        raise _unprocessable(exc) from exc

    with trace(
        "schedule.add_activity",
        metadata={"recurring": activity.recurrence_rule is not None, "type": activity.activity_type.value},
        user_id=payload.user_id,
        request_id=request_id,
    ):
        try:
            editor = load_editor(store, payload.user_id, request_id=request_id)
            editor.add_activity(activity)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc

    log_metric("schedule.activity.added", 1, metadata={"recurring": activity.recurrence_rule is not None})
    return ActivityMutationResponse(activity_id=activity.id, schedule=editor.schedule, request_id=request_id or "")


@router.put("/schedule/activities/{activity_id}", response_model=ActivityMutationResponse, tags=["schedule"])
def update_activity(
    payload: ActivityUpdateRequest,
    http_request: Request,
    activity_id: str = Path(..., min_length=1),
    store: DocumentStore = Depends(get_store),
) -> ActivityMutationResponse:
    request_id = _request_id(http_request)
    with trace("schedule.update_activity", metadata={"activity_id": activity_id}, user_id=payload.user_id, request_id=request_id):
        try:
            editor = load_editor(store, payload.user_id, request_id=request_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc

        found = editor.schedule.find_activity(activity_id)
        if found is None:
            raise _not_found(activity_id)

        merged: Dict[str, Any] = found[1].model_dump()
        merged.update(payload.model_dump(exclude_unset=True, exclude={"user_id"}))
        merged["id"] = activity_id
        try:
            updated = ScheduledActivity.model_validate(merged)
        except ValidationError as exc:
            raise _unprocessable(exc) from exc

        try:
            editor.update_activity(updated)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc

    log_metric("schedule.activity.updated", 1)
    return ActivityMutationResponse(activity_id=activity_id, schedule=editor.schedule, request_id=request_id or "")


@router.delete("/schedule/activities/{activity_id}", response_model=ActivityMutationResponse, tags=["schedule"])
def delete_activity(
    http_request: Request,
    activity_id: str = Path(..., min_length=1),
    user_id: str = USER_ID_QUERY,
    store: DocumentStore = Depends(get_store),
) -> ActivityMutationResponse:
    """Delete an activity and every recurring instance that points at it."""
    request_id = _request_id(http_request)
    with trace("schedule.delete_activity", metadata={"activity_id": activity_id}, user_id=user_id, request_id=request_id):
        try:
            editor = load_editor(store, user_id, request_id=request_id)
            applied = editor.delete_activity(activity_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
    if not applied:
        raise _not_found(activity_id)

    log_metric("schedule.activity.deleted", 1)
    return ActivityMutationResponse(activity_id=activity_id, schedule=editor.schedule, request_id=request_id or "")


@router.post(
    "/schedule/activities/{activity_id}/toggle",
    response_model=ActivityMutationResponse,
    tags=["schedule"],
)
def toggle_activity(
    payload: UserScopedRequest,
    http_request: Request,
    activity_id: str = Path(..., min_length=1),
    store: DocumentStore = Depends(get_store),
) -> ActivityMutationResponse:
    request_id = _request_id(http_request)
    with trace("schedule.toggle_activity", metadata={"activity_id": activity_id}, user_id=payload.user_id, request_id=request_id):
        try:
            editor = load_editor(store, payload.user_id, request_id=request_id)
            applied = editor.toggle_completion(activity_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
    if not applied:
        raise _not_found(activity_id)

    log_metric("schedule.activity.toggled", 1)
    return ActivityMutationResponse(activity_id=activity_id, schedule=editor.schedule, request_id=request_id or "")


@router.post(
    "/schedule/activities/{activity_id}/reschedule",
    response_model=ActivityMutationResponse,
    tags=["schedule"],
)
def reschedule_activity(
    payload: RescheduleRequest,
    http_request: Request,
    activity_id: str = Path(..., min_length=1),
    store: DocumentStore = Depends(get_store),
) -> ActivityMutationResponse:
    """Move an activity to a new start, keeping its duration."""
    request_id = _request_id(http_request)
    with trace("schedule.reschedule_activity", metadata={"activity_id": activity_id}, user_id=payload.user_id, request_id=request_id):
        try:
            editor = load_editor(store, payload.user_id, request_id=request_id)
            applied = editor.reschedule_activity(activity_id, payload.new_start_time)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
    if not applied:
        raise _not_found(activity_id)

    log_metric("schedule.activity.rescheduled", 1)
    return ActivityMutationResponse(activity_id=activity_id, schedule=editor.schedule, request_id=request_id or "")


@router.post("/schedule/conflicts", response_model=ConflictCheckResponse, tags=["schedule"])
def check_conflict(
    payload: ConflictCheckRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> ConflictCheckResponse:
    request_id = _request_id(http_request)
    if payload.end_time <= payload.start_time:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="end_time must be after start_time")
    with trace("schedule.check_conflict", user_id=payload.user_id, request_id=request_id):
        try:
            editor = load_editor(store, payload.user_id, request_id=request_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
        conflict = editor.check_time_conflict(payload.start_time, payload.end_time, payload.excluding_id)
    return ConflictCheckResponse(conflict=conflict, request_id=request_id or "")


@router.post("/schedule/import", response_model=CalendarImportResponse, tags=["schedule"])
def import_calendar(
    payload: CalendarImportRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
) -> CalendarImportResponse:
    request_id = _request_id(http_request)
    with trace(
        "schedule.import_calendar",
        metadata={"events": len(payload.events), "range_days": int(payload.import_range)},
        user_id=payload.user_id,
        request_id=request_id,
    ):
        try:
            editor = load_editor(store, payload.user_id, request_id=request_id)
            result = import_calendar_events(editor, payload.events, import_range=payload.import_range)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc

    log_metric("schedule.import.imported", result.imported)
    log_metric("schedule.import.errors", result.errors)
    return CalendarImportResponse(
        imported=result.imported,
        skipped=result.skipped,
        errors=result.errors,
        schedule=editor.schedule,
        request_id=request_id or "",
    )


@router.get("/schedule/statistics", response_model=StatisticsResponse, tags=["schedule"])
def get_statistics(
    http_request: Request,
    user_id: str = USER_ID_QUERY,
    time_range: TimeRangeOption = Query(TimeRangeOption.week),
    store: DocumentStore = Depends(get_store),
) -> StatisticsResponse:
    request_id = _request_id(http_request)
    with trace("schedule.statistics", metadata={"time_range": time_range.value}, user_id=user_id, request_id=request_id):
        try:
            schedule = load_schedule(store, user_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
        statistics = get_activity_statistics(schedule, time_range, tz=schedule_timezone())
    return StatisticsResponse(statistics=statistics, request_id=request_id or "")


@router.get("/schedule/reminders", response_model=RemindersResponse, tags=["schedule"])
def get_reminders(
    http_request: Request,
    user_id: str = USER_ID_QUERY,
    store: DocumentStore = Depends(get_store),
) -> RemindersResponse:
    request_id = _request_id(http_request)
    with trace("schedule.reminders", user_id=user_id, request_id=request_id):
        try:
            schedule = load_schedule(store, user_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
        reminders = [
            ReminderOut(
                activity_id=reminder.activity_id,
                title=reminder.title,
                fire_at=reminder.fire_at,
                start_time=reminder.start_time,
                minutes_before=reminder.minutes_before,
            )
            for reminder in build_reminder_requests(schedule)
        ]
    return RemindersResponse(reminders=reminders, request_id=request_id or "")
