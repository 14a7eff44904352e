"""Profile API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Request

from lifepilot.api.deps import get_store, http_error_for
from lifepilot.api.schemas.profiles import ProfileResponse, ProfileUpsertRequest
from lifepilot.domain.profile import UserProfile
from lifepilot.observability.metrics import log_metric
from lifepilot.observability.tracing import trace
from lifepilot.services.document_store import DocumentNotFound, DocumentStore, PersistenceError

router = APIRouter()


@router.put("/profiles/{user_id}", response_model=ProfileResponse, tags=["profiles"])
def upsert_profile(
    payload: ProfileUpsertRequest,
    http_request: Request,
    user_id: str = Path(..., min_length=1, max_length=128),
    store: DocumentStore = Depends(get_store),
) -> ProfileResponse:
    """Create or replace a profile, keeping the original creation time."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("profiles.upsert", metadata={"route": "/profiles"}, user_id=user_id, request_id=request_id):
        try:
            existing = store.get_profile(user_id)
        except DocumentNotFound:
            existing = None
        except PersistenceError as exc:
            raise http_error_for(exc) from exc

        data = payload.model_dump()
        if existing is not None:
            data["created_at"] = existing.created_at
        profile = UserProfile(id=user_id, **data)
        try:
            store.save_profile(profile)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc

    log_metric("profiles.upsert.success", 1, metadata={"created": existing is None})
    return ProfileResponse(profile=profile, request_id=request_id or "")


@router.get("/profiles/{user_id}", response_model=ProfileResponse, tags=["profiles"])
def get_profile(
    http_request: Request,
    user_id: str = Path(..., min_length=1, max_length=128),
    store: DocumentStore = Depends(get_store),
) -> ProfileResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("profiles.get", metadata={"route": "/profiles"}, user_id=user_id, request_id=request_id):
        try:
            profile = store.get_profile(user_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
    return ProfileResponse(profile=profile, request_id=request_id or "")
