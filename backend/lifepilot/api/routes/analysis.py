"""Personalized analysis API routes."""
from __future__ import annotations

from time import perf_counter
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, status

from lifepilot.api.deps import get_client, get_store, http_error_for
from lifepilot.api.schemas.analysis import (
    AnalysisResponse,
    GenerateAnalysisRequest,
    GenerateAnalysisResponse,
    RecommendationStatusRequest,
    RecommendationStatusResponse,
)
from lifepilot.observability.metrics import log_metric
from lifepilot.observability.tracing import trace
from lifepilot.services.analysis_service import generate_analysis, update_recommendation_status
from lifepilot.services.document_store import DocumentStore, PersistenceError
from lifepilot.services.generation_client import GenerationClient

router = APIRouter()


@router.post("/analysis/generate", response_model=GenerateAnalysisResponse, tags=["analysis"])
def generate(
    payload: GenerateAnalysisRequest,
    http_request: Request,
    store: DocumentStore = Depends(get_store),
    client: Optional[GenerationClient] = Depends(get_client),
) -> GenerateAnalysisResponse:
    """Generate a fresh analysis from the stored profile.

    Always answers with a renderable analysis; ``status`` says whether it was
    parsed from the generation response or is the placeholder.
    """
    request_id = getattr(http_request.state, "request_id", None)
    user_id = payload.user_id
    start = perf_counter()
    with trace(
        "analysis.generate_route",
        metadata={"route": "/analysis/generate", "client_configured": client is not None},
        user_id=user_id,
        request_id=request_id,
    ):
        try:
            outcome = generate_analysis(store, user_id, client, request_id=request_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc

    log_metric("analysis.generate.route_latency_ms", (perf_counter() - start) * 1000)
    log_metric("analysis.generate.success", 0 if outcome.result.is_fallback else 1)
    return GenerateAnalysisResponse(
        analysis=outcome.result.analysis,
        status=outcome.result.status,
        reason=outcome.result.reason,
        ticket_id=outcome.ticket.ticket_id,
        ticket_status=outcome.ticket.status,
        saved=outcome.saved,
        request_id=request_id or "",
    )


@router.get("/analysis", response_model=AnalysisResponse, tags=["analysis"])
def get_analysis(
    http_request: Request,
    user_id: str = Query(..., min_length=1, max_length=128),
    store: DocumentStore = Depends(get_store),
) -> AnalysisResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("analysis.get", metadata={"route": "/analysis"}, user_id=user_id, request_id=request_id):
        try:
            analysis = store.get_analysis(user_id)
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
    return AnalysisResponse(analysis=analysis, request_id=request_id or "")


@router.patch(
    "/analysis/recommendations/{recommendation_id}",
    response_model=RecommendationStatusResponse,
    tags=["analysis"],
)
def set_recommendation_status(
    payload: RecommendationStatusRequest,
    http_request: Request,
    recommendation_id: str = Path(..., min_length=1),
    store: DocumentStore = Depends(get_store),
) -> RecommendationStatusResponse:
    """Accept, reject or reset a recommendation and rebuild the schedule."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "analysis.recommendation_status",
        metadata={"recommendation_id": recommendation_id, "accepted": payload.accepted},
        user_id=payload.user_id,
        request_id=request_id,
    ):
        try:
            update = update_recommendation_status(
                store,
                payload.user_id,
                recommendation_id,
                payload.accepted,
                request_id=request_id,
            )
        except PersistenceError as exc:
            raise http_error_for(exc) from exc
    if update is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recommendation not found")

    return RecommendationStatusResponse(
        analysis=update.analysis,
        schedule=update.schedule,
        request_id=request_id or "",
    )
