"""Shared route dependencies."""
from __future__ import annotations

from typing import Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from lifepilot.db.deps import get_db
from lifepilot.services.document_store import DocumentNotFound, DocumentStore, PersistenceError
from lifepilot.services.generation_client import GenerationClient, get_generation_client


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    return DocumentStore(db)


def get_client() -> Optional[GenerationClient]:
    return get_generation_client()


def http_error_for(exc: PersistenceError) -> HTTPException:
    """404 for missing documents, 503 for storage failures."""
    if isinstance(exc, DocumentNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"{exc.kind}: {exc}")
