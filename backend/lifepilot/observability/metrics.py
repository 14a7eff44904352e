"""Counters and timings recorded as short Opik traces."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from lifepilot.observability.tracing import trace

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    try:
        with trace(f"metric:{name}", metadata=payload):
            pass
    except Exception as exc:  # pragma: no cover - sdk failure
        logger.debug("Unable to record metric %s: %s", name, exc)
