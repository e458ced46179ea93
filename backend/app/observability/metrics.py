"""Planner counters and latencies recorded as short Opik traces."""
from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, Optional

from app.observability.tracing import trace

logger = logging.getLogger(__name__)


def log_metric(name: str, value: float | int, metadata: Optional[Dict[str, Any]] = None) -> None:
    """Record ``value`` under ``metric:<name>``; a no-op when tracing is off."""
    payload: Dict[str, Any] = {"value": value}
    if metadata:
        payload.update(metadata)

    try:
        with trace(f"metric:{name}", metadata=payload):
            pass
    except Exception as exc:  # pragma: no cover
        logger.debug("Unable to record metric %s: %s", name, exc)


def log_latency(name: str, started: float, metadata: Optional[Dict[str, Any]] = None) -> float:
    """Record milliseconds elapsed since a ``perf_counter()`` reading and return them."""
    elapsed_ms = (perf_counter() - started) * 1000
    log_metric(name, elapsed_ms, metadata=metadata)
    return elapsed_ms
