"""Opik traces around planner operations and HTTP routes."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, Iterator, Optional

from app.core.context import get_goal_id, get_request_id
from app.observability.client import get_opik_client

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from opik.api_objects.trace.trace_client import Trace
else:  # pragma: no cover - typing helper
    Trace = object  # type: ignore[assignment]

logger = logging.getLogger(__name__)


def _trace_metadata(
    metadata: Optional[Dict[str, Any]],
    goal_id: Optional[str],
    request_id: Optional[str],
) -> Dict[str, Any]:
    merged = dict(metadata or {})
    goal_id = goal_id or get_goal_id()
    request_id = request_id or get_request_id()
    if goal_id:
        merged.setdefault("goal_id", str(goal_id))
    if request_id:
        merged.setdefault("request_id", request_id)
    return merged


def _error_info(exc: BaseException) -> Dict[str, Any]:
    info: Dict[str, Any] = {"message": str(exc), "type": type(exc).__name__}
    retry_hint = getattr(exc, "retry_hint", None)
    if retry_hint:
        info["retry_hint"] = retry_hint
    status_code = getattr(exc, "status_code", None)
    if status_code is not None:
        info["status_code"] = status_code
    return info


@contextmanager
def trace(
    name: str,
    metadata: Optional[Dict[str, Any]] = None,
    goal_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Iterator[Optional["Trace"]]:
    """
    Wrap a block in an Opik trace.

    Goal and request ids default to the ones bound in the logging context.
    Planner errors are attached with their retry hint before being re-raised.
    Without a configured client the block runs untraced.
    """
    client = get_opik_client()
    if client is None:
        yield None
        return

    try:
        opik_trace = client.trace(name=name, metadata=_trace_metadata(metadata, goal_id, request_id) or None)
    except Exception as exc:  # pragma: no cover
        logger.debug("Unable to start Opik trace %s: %s", name, exc)
        yield None
        return

    try:
        yield opik_trace
    except Exception as exc:
        try:
            opik_trace.update(error_info=_error_info(exc))
        except Exception:  # pragma: no cover
            logger.debug("Failed to attach error info to Opik trace %s", name, exc_info=True)
        raise
    finally:
        try:
            opik_trace.end()
        except Exception:  # pragma: no cover
            logger.debug("Failed to close Opik trace %s cleanly", name, exc_info=True)
