"""Per-request and per-goal logging context."""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import UUID

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
goal_id_ctx_var: ContextVar[str | None] = ContextVar("goal_id", default=None)


def get_request_id() -> str | None:
    """Return the current request id if available."""
    return request_id_ctx_var.get()


def get_goal_id() -> str | None:
    return goal_id_ctx_var.get()


@contextmanager
def goal_context(goal_id: UUID | str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``goal_id``."""
    token = goal_id_ctx_var.set(str(goal_id))
    try:
        yield
    finally:
        goal_id_ctx_var.reset(token)
