"""
Exception hierarchy for goal planning.

Input errors are raised before any state is produced. Remote strategy errors
carry a ``retry_hint`` so callers can tell "retry later" (rate limits, 5xx,
network) from "fix configuration" (missing or rejected credentials) from "unexpected"
(undecodable responses, cancellation).
"""
from __future__ import annotations

from uuid import UUID

RETRY_LATER = "retry_later"
FIX_CONFIGURATION = "fix_configuration"
UNEXPECTED = "unexpected"

# Provider rejected the API key (401) or the key lacks access to the model (403).
CREDENTIAL_STATUSES = frozenset({401, 403})


class PlanningError(Exception):
    """Base exception for all planning errors."""


class NoUserProfileError(PlanningError):
    def __init__(self) -> None:
        super().__init__("Please complete your profile before generating a plan.")


class NoExistingScheduleError(PlanningError):
    def __init__(self, goal_id: UUID | None = None) -> None:
        self.goal_id = goal_id
        super().__init__("No schedule exists for this goal.")


class GoalNotFoundError(PlanningError):
    def __init__(self, goal_id: UUID) -> None:
        self.goal_id = goal_id
        super().__init__(f"Goal {goal_id} not found")


class TaskNotFoundError(PlanningError):
    def __init__(self, task_id: UUID) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found in schedule")


class MilestoneNotFoundError(PlanningError):
    def __init__(self, milestone_id: UUID) -> None:
        self.milestone_id = milestone_id
        super().__init__(f"Milestone {milestone_id} not found")


class RemoteStrategyError(PlanningError):
    """Failure reported by the remote-model planning strategy."""

    retry_hint: str = UNEXPECTED


class ApiKeyMissingError(RemoteStrategyError):
    retry_hint = FIX_CONFIGURATION

    def __init__(self) -> None:
        super().__init__("API key is not configured. Set OPENAI_API_KEY to use the remote planner.")


class NetworkError(RemoteStrategyError):
    retry_hint = RETRY_LATER


class RemoteTimeoutError(NetworkError):
    def __init__(self, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Remote planner did not respond within {timeout_seconds:g}s")


class RateLimitedError(RemoteStrategyError):
    retry_hint = RETRY_LATER

    def __init__(self) -> None:
        super().__init__("Too many requests. Please try again later.")


class ServerError(RemoteStrategyError):
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        if status_code in CREDENTIAL_STATUSES:
            self.retry_hint = FIX_CONFIGURATION
            message = f"Remote planner rejected the credentials (code: {status_code}). Check OPENAI_API_KEY."
        else:
            self.retry_hint = RETRY_LATER if status_code >= 500 else UNEXPECTED
            message = f"Server error (code: {status_code}). Please try again later."
        super().__init__(message)


class InvalidResponseError(RemoteStrategyError):
    retry_hint = UNEXPECTED


class PlanningCancelledError(RemoteStrategyError):
    retry_hint = UNEXPECTED

    def __init__(self) -> None:
        super().__init__("Remote planning request was cancelled")
