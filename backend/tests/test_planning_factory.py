from __future__ import annotations

from uuid import uuid4

import pytest

from app.api.errors import status_for
from app.core.config import Settings
from app.core.errors import (
    ApiKeyMissingError,
    GoalNotFoundError,
    InvalidResponseError,
    MilestoneNotFoundError,
    NoExistingScheduleError,
    NoUserProfileError,
    PlanningCancelledError,
    RateLimitedError,
    RemoteTimeoutError,
    ServerError,
    TaskNotFoundError,
)
from app.services.planning.factory import get_planning_strategy
from app.services.planning.remote import OpenAIPlanningStrategy
from app.services.planning.rule_based import RuleBasedPlanningStrategy


@pytest.mark.parametrize(
    "configured,expected",
    [
        ("rule_based", RuleBasedPlanningStrategy),
        ("OpenAI", OpenAIPlanningStrategy),
        ("something-else", RuleBasedPlanningStrategy),
    ],
)
def test_strategy_selected_from_settings(configured, expected) -> None:
    strategy = get_planning_strategy(Settings(planning_strategy=configured))
    assert isinstance(strategy, expected)


@pytest.mark.parametrize(
    "exc,status_code",
    [
        (GoalNotFoundError(uuid4()), 404),
        (TaskNotFoundError(uuid4()), 404),
        (MilestoneNotFoundError(uuid4()), 404),
        (NoExistingScheduleError(), 409),
        (NoUserProfileError(), 422),
        (RateLimitedError(), 429),
        (RemoteTimeoutError(30), 504),
        (ServerError(500), 502),
        (ApiKeyMissingError(), 502),
        (InvalidResponseError("garbled"), 502),
        (PlanningCancelledError(), 502),
    ],
)
def test_planning_errors_map_to_http_status(exc, status_code) -> None:
    assert status_for(exc) == status_code


def test_server_error_hint_depends_on_status() -> None:
    assert ServerError(503).retry_hint == "retry_later"
    assert ServerError(400).retry_hint == "unexpected"
    assert ServerError(401).retry_hint == "fix_configuration"
    assert ServerError(403).retry_hint == "fix_configuration"
