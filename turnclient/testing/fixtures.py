"""
Pytest fixtures for testing code that uses the Turn client.
"""

from collections.abc import Generator
from datetime import datetime, timezone

import pytest

from turnclient.testing.mock import MockTurnClient
from turnclient.types.check import Action, Analysis, CheckResponse, Checks, LastActivity


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_action(
    kind: str = "review",
    critical: bool = True,
    reason: str = "needs to review",
) -> Action:
    """Create an Action with sensible defaults."""
    return Action(kind=kind, critical=critical, reason=reason)


def create_mock_check_response(
    next_action: dict[str, Action] | None = None,
    ready_to_merge: bool | None = None,
    tags: list[str] | None = None,
    commit: str = "mock-commit",
) -> CheckResponse:
    """
    Create a CheckResponse with sensible defaults.

    The PR is ready to merge unless actions are supplied.
    """
    next_action = next_action or {}
    if ready_to_merge is None:
        ready_to_merge = not next_action

    return CheckResponse(
        analysis=Analysis(
            next_action=next_action,
            last_activity=LastActivity(
                kind="comment",
                actor="mock-user",
                message="Please take a look",
                timestamp=datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc),
            ),
            checks=Checks(total=3, passing=3),
            size="S",
            ready_to_merge=ready_to_merge,
            approved=ready_to_merge,
            tags=tags or [],
        ),
        timestamp=datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc),
        commit=commit,
    )


# ============================================================================
# Mock Client Fixtures
# ============================================================================


@pytest.fixture
def mock_client() -> Generator[MockTurnClient, None, None]:
    """
    Provide a MockTurnClient for testing.

    Example:
        ```python
        def test_my_feature(mock_client):
            mock_client.configure_check(response=my_response)
            my_function(mock_client)
            assert mock_client.was_called("check")
        ```
    """
    client = MockTurnClient(login="test-user")
    yield client
    client.reset()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_check_response() -> CheckResponse:
    """Provide an unblocked CheckResponse."""
    return create_mock_check_response()


@pytest.fixture
def blocked_check_response() -> CheckResponse:
    """Provide a CheckResponse with one critical and one advisory action."""
    return create_mock_check_response(
        next_action={
            "test-user": create_mock_action(kind="review", critical=True, reason="needs to review"),
            "other-user": create_mock_action(kind="comment", critical=False, reason="was mentioned"),
        },
        tags=["needs_review"],
    )
