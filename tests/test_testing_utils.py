"""
Tests for Turn client testing utilities.

Verifies that MockTurnClient and fixtures work correctly.
"""

from datetime import datetime, timezone

import pytest

from turnclient.exceptions import InvalidArgumentError, RemoteRejectedError
from turnclient.testing import MockTurnClient, create_mock_action, create_mock_check_response
from turnclient.testing.fixtures import blocked_check_response, mock_client, sample_check_response  # noqa: F401
from turnclient.types import CheckResponse

PR_URL = "https://github.com/owner/repo/pull/1"
NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class TestMockTurnClient:
    """Tests for MockTurnClient."""

    def test_default_responses(self) -> None:
        mock = MockTurnClient(login="octocat")

        assert mock.check(PR_URL, "octocat", NOW) == CheckResponse()
        assert mock.current_user() == "octocat"

    def test_configured_responses(self) -> None:
        mock = MockTurnClient()
        response = create_mock_check_response(next_action={"octocat": create_mock_action()})
        mock.configure_check(response=response)

        result = mock.check(PR_URL, "octocat", NOW)

        assert result.blocked
        assert result.analysis.next_action["octocat"].kind == "review"

    def test_configured_errors(self) -> None:
        mock = MockTurnClient()
        mock.configure_check(error=RemoteRejectedError("check: rejected", 404, "not found"))

        with pytest.raises(RemoteRejectedError) as exc_info:
            mock.check(PR_URL, "octocat", NOW)

        assert exc_info.value.code == "REMOTE_REJECTED"

    def test_input_validation_still_applies(self) -> None:
        mock = MockTurnClient(auth_token=None)

        with pytest.raises(InvalidArgumentError):
            mock.check(PR_URL, "", NOW)
        with pytest.raises(InvalidArgumentError):
            mock.current_user()

    def test_call_tracking(self) -> None:
        mock = MockTurnClient()

        mock.check(PR_URL, "a", NOW)
        mock.check(PR_URL, "b", NOW, timeout=5)
        mock.current_user()

        assert mock.was_called("check")
        assert mock.call_count("check") == 2
        assert mock.call_count("current_user") == 1
        assert mock.get_calls("check")[1].kwargs == {"timeout": 5}
        assert len(mock.get_calls()) == 3

    def test_reset(self) -> None:
        mock = MockTurnClient()
        mock.configure_current_user(response="someone")
        mock.current_user()

        mock.reset()

        assert not mock.was_called("current_user")
        assert mock.current_user() == mock.login


class TestFactories:
    """Tests for response factories."""

    def test_unblocked_default(self) -> None:
        response = create_mock_check_response()

        assert not response.blocked
        assert response.analysis.ready_to_merge

    def test_blocked_is_not_ready(self) -> None:
        response = create_mock_check_response(next_action={"u": create_mock_action()})

        assert response.blocked
        assert not response.analysis.ready_to_merge


def test_fixtures(mock_client, sample_check_response, blocked_check_response) -> None:  # noqa: F811
    mock_client.configure_check(response=blocked_check_response)

    assert mock_client.check(PR_URL, "test-user", NOW).blocked
    assert not sample_check_response.blocked
    assert blocked_check_response.analysis.next_action["test-user"].critical
    assert not blocked_check_response.analysis.next_action["other-user"].critical
