"""
Pytest plugin for Turn client testing fixtures.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["turnclient.testing.conftest"]
"""

from turnclient.testing.fixtures import (
    blocked_check_response,
    mock_client,
    sample_check_response,
)

__all__ = [
    "mock_client",
    "sample_check_response",
    "blocked_check_response",
]
