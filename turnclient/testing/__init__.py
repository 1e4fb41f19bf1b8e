"""Turn client testing utilities.

Provides a mock client and fixtures for testing applications that use the Turn client.
"""

from turnclient.testing.fixtures import create_mock_action, create_mock_check_response
from turnclient.testing.mock import MockCall, MockResponse, MockTurnClient

__all__ = [
    # Mock client
    "MockTurnClient",
    "MockCall",
    "MockResponse",
    # Helper functions
    "create_mock_check_response",
    "create_mock_action",
]
