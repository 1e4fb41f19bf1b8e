"""Turn client - asks the Turn service whether a pull request is blocked on a user."""

__version__ = "1.1.0"

from turnclient.async_client import AsyncTurnClient  # noqa: E402
from turnclient.client import DEFAULT_BACKEND, TurnClient  # noqa: E402
from turnclient.exceptions import (  # noqa: E402
    ConfigurationError,
    InvalidArgumentError,
    MalformedResponseError,
    RemoteRejectedError,
    RequestInterruptedError,
    RequestTimeoutError,
    TransportExhaustedError,
    TurnError,
)
from turnclient.logging import configure_logging, get_logger, sanitize_for_log  # noqa: E402
from turnclient.transport import HTTPTransport, RetryConfig  # noqa: E402
from turnclient.types import Action, Analysis, CheckRequest, CheckResponse, Checks, LastActivity  # noqa: E402

__all__ = [
    "__version__",
    "DEFAULT_BACKEND",
    # Main Clients
    "TurnClient",
    "AsyncTurnClient",
    # Exceptions
    "TurnError",
    "InvalidArgumentError",
    "ConfigurationError",
    "TransportExhaustedError",
    "RequestTimeoutError",
    "RequestInterruptedError",
    "RemoteRejectedError",
    "MalformedResponseError",
    # Types
    "CheckRequest",
    "CheckResponse",
    "Analysis",
    "Action",
    "LastActivity",
    "Checks",
    # Transport
    "HTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
    "sanitize_for_log",
]
