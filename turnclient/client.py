"""
Turn client.

Asks the Turn service whether a pull request is blocked on a user, and
resolves the GitHub identity behind an auth token.
"""

import logging
import os
import threading
from datetime import datetime
from typing import Any

import httpx

from turnclient.decoder import decode_check_response, decode_login
from turnclient.exceptions import ConfigurationError
from turnclient.logging import get_logger, sanitize_for_log
from turnclient.request import build_check_request, build_current_user_request
from turnclient.transport import HTTPTransport, RetryConfig
from turnclient.types.check import CheckResponse

DEFAULT_BACKEND = "https://turn.github.codegroove.app"
DEFAULT_TIMEOUT = 30.0

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def validate_base_url(base_url: str) -> str:
    """
    Validate a backend URL and strip trailing slashes.

    Raises:
        ConfigurationError: If the URL is empty, unparseable, not http(s) or has no host
    """
    if not base_url:
        raise ConfigurationError("base URL cannot be empty")

    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as e:
        raise ConfigurationError(f"invalid base URL: {e}") from e

    if url.scheme not in ("http", "https"):
        raise ConfigurationError("base URL must use http or https")
    if not url.host:
        raise ConfigurationError("base URL must include a host")

    return base_url.rstrip("/")


def env_settings() -> dict[str, Any]:
    """
    Read client settings from the environment.

    Environment variables:
        TURN_BACKEND: Backend URL (optional, default: DEFAULT_BACKEND)
        GITHUB_TOKEN / GH_TOKEN: Auth token (optional)
        TURN_NO_CACHE: "1", "true", "yes" or "on" enables cache bypass
    """
    token = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")
    return {
        "base_url": os.environ.get("TURN_BACKEND") or DEFAULT_BACKEND,
        "auth_token": token.strip() if token else None,
        "no_cache": os.environ.get("TURN_NO_CACHE", "").strip().lower() in _TRUTHY,
    }


class BaseTurnClient:
    """
    Configuration shared by the sync and async clients.

    ``base_url`` is validated when assigned. ``auth_token``, ``no_cache``,
    ``include_events`` and ``logger`` may be changed after construction,
    but only before the client is used concurrently.
    """

    _transport: Any

    def __init__(
        self,
        base_url: str,
        auth_token: str | None,
        no_cache: bool,
        include_events: bool,
        logger: logging.Logger | None,
    ) -> None:
        self._base_url = validate_base_url(base_url)
        self.auth_token = auth_token
        self.no_cache = no_cache
        self.include_events = include_events
        self._logger = logger or get_logger("client")

    @property
    def base_url(self) -> str:
        return self._base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        self._base_url = validate_base_url(value)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @logger.setter
    def logger(self, value: logging.Logger | None) -> None:
        self._logger = value or get_logger("client")
        self._transport.logger = self._logger


class TurnClient(BaseTurnClient):
    """
    Client for the Turn API.

    Methods are safe for concurrent use once configuration is done; the
    underlying connection pool is shared between calls.

    Example:
        ```python
        from datetime import datetime, timezone
        from turnclient import TurnClient

        with TurnClient(auth_token="ghp_...") as client:
            result = client.check(
                "https://github.com/owner/repo/pull/123",
                "octocat",
                datetime.now(timezone.utc),
                timeout=30,
            )
            if result.blocked:
                print(result.analysis.next_action["octocat"].reason)
        ```
    """

    DEFAULT_BACKEND = DEFAULT_BACKEND
    DEFAULT_TIMEOUT = DEFAULT_TIMEOUT

    def __init__(
        self,
        base_url: str = DEFAULT_BACKEND,
        *,
        auth_token: str | None = None,
        no_cache: bool = False,
        include_events: bool = False,
        logger: logging.Logger | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the Turn client.

        Args:
            base_url: Backend URL, http or https (default: DEFAULT_BACKEND)
            auth_token: GitHub token sent as a bearer token (optional)
            no_cache: Ask the service to bypass its cache
            include_events: Ask for the full event list in check responses
            logger: Diagnostic sink (default: the "turnclient.client" logger)
            timeout: Per-attempt request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            http_transport: httpx transport override, mainly for tests

        Raises:
            ConfigurationError: If base_url is invalid
        """
        super().__init__(base_url, auth_token, no_cache, include_events, logger)
        self._transport = HTTPTransport(
            timeout=timeout,
            retry_config=retry_config,
            logger=self._logger,
            http_transport=http_transport,
        )

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "TurnClient":
        """
        Create a client from environment variables (see env_settings).

        Raises:
            ConfigurationError: If TURN_BACKEND is invalid
        """
        return cls(timeout=timeout, retry_config=retry_config, **env_settings())

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def check(
        self,
        pr_url: str,
        user: str,
        updated_at: datetime,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> CheckResponse:
        """
        Ask whether a PR is waiting on ``user``.

        Args:
            pr_url: Pull request URL
            user: GitHub login to check
            updated_at: Last known update time of the PR; the service caches on it
            timeout: Overall deadline in seconds, retries included (optional)
            cancel_event: Set from another thread to abandon the call (optional)

        Returns:
            CheckResponse; ``analysis.next_action`` is empty when nobody is blocking

        Raises:
            InvalidArgumentError: On empty URL or user, or a zero timestamp
            TransportExhaustedError: When retries ran out (RequestTimeoutError and
                RequestInterruptedError for deadline and cancellation)
            RemoteRejectedError: On a non-retryable error status
            MalformedResponseError: If the response cannot be decoded
        """
        request = build_check_request(
            self._base_url,
            pr_url,
            user,
            updated_at,
            auth_token=self.auth_token,
            no_cache=self.no_cache,
            include_events=self.include_events,
            logger=self._logger,
        )

        self._logger.debug("sending request to %s", sanitize_for_log(request.url))
        raw = self._transport.send(
            request, operation="check", timeout=timeout, cancel_event=cancel_event
        )

        result = decode_check_response(raw, logger=self._logger)
        self._logger.debug("check complete: %d actions assigned", len(result.analysis.next_action))
        return result

    def current_user(
        self,
        *,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> str:
        """
        Look up the GitHub login that owns the configured auth token.

        Raises:
            InvalidArgumentError: If no auth token is set
            MalformedResponseError: If GitHub returns an empty login
        """
        request = build_current_user_request(self.auth_token)
        raw = self._transport.send(
            request, operation="current_user", timeout=timeout, cancel_event=cancel_event
        )
        return decode_login(raw, logger=self._logger)

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "TurnClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()
