"""
Turn async client.

Provides the async interface for the Turn API.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

import httpx

from turnclient.async_transport import AsyncHTTPTransport
from turnclient.client import DEFAULT_BACKEND, DEFAULT_TIMEOUT, BaseTurnClient, env_settings
from turnclient.decoder import decode_check_response, decode_login
from turnclient.logging import sanitize_for_log
from turnclient.request import build_check_request, build_current_user_request
from turnclient.transport import RetryConfig
from turnclient.types.check import CheckResponse


class AsyncTurnClient(BaseTurnClient):
    """
    Async client for the Turn API.

    Example:
        ```python
        import asyncio
        from datetime import datetime, timezone
        from turnclient import AsyncTurnClient

        async def main():
            async with AsyncTurnClient(auth_token="ghp_...") as client:
                user = await client.current_user()
                result = await client.check(
                    "https://github.com/owner/repo/pull/123",
                    user,
                    datetime.now(timezone.utc),
                )
                print(result.blocked)

        asyncio.run(main())
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
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(base_url, auth_token, no_cache, include_events, logger)
        self._transport = AsyncHTTPTransport(
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
    ) -> "AsyncTurnClient":
        """Create an async client from environment variables (see env_settings)."""
        return cls(timeout=timeout, retry_config=retry_config, **env_settings())

    @property
    def transport(self) -> AsyncHTTPTransport:
        """Get the underlying async HTTP transport."""
        return self._transport

    async def check(
        self,
        pr_url: str,
        user: str,
        updated_at: datetime,
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> CheckResponse:
        """Async version of TurnClient.check."""
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
        raw = await self._transport.send(
            request, operation="check", timeout=timeout, cancel_event=cancel_event
        )

        result = decode_check_response(raw, logger=self._logger)
        self._logger.debug("check complete: %d actions assigned", len(result.analysis.next_action))
        return result

    async def current_user(
        self,
        *,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> str:
        """Async version of TurnClient.current_user."""
        request = build_current_user_request(self.auth_token)
        raw = await self._transport.send(
            request, operation="current_user", timeout=timeout, cancel_event=cancel_event
        )
        return decode_login(raw, logger=self._logger)

    async def aclose(self) -> None:
        """Close the client and release resources."""
        await self._transport.close()

    async def __aenter__(self) -> "AsyncTurnClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
