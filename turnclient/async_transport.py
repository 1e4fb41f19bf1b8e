"""
Async HTTP Transport for the Turn client.

Same retry policy as HTTPTransport, on top of httpx's async client.
"""

import asyncio
import logging
import time
from typing import Any

import httpx

from turnclient.decoder import MAX_RESPONSE_SIZE, LimitedBuffer, RawResponse
from turnclient.logging import get_logger, log_http_request, log_http_response, sanitize_for_log
from turnclient.request import PreparedRequest
from turnclient.transport import (
    RetryConfig,
    exhausted_error,
    get_backoff_time,
    interrupted_error,
    is_retryable_status,
    status_error,
    timeout_error,
)


class AsyncHTTPTransport:
    """
    Async HTTP transport layer with retry logic.

    Cancellation of the surrounding task (asyncio.CancelledError) is never
    swallowed; ``cancel_event`` is the cooperative interruption signal.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        logger: logging.Logger | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
        max_response_size: int = MAX_RESPONSE_SIZE,
    ) -> None:
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self.logger = logger or get_logger("client")
        self.max_response_size = max_response_size

        self._client = httpx.AsyncClient(timeout=timeout, transport=http_transport)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def send(
        self,
        request: PreparedRequest,
        *,
        operation: str,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> RawResponse:
        """
        Execute one logical request, retrying transient failures.

        Each retry logs "retrying request (attempt N): error", where N is the
        1-based number of the attempt that just failed.

        Raises:
            TransportExhaustedError: When all attempts failed
            RequestTimeoutError: When the deadline expired
            RequestInterruptedError: When cancel_event was set
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        attempts = self.retry_config.attempts
        last_error: Exception | None = None
        last_status: int | None = None
        wait_time = 0.0

        for attempt in range(attempts):
            if attempt > 0:
                self.logger.debug(
                    "retrying request (attempt %d): %s",
                    attempt,
                    sanitize_for_log(str(last_error)),
                )
                # Jitter must not make a later delay shorter than an earlier one
                wait_time = max(get_backoff_time(self.retry_config, attempt - 1), wait_time)
                await self._wait(wait_time, deadline, cancel_event, operation, last_error, last_status)

            if cancel_event is not None and cancel_event.is_set():
                raise interrupted_error(operation, last_error, last_status) from last_error

            attempt_timeout = self.timeout
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise timeout_error(operation, last_error, last_status) from last_error
                attempt_timeout = min(self.timeout, remaining)

            try:
                response, raw = await self._send_once(request, attempt_timeout)
            except httpx.TimeoutException as e:
                if deadline is not None and time.monotonic() >= deadline:
                    raise timeout_error(operation, e, None) from e
                last_error, last_status = e, None
                continue
            except httpx.RequestError as e:
                last_error, last_status = e, None
                continue

            if not is_retryable_status(raw.status_code):
                return raw

            last_error, last_status = status_error(response), raw.status_code

        raise exhausted_error(operation, attempts, last_error, last_status) from last_error

    async def _send_once(
        self, request: PreparedRequest, attempt_timeout: float
    ) -> tuple[httpx.Response, RawResponse]:
        http_request = self._client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.content,
            timeout=attempt_timeout,
        )
        log_http_request(request.method, request.url, request.headers)

        start = time.monotonic()
        response = await self._client.send(http_request, stream=True)
        try:
            buffer = LimitedBuffer(self.max_response_size)
            async for chunk in response.aiter_bytes():
                if not buffer.feed(chunk):
                    break
        finally:
            await response.aclose()

        body = buffer.getvalue()
        log_http_response(
            response.status_code,
            request.url,
            size=len(body),
            elapsed_ms=(time.monotonic() - start) * 1000,
        )
        return response, RawResponse(
            status_code=response.status_code,
            body=body,
            url=request.url,
            truncated=buffer.truncated,
        )

    async def _wait(
        self,
        wait_time: float,
        deadline: float | None,
        cancel_event: asyncio.Event | None,
        operation: str,
        last_error: Exception | None,
        last_status: int | None,
    ) -> None:
        if deadline is not None and deadline - time.monotonic() <= wait_time:
            raise timeout_error(operation, last_error, last_status) from last_error

        if cancel_event is None:
            await asyncio.sleep(wait_time)
            return

        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=wait_time)
        except asyncio.TimeoutError:
            return
        raise interrupted_error(operation, last_error, last_status) from last_error
