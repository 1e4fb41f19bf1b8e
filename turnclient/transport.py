"""
HTTP Transport for the Turn client.

Handles HTTP communication with automatic retry logic, bounded body reads,
deadlines and cancellation.
"""

import logging
import random
import threading
import time
from dataclasses import dataclass
from typing import Any

import httpx

from turnclient.decoder import MAX_RESPONSE_SIZE, LimitedBuffer, RawResponse
from turnclient.exceptions import (
    RequestInterruptedError,
    RequestTimeoutError,
    TransportExhaustedError,
)
from turnclient.logging import get_logger, log_http_request, log_http_response, sanitize_for_log
from turnclient.request import PreparedRequest


@dataclass
class RetryConfig:
    """
    Configuration for automatic retry behavior.

    The transport never waits less before a retry than it did before the
    previous one, so delays stay non-decreasing with jitter enabled.
    """

    max_retries: int = 3  # 4 attempts in total
    initial_delay: float = 0.1
    backoff_factor: float = 2.0
    max_backoff: float = 5.0  # Maximum backoff time in seconds
    jitter: float = 0.3  # Up to this many seconds added at random

    @property
    def attempts(self) -> int:
        return self.max_retries + 1


def is_retryable_status(status_code: int) -> bool:
    """Only server errors and rate limiting are worth another attempt."""
    return status_code >= 500 or status_code == 429


def get_backoff_time(config: RetryConfig, retry: int) -> float:
    """
    Calculate the delay before retry number ``retry`` (0-indexed).

    Exponential backoff starting at ``initial_delay`` with up to ``jitter``
    seconds added, capped at ``max_backoff``.
    """
    base_wait = config.initial_delay * config.backoff_factor**retry
    jitter = random.uniform(0, config.jitter) if config.jitter > 0 else 0.0
    return min(base_wait + jitter, config.max_backoff)


def status_error(response: httpx.Response) -> httpx.HTTPStatusError:
    """Wrap a retryable status as an exception so it can be chained."""
    return httpx.HTTPStatusError(
        f"server returned status {response.status_code}",
        request=response.request,
        response=response,
    )


def exhausted_error(
    operation: str,
    attempts: int,
    last_error: Exception | None,
    last_status: int | None,
) -> TransportExhaustedError:
    return TransportExhaustedError(
        f"{operation}: send request: giving up after {attempts} attempts: {last_error}",
        last_error=last_error,
        status_code=last_status,
    )


def timeout_error(
    operation: str,
    last_error: Exception | None,
    last_status: int | None,
) -> RequestTimeoutError:
    detail = f": {last_error}" if last_error is not None else ""
    return RequestTimeoutError(
        f"{operation}: send request: deadline exceeded{detail}",
        last_error=last_error,
        status_code=last_status,
    )


def interrupted_error(
    operation: str,
    last_error: Exception | None,
    last_status: int | None,
) -> RequestInterruptedError:
    detail = f": {last_error}" if last_error is not None else ""
    return RequestInterruptedError(
        f"{operation}: send request: interrupted{detail}",
        last_error=last_error,
        status_code=last_status,
    )


class HTTPTransport:
    """
    HTTP transport layer with retry logic.

    Handles:
    - Exponential backoff with jitter for 5xx, 429 and network errors
    - An overall deadline covering every attempt and every backoff sleep
    - Caller-initiated cancellation through a threading.Event
    - Response bodies read up to a fixed cap, retryable bodies drained and closed

    The underlying httpx.Client pools connections and is shared by all calls.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        logger: logging.Logger | None = None,
        http_transport: httpx.BaseTransport | None = None,
        max_response_size: int = MAX_RESPONSE_SIZE,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            timeout: Per-attempt request timeout in seconds
            retry_config: Configuration for retry behavior
            logger: Diagnostic sink for retry lines
            http_transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
            max_response_size: Cap on bytes read from any response body
        """
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self.logger = logger or get_logger("client")
        self.max_response_size = max_response_size

        self._client = httpx.Client(timeout=timeout, transport=http_transport)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def send(
        self,
        request: PreparedRequest,
        *,
        operation: str,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> RawResponse:
        """
        Execute one logical request, retrying transient failures.

        Each retry logs "retrying request (attempt N): error", where N is the
        1-based number of the attempt that just failed.

        Args:
            request: The prepared request, resent unchanged on each attempt
            operation: Operation name used in error messages
            timeout: Overall deadline in seconds for all attempts (None: unbounded)
            cancel_event: Set by the caller to abandon the operation

        Returns:
            RawResponse of the first non-retryable outcome

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
                self._wait(wait_time, deadline, cancel_event, operation, last_error, last_status)

            if cancel_event is not None and cancel_event.is_set():
                raise interrupted_error(operation, last_error, last_status) from last_error

            attempt_timeout = self.timeout
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise timeout_error(operation, last_error, last_status) from last_error
                attempt_timeout = min(self.timeout, remaining)

            try:
                response, raw = self._send_once(request, attempt_timeout)
            except httpx.TimeoutException as e:
                if deadline is not None and time.monotonic() >= deadline:
                    raise timeout_error(operation, e, None) from e
                last_error, last_status = e, None
                continue
            except httpx.RequestError as e:
                # Network errors are retryable
                last_error, last_status = e, None
                continue

            if not is_retryable_status(raw.status_code):
                return raw

            last_error, last_status = status_error(response), raw.status_code

        raise exhausted_error(operation, attempts, last_error, last_status) from last_error

    def _send_once(
        self, request: PreparedRequest, attempt_timeout: float
    ) -> tuple[httpx.Response, RawResponse]:
        """Send one attempt and read its body up to the size cap."""
        http_request = self._client.build_request(
            request.method,
            request.url,
            headers=request.headers,
            content=request.content,
            timeout=attempt_timeout,
        )
        log_http_request(request.method, request.url, request.headers)

        start = time.monotonic()
        response = self._client.send(http_request, stream=True)
        try:
            buffer = LimitedBuffer(self.max_response_size)
            for chunk in response.iter_bytes():
                if not buffer.feed(chunk):
                    break
        finally:
            response.close()

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

    def _wait(
        self,
        wait_time: float,
        deadline: float | None,
        cancel_event: threading.Event | None,
        operation: str,
        last_error: Exception | None,
        last_status: int | None,
    ) -> None:
        """Sleep before the next attempt, observing the deadline and cancellation."""
        if deadline is not None and deadline - time.monotonic() <= wait_time:
            raise timeout_error(operation, last_error, last_status) from last_error

        if cancel_event is None:
            time.sleep(wait_time)
        elif cancel_event.wait(wait_time):
            raise interrupted_error(operation, last_error, last_status) from last_error
