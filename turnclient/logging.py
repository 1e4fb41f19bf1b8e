"""
Turn client logging utilities.

Provides configurable logging for the client and its HTTP traffic, plus the
sanitizer applied to third-party strings (PR URLs, usernames, response
excerpts) before they reach a log line. Auth tokens are never logged.
"""

import logging
from typing import Any

# Create client-specific loggers
_sdk_logger = logging.getLogger("turnclient")
_http_logger = logging.getLogger("turnclient.http")

# Silent unless the application configures logging
_sdk_logger.addHandler(logging.NullHandler())

# Default cap for sanitized log fragments, in characters
LOG_MAX_LENGTH = 100
TRUNCATION_MARKER = "..."

_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_SENSITIVE_KEYS = frozenset({"authorization", "token", "auth_token", "password", "secret"})


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure Turn client logging.

    Args:
        level: Default log level for all client loggers (default: INFO)
        http_level: Log level for HTTP request/response logging (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from turnclient.logging import configure_logging

        # Show retry and request diagnostics
        configure_logging(level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    formatter = logging.Formatter(format_string)

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(formatter)

    _sdk_logger.setLevel(level)
    _sdk_logger.addHandler(handler)

    _http_logger.setLevel(http_level if http_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a Turn client logger.

    Args:
        name: Logger name suffix (e.g., "http", "client"). If None, returns main logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _sdk_logger
    return logging.getLogger(f"turnclient.{name}")


def sanitize_for_log(value: str, max_length: int = LOG_MAX_LENGTH) -> str:
    """
    Make an arbitrary string safe to embed in a single log line.

    The input is cut to ``max_length`` characters first. Newline, carriage
    return and tab become visible two-character escapes; every other control
    character (below 0x20, and DEL) is dropped. A truncation marker is
    appended when the input was longer than ``max_length``.

    Args:
        value: Untrusted text (PR URL, username, response body, ...)
        max_length: Maximum number of input characters kept

    Returns:
        Sanitized single-line fragment
    """
    truncated = len(value) > max_length
    if truncated:
        value = value[:max_length]

    parts: list[str] = []
    for char in value:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            parts.append(escaped)
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            continue
        else:
            parts.append(char)

    if truncated:
        parts.append(TRUNCATION_MARKER)
    return "".join(parts)


def safe_log_dict(data: dict[str, Any], sensitive_keys: frozenset[str] | None = None) -> dict[str, Any]:
    """
    Create a copy of a dictionary with sensitive values masked.

    Args:
        data: Dictionary that may contain sensitive values (e.g. request headers)
        sensitive_keys: Lower-case keys to mask (default: authorization, token, ...)

    Returns:
        Dictionary with sensitive values replaced with "[REDACTED]"
    """
    if sensitive_keys is None:
        sensitive_keys = _SENSITIVE_KEYS

    result: dict[str, Any] = {}
    for key, value in data.items():
        key_lower = key.lower()
        if key_lower in sensitive_keys:
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = safe_log_dict(value, sensitive_keys)
        elif isinstance(value, str):
            result[key] = sanitize_for_log(value)
        else:
            result[key] = value

    return result


def log_http_request(
    method: str,
    url: str,
    headers: dict[str, str] | None = None,
) -> None:
    """Log an outgoing HTTP request at DEBUG level with credentials masked."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"{method} {sanitize_for_log(url)}"]

    if headers:
        log_parts.append(f"headers={safe_log_dict(headers)}")

    _http_logger.debug(" | ".join(log_parts))


def log_http_response(
    status_code: int,
    url: str,
    size: int | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log an HTTP response at DEBUG level. Bodies are never logged, only sizes."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [f"Response {status_code} from {sanitize_for_log(url)}"]

    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    if size is not None:
        log_parts.append(f"size={size}")

    _http_logger.debug(" | ".join(log_parts))


__all__ = [
    "LOG_MAX_LENGTH",
    "TRUNCATION_MARKER",
    "configure_logging",
    "get_logger",
    "sanitize_for_log",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
]
