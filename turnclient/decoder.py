"""
Response decoding for the Turn client.

Turns a size-bounded HTTP response into a structured result or a typed error.
Raw bodies never end up in exceptions or logs, only bounded excerpts and sizes.
"""

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from turnclient.exceptions import MalformedResponseError, RemoteRejectedError
from turnclient.types.check import Action, Analysis, CheckResponse, Checks, LastActivity

MAX_RESPONSE_SIZE = 1024 * 1024  # 1 MiB
ERROR_MAX_LENGTH = 500
ERROR_TRUNCATION_MARKER = "... (truncated)"

# Server timestamps may carry nanoseconds; datetime keeps microseconds
_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


@dataclass(frozen=True)
class RawResponse:
    """Status and size-capped body of the final attempt."""

    status_code: int
    body: bytes
    url: str = ""
    truncated: bool = False


def error_excerpt(body: bytes, max_length: int = ERROR_MAX_LENGTH) -> str:
    """
    Render an error body for an exception message.

    Decodes as UTF-8 and cuts at ``max_length`` characters, never inside a
    multi-byte character, appending a marker when anything was cut.
    """
    text = body.decode("utf-8", errors="replace")
    if len(text) > max_length:
        return text[:max_length] + ERROR_TRUNCATION_MARKER
    return text


def decode_json(raw: RawResponse, *, operation: str, logger: logging.Logger) -> Any:
    """
    Interpret the status code and parse a successful body as JSON.

    Raises:
        RemoteRejectedError: On any status other than 200
        MalformedResponseError: If the body is not valid JSON
    """
    logger.debug("received response: status=%d", raw.status_code)

    if raw.status_code != 200:
        excerpt = error_excerpt(raw.body)
        raise RemoteRejectedError(
            f"{operation}: api request failed with status {raw.status_code}: {excerpt}",
            status_code=raw.status_code,
            body_excerpt=excerpt,
        )

    try:
        return json.loads(raw.body)
    except (ValueError, RecursionError) as e:
        logger.debug(
            "failed to decode response: status=%d size=%d truncated=%s",
            raw.status_code,
            len(raw.body),
            raw.truncated,
        )
        raise MalformedResponseError(f"{operation}: unmarshal response: {e}") from e


def decode_check_response(raw: RawResponse, *, logger: logging.Logger) -> CheckResponse:
    """Decode a validate-endpoint response."""
    data = decode_json(raw, operation="check", logger=logger)
    try:
        return parse_check_response(data)
    except (TypeError, ValueError, AttributeError) as e:
        logger.debug("unexpected response shape: size=%d", len(raw.body))
        raise MalformedResponseError(f"check: unmarshal response: {e}") from e


def decode_login(raw: RawResponse, *, logger: logging.Logger) -> str:
    """Decode a GitHub /user response into the login name."""
    data = decode_json(raw, operation="current_user", logger=logger)
    login = data.get("login") if isinstance(data, dict) else None
    if not isinstance(login, str) or not login:
        raise MalformedResponseError("current_user: empty username in GitHub response")
    return login


def parse_time(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp; empty and zero-valued timestamps become None."""
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise TypeError(f"expected timestamp string, got {type(value).__name__}")
    ts = datetime.fromisoformat(_EXTRA_FRACTION.sub(r"\1", value.replace("Z", "+00:00")))
    if ts.replace(tzinfo=None) == datetime.min:
        return None
    return ts


def _mapping(value: Any, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TypeError(f"{name}: expected object, got {type(value).__name__}")
    return value


def _parse_action(data: dict[str, Any]) -> Action:
    data = _mapping(data, "action")
    return Action(
        kind=str(data.get("kind") or ""),
        critical=bool(data.get("critical")),
        reason=str(data.get("reason") or ""),
        since=parse_time(data.get("since")),
        ready_to_notify=bool(data.get("ready_to_notify")),
    )


def _parse_analysis(data: dict[str, Any]) -> Analysis:
    activity = _mapping(data.get("last_activity"), "last_activity")
    checks = _mapping(data.get("checks"), "checks")
    next_action = _mapping(data.get("next_action"), "next_action")

    return Analysis(
        next_action={user: _parse_action(action) for user, action in next_action.items()},
        last_activity=LastActivity(
            kind=str(activity.get("kind") or ""),
            actor=str(activity.get("actor") or ""),
            message=str(activity.get("message") or ""),
            timestamp=parse_time(activity.get("timestamp")),
        ),
        checks=Checks(
            total=int(checks.get("total") or 0),
            failing=int(checks.get("failing") or 0),
            waiting=int(checks.get("waiting") or 0),
            pending=int(checks.get("pending") or 0),
            passing=int(checks.get("passing") or 0),
            ignored=int(checks.get("ignored") or 0),
        ),
        unresolved_comments=int(data.get("unresolved_comments") or 0),
        size=str(data.get("size") or ""),
        draft=bool(data.get("draft")),
        ready_to_merge=bool(data.get("ready_to_merge")),
        merge_conflict=bool(data.get("merge_conflict")),
        approved=bool(data.get("approved")),
        tags=list(data.get("tags") or []),
        state_durations={
            state: int(seconds or 0)
            for state, seconds in _mapping(data.get("state_durations"), "state_durations").items()
        },
        workflow_state=str(data.get("workflow_state") or ""),
    )


def parse_check_response(data: Any) -> CheckResponse:
    """
    Parse the nested check response schema.

    Unknown fields are ignored; missing and null fields take zero values.
    """
    data = _mapping(data, "response")

    events = data.get("events")
    if events is not None and not isinstance(events, list):
        raise TypeError(f"events: expected array, got {type(events).__name__}")

    return CheckResponse(
        analysis=_parse_analysis(_mapping(data.get("analysis"), "analysis")),
        timestamp=parse_time(data.get("timestamp")),
        commit=str(data.get("commit") or ""),
        pull_request=_mapping(data.get("pull_request"), "pull_request"),
        events=events,
    )


class LimitedBuffer:
    """Accumulates body chunks up to a byte cap, dropping the rest."""

    def __init__(self, limit: int = MAX_RESPONSE_SIZE) -> None:
        self.limit = limit
        self.truncated = False
        self._buf = bytearray()

    def feed(self, chunk: bytes) -> bool:
        """Append a chunk. Returns False once the cap has been reached."""
        room = self.limit - len(self._buf)
        if len(chunk) > room:
            self._buf += chunk[:room]
            self.truncated = True
            return False
        self._buf += chunk
        return True

    def getvalue(self) -> bytes:
        return bytes(self._buf)
