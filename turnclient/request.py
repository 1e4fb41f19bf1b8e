"""
Request builder for the Turn client.

Validates caller input and produces the serialized request (URL, headers,
JSON body) that the transport sends, possibly several times.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime

from turnclient.exceptions import InvalidArgumentError
from turnclient.logging import sanitize_for_log
from turnclient.types.check import CheckRequest

USER_AGENT = "turnclient/1.1"
VALIDATE_PATH = "/v1/validate"
GITHUB_USER_URL = "https://api.github.com/user"


@dataclass(frozen=True)
class PreparedRequest:
    """A fully built request, safe to resend on retry."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes | None = None


def is_zero_time(ts: datetime | None) -> bool:
    """True for a missing timestamp or the zero value (0001-01-01T00:00:00)."""
    if ts is None:
        return True
    return ts.replace(tzinfo=None) == datetime.min


def build_check_request(
    base_url: str,
    pr_url: str,
    user: str,
    updated_at: datetime,
    *,
    auth_token: str | None = None,
    no_cache: bool = False,
    include_events: bool = False,
    logger: logging.Logger | None = None,
) -> PreparedRequest:
    """
    Validate check parameters and build the POST to the validate endpoint.

    Args:
        base_url: Normalized backend URL (no trailing slash)
        pr_url: Pull request URL
        user: User whose blocking actions are asked about
        updated_at: Last known update of the PR, used as a cache key remotely
        auth_token: Optional bearer token
        no_cache: Ask the service to skip cached results
        include_events: Ask for the full event list in the response
        logger: Diagnostic sink

    Returns:
        PreparedRequest with the canonical JSON body

    Raises:
        InvalidArgumentError: On empty URL or user, or a zero timestamp
    """
    if not pr_url:
        raise InvalidArgumentError("check: PR URL cannot be empty")
    if not user:
        raise InvalidArgumentError("check: user cannot be empty")
    if not isinstance(updated_at, datetime) or is_zero_time(updated_at):
        raise InvalidArgumentError("check: updated_at timestamp cannot be zero")

    if logger is not None:
        logger.debug("checking PR %s for user %s", sanitize_for_log(pr_url), sanitize_for_log(user))

    body = CheckRequest(
        url=pr_url,
        updated_at=updated_at,
        user=user,
        include_events=include_events,
    )

    headers = {
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    if no_cache:
        headers["Cache-Control"] = "no-cache"

    return PreparedRequest(
        method="POST",
        url=base_url + VALIDATE_PATH,
        headers=headers,
        content=json.dumps(body.to_dict(), separators=(",", ":")).encode("utf-8"),
    )


def build_current_user_request(auth_token: str | None) -> PreparedRequest:
    """
    Build the GitHub identity lookup.

    Raises:
        InvalidArgumentError: If no auth token is configured
    """
    if not auth_token:
        raise InvalidArgumentError("current_user: no auth token set")

    return PreparedRequest(
        method="GET",
        url=GITHUB_USER_URL,
        headers={
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
            "Authorization": f"Bearer {auth_token}",
        },
    )
