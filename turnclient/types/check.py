"""PR check request/response data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def format_timestamp(ts: datetime) -> str:
    """Format a timestamp as RFC 3339 in UTC with a Z suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    else:
        ts = ts.astimezone(timezone.utc)
    return ts.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class CheckRequest:
    """A single query to the validate endpoint."""

    url: str
    updated_at: datetime
    user: str
    include_events: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "url": self.url,
            "updated_at": format_timestamp(self.updated_at),
            "user": self.user,
        }
        if self.include_events:
            data["include_events"] = True
        return data


@dataclass
class Action:
    """What a user has to do before the PR can progress."""

    kind: str
    critical: bool = False
    reason: str = ""
    since: datetime | None = None
    ready_to_notify: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "critical": self.critical,
            "reason": self.reason,
        }
        if self.since is not None:
            data["since"] = format_timestamp(self.since)
        if self.ready_to_notify:
            data["ready_to_notify"] = True
        return data


@dataclass
class LastActivity:
    """Most recent activity on the PR."""

    kind: str = ""  # "commit", "comment", "review", "review_comment"
    actor: str = ""
    message: str = ""
    timestamp: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "actor": self.actor,
            "message": self.message,
            "timestamp": format_timestamp(self.timestamp) if self.timestamp else None,
        }


@dataclass
class Checks:
    """CI check counts."""

    total: int = 0
    failing: int = 0
    waiting: int = 0
    pending: int = 0
    passing: int = 0
    ignored: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "failing": self.failing,
            "waiting": self.waiting,
            "pending": self.pending,
            "passing": self.passing,
            "ignored": self.ignored,
        }


@dataclass
class Analysis:
    """The service's analysis of the PR."""

    next_action: dict[str, Action] = field(default_factory=dict)
    last_activity: LastActivity = field(default_factory=LastActivity)
    checks: Checks = field(default_factory=Checks)
    unresolved_comments: int = 0
    size: str = ""  # "XXS" .. "INSANE"
    draft: bool = False
    ready_to_merge: bool = False
    merge_conflict: bool = False
    approved: bool = False
    tags: list[str] = field(default_factory=list)
    state_durations: dict[str, int] = field(default_factory=dict)  # seconds per workflow state
    workflow_state: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "next_action": {user: action.to_dict() for user, action in self.next_action.items()},
            "last_activity": self.last_activity.to_dict(),
            "checks": self.checks.to_dict(),
            "unresolved_comments": self.unresolved_comments,
            "size": self.size,
            "draft": self.draft,
            "ready_to_merge": self.ready_to_merge,
            "merge_conflict": self.merge_conflict,
            "approved": self.approved,
            "tags": list(self.tags),
        }
        if self.state_durations:
            data["state_durations"] = dict(self.state_durations)
        if self.workflow_state:
            data["workflow_state"] = self.workflow_state
        return data


@dataclass
class CheckResponse:
    """Decoded result of a PR check."""

    analysis: Analysis = field(default_factory=Analysis)
    timestamp: datetime | None = None
    commit: str = ""
    pull_request: dict[str, Any] = field(default_factory=dict)
    events: list[dict[str, Any]] | None = None

    @property
    def blocked(self) -> bool:
        """True when at least one user has an action assigned."""
        return len(self.analysis.next_action) > 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "pull_request": dict(self.pull_request),
            "analysis": self.analysis.to_dict(),
            "timestamp": format_timestamp(self.timestamp) if self.timestamp else None,
            "commit": self.commit,
        }
        if self.events is not None:
            data["events"] = list(self.events)
        return data
