"""Turn client type definitions.

This module exports all data model types used by the client.
"""

from turnclient.types.check import (
    Action,
    Analysis,
    CheckRequest,
    CheckResponse,
    Checks,
    LastActivity,
)

__all__ = [
    "CheckRequest",
    "CheckResponse",
    "Analysis",
    "Action",
    "LastActivity",
    "Checks",
]
