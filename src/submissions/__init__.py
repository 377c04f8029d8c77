"""Challenge submission workflows shared by the CLI and the MCP server."""

from src.submissions.factory import build_service
from src.submissions.models import (
    BatchUpdateResult,
    FetchOutcome,
    RemovalResult,
    SubmissionListing,
    TagUpdateOutcome,
)
from src.submissions.removal import (
    RemovalAction,
    RemovalPlan,
    plan_removal,
    resolve_selection,
)
from src.submissions.service import SubmissionService


__all__ = [
    "BatchUpdateResult",
    "FetchOutcome",
    "RemovalAction",
    "RemovalPlan",
    "RemovalResult",
    "SubmissionListing",
    "SubmissionService",
    "TagUpdateOutcome",
    "build_service",
    "plan_removal",
    "resolve_selection",
]
