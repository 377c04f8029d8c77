"""Tool definitions and dispatch for the MCP server.

``ToolHandler`` is transport-free: it takes a tool name and its arguments
and returns a JSON-serializable payload. Protocol mistakes (unknown tool,
bad arguments) raise ToolProtocolError; failures of the operation itself
come back as a payload with ``success: false``.
"""

from collections.abc import Callable
from typing import Any

import structlog
from mcp.types import INVALID_PARAMS, METHOD_NOT_FOUND

from src.collectors.errors import CollectorError
from src.collectors.models import TagDataset
from src.store.errors import NoTagsError, StoreError
from src.submissions.models import FetchOutcome
from src.submissions.service import SubmissionService


logger = structlog.get_logger()

TOOL_GET_EXISTING_TAGS = "get_existing_tags"
TOOL_GET_TAG_SUBMISSIONS = "get_tag_submissions"
TOOL_GET_ALL_SUBMISSIONS = "get_all_submissions"
TOOL_FETCH_SUBMISSIONS = "fetch_submissions"
TOOL_UPDATE_SUBMISSIONS = "update_submissions"

_EMPTY_SCHEMA: dict[str, Any] = {"type": "object", "properties": {}}

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": TOOL_GET_EXISTING_TAGS,
        "description": "Get a list of all existing challenge tags that have been fetched",
        "inputSchema": _EMPTY_SCHEMA,
    },
    {
        "name": TOOL_GET_TAG_SUBMISSIONS,
        "description": "Get challenge submissions for a specific tag",
        "inputSchema": {
            "type": "object",
            "properties": {
                "tag": {
                    "type": "string",
                    "description": "The challenge tag to get submissions for",
                },
            },
            "required": ["tag"],
        },
    },
    {
        "name": TOOL_GET_ALL_SUBMISSIONS,
        "description": "Get all challenge submissions from all fetched tags",
        "inputSchema": _EMPTY_SCHEMA,
    },
    {
        "name": TOOL_FETCH_SUBMISSIONS,
        "description": "Fetch fresh challenge submissions for a specific tag from dev.to API",
        "inputSchema": {
            "type": "object",
            "properties": {
                "tag": {
                    "type": "string",
                    "description": (
                        "The challenge tag to fetch submissions for "
                        "(must end with 'challenge')"
                    ),
                },
            },
            "required": ["tag"],
        },
    },
    {
        "name": TOOL_UPDATE_SUBMISSIONS,
        "description": "Update existing challenge submissions or fetch all existing tags",
        "inputSchema": {
            "type": "object",
            "properties": {
                "tag": {
                    "type": "string",
                    "description": (
                        "Optional: specific tag to update. If not provided, "
                        "all existing tags will be updated"
                    ),
                },
            },
        },
    },
]


class ToolProtocolError(Exception):
    """A tool call that is malformed at the protocol level."""

    def __init__(self, code: int, message: str) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
        """
        super().__init__(message)
        self.code = code
        self.message = message


def _dataset_payload(dataset: TagDataset) -> dict[str, Any]:
    payload = dataset.submissions_document()
    if dataset.announcements:
        payload["announcements"] = dataset.announcements_document()["announcements"]
    return payload


def _failure_payload(error: Exception) -> dict[str, Any]:
    if isinstance(error, CollectorError):
        error_class = error.error_class.value
    else:
        error_class = type(error).__name__
    return {"success": False, "error": str(error), "error_class": error_class}


def _outcome_payload(verb: str, outcome: FetchOutcome) -> dict[str, Any]:
    submissions = outcome.dataset.submissions if outcome.dataset else []
    if outcome.saved:
        message = (
            f"Successfully {verb} {outcome.submissions_count} challenge "
            f"submissions for tag: {outcome.tag}"
        )
    else:
        message = f"No valid submissions found for tag: {outcome.tag}"
    return {
        "success": True,
        "message": message,
        "tag": outcome.tag,
        "submissions_count": outcome.submissions_count,
        "announcements_count": outcome.announcements_count,
        "fetched_at": outcome.fetched_at,
        "submissions": [article.to_json_dict() for article in submissions],
    }


class ToolHandler:
    """Dispatches tool calls to the submission service."""

    def __init__(self, service: SubmissionService) -> None:
        """Initialize the handler.

        Args:
            service: Service performing the operations.
        """
        self._service = service
        self._log = logger.bind(component="mcp_server")
        self._tools: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
            TOOL_GET_EXISTING_TAGS: self._get_existing_tags,
            TOOL_GET_TAG_SUBMISSIONS: self._get_tag_submissions,
            TOOL_GET_ALL_SUBMISSIONS: self._get_all_submissions,
            TOOL_FETCH_SUBMISSIONS: self._fetch_submissions,
            TOOL_UPDATE_SUBMISSIONS: self._update_submissions,
        }

    def call(self, name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
        """Run a tool.

        Args:
            name: Tool name.
            arguments: Tool arguments, possibly None.

        Returns:
            JSON-serializable payload.

        Raises:
            ToolProtocolError: If the tool is unknown or its arguments invalid.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolProtocolError(METHOD_NOT_FOUND, f"Unknown tool: {name}")

        self._log.info("tool_called", tool=name)
        try:
            return tool(arguments or {})
        except (CollectorError, StoreError) as e:
            self._log.warning("tool_failed", tool=name, error=str(e))
            return _failure_payload(e)

    def _get_existing_tags(self, arguments: dict[str, Any]) -> dict[str, Any]:
        tags = self._service.get_existing_tags()
        return {
            "tags": tags,
            "count": len(tags),
            "message": (
                f"Found {len(tags)} existing challenge tags"
                if tags
                else "No challenge tags found. Use fetch_submissions to add some."
            ),
        }

    def _get_tag_submissions(self, arguments: dict[str, Any]) -> dict[str, Any]:
        tag = _require_tag(arguments)
        dataset = self._service.get_tag_data(tag)
        if dataset is None:
            return {
                "error": f"No data found for tag: {tag}",
                "available_tags": self._service.get_existing_tags(),
                "suggestion": f'Use fetch_submissions with tag "{tag}" to fetch data first',
            }

        payload = {
            "tag": dataset.tag,
            "submissions_count": len(dataset.submissions),
            "fetched_at": dataset.fetched_at,
            "submissions": [a.to_json_dict() for a in dataset.submissions],
        }
        if dataset.announcements:
            payload["announcements"] = [a.to_json_dict() for a in dataset.announcements]
        return payload

    def _get_all_submissions(self, arguments: dict[str, Any]) -> dict[str, Any]:
        datasets = self._service.get_all_tag_data()
        return {
            "total_tags": len(datasets),
            "total_submissions": sum(len(d.submissions) for d in datasets),
            "tags_data": [_dataset_payload(d) for d in datasets],
        }

    def _fetch_submissions(self, arguments: dict[str, Any]) -> dict[str, Any]:
        tag = _require_tag(arguments)
        return _outcome_payload("fetched", self._service.fetch_submissions(tag))

    def _update_submissions(self, arguments: dict[str, Any]) -> dict[str, Any]:
        tag = arguments.get("tag")
        if tag is not None and not isinstance(tag, str):
            raise ToolProtocolError(
                INVALID_PARAMS, "Tag parameter must be a string if provided"
            )

        if tag:
            return _outcome_payload("updated", self._service.update_tag(tag))

        try:
            result = self._service.update_all_tags()
        except NoTagsError as e:
            return _failure_payload(e)

        updated = [entry for entry in result.succeeded if entry.outcome is not None]
        return {
            "success": True,
            "message": (
                f"Successfully updated all {len(updated)} existing tags"
                if not result.failed
                else f"Updated {len(updated)} of {len(result.outcomes)} existing tags"
            ),
            "total_tags_updated": len(updated),
            "total_submissions": result.total_submissions,
            "updated_tags": [
                {
                    "tag": entry.tag,
                    "submissions_count": entry.outcome.submissions_count,
                    "fetched_at": entry.outcome.fetched_at,
                }
                for entry in updated
                if entry.outcome is not None
            ],
            "failed_tags": [
                {
                    "tag": entry.tag,
                    "error": entry.error,
                    "error_class": entry.error_class,
                }
                for entry in result.failed
            ],
        }


def _require_tag(arguments: dict[str, Any]) -> str:
    tag = arguments.get("tag")
    if not tag or not isinstance(tag, str):
        raise ToolProtocolError(
            INVALID_PARAMS, "Tag parameter is required and must be a string"
        )
    return tag
