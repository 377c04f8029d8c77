"""Error types for the challenge collector."""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from src.fetch.models import FetchError


class CollectorErrorClass(str, Enum):
    """Classification of collector errors.

    - VALIDATION: The requested tag was rejected before any I/O
    - FETCH: HTTP/network errors during fetch
    - PARSE: Errors parsing response content
    - SCHEMA: Data doesn't match expected schema
    """

    VALIDATION = "VALIDATION"
    FETCH = "FETCH"
    PARSE = "PARSE"
    SCHEMA = "SCHEMA"


class CollectorError(Exception):
    """Base exception for collector errors.

    Provides structured error information for logging and tool responses.
    """

    def __init__(
        self,
        error_class: CollectorErrorClass,
        message: str,
        source_id: str | None = None,
        details: dict[str, str | int | bool | None] | None = None,
    ) -> None:
        """Initialize the collector error.

        Args:
            error_class: Classification of the error.
            message: Human-readable error message.
            source_id: Tag being collected when the error happened.
            details: Additional structured error details.
        """
        super().__init__(message)
        self.error_class = error_class
        self.message = message
        self.source_id = source_id
        self.details = details or {}

    def to_dict(
        self,
    ) -> dict[str, str | int | bool | None | dict[str, str | int | bool | None]]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_class": self.error_class.value,
            "message": self.message,
            "source_id": self.source_id,
            "details": self.details,
        }


class TagValidationError(CollectorError):
    """Raised when a requested tag breaks a naming rule."""

    def __init__(self, message: str, tag: str, rule: str) -> None:
        """Initialize the validation error.

        Args:
            message: Human-readable error message.
            tag: The rejected tag.
            rule: Name of the rule that rejected it.
        """
        super().__init__(
            error_class=CollectorErrorClass.VALIDATION,
            message=message,
            source_id=tag,
            details={"rule": rule},
        )
        self.tag = tag
        self.rule = rule


class UpstreamError(CollectorError):
    """Raised when the article source answers a page with a failure."""

    def __init__(self, tag: str, page: int, fetch_error: FetchError) -> None:
        """Initialize the upstream error.

        Args:
            tag: Tag being fetched.
            page: Page number that failed.
            fetch_error: Classified failure from the fetch layer.
        """
        super().__init__(
            error_class=CollectorErrorClass.FETCH,
            message=(
                f"Failed to fetch page {page} for tag '{tag}': {fetch_error.message}"
            ),
            source_id=tag,
            details={
                "page": page,
                "status_code": fetch_error.status_code,
                "fetch_error_class": fetch_error.error_class.value,
            },
        )
        self.page = page
        self.status_code = fetch_error.status_code
        self.fetch_error = fetch_error


class ParseError(CollectorError):
    """Error parsing a page returned by the article source."""

    def __init__(
        self,
        message: str,
        source_id: str | None = None,
        page: int | None = None,
    ) -> None:
        """Initialize the parse error.

        Args:
            message: Human-readable error message.
            source_id: Tag being fetched.
            page: Page number whose body could not be parsed.
        """
        details: dict[str, str | int | bool | None] = {}
        if page is not None:
            details["page"] = page

        super().__init__(
            error_class=CollectorErrorClass.PARSE,
            message=message,
            source_id=source_id,
            details=details,
        )
        self.page = page


class ErrorRecord(BaseModel):
    """Serializable error record for tool responses and batch reports."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    error_class: CollectorErrorClass = Field(description="Error classification")
    message: Annotated[str, Field(min_length=1, description="Error message")]
    source_id: str | None = Field(default=None, description="Tag identifier")
    details: dict[str, str | int | bool | None] = Field(
        default_factory=dict, description="Additional error details"
    )

    @classmethod
    def from_exception(cls, error: CollectorError) -> "ErrorRecord":
        """Create an ErrorRecord from a CollectorError exception.

        Args:
            error: The exception to convert.

        Returns:
            ErrorRecord instance.
        """
        return cls(
            error_class=error.error_class,
            message=error.message,
            source_id=error.source_id,
            details=error.details,
        )
