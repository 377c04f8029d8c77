"""Domain exceptions for the tag store.

Infrastructure failures (unwritable files) are separated from domain
errors (nothing to update) so callers can decide which ones end a batch.
"""

from pathlib import Path


class StoreError(Exception):
    """Base exception for all tag store errors."""


class PersistenceError(StoreError):
    """Raised when a JSON document cannot be written or copied."""

    def __init__(self, path: Path, message: str) -> None:
        """Initialize the persistence error.

        Args:
            path: File that could not be written.
            message: Human-readable error message.
        """
        self.path = path
        super().__init__(f"{message}: {path}")


class NoTagsError(StoreError):
    """Raised when a batch operation finds an empty tag index."""

    def __init__(
        self, message: str = "No existing tags found. Use fetch to add some tags first."
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)
