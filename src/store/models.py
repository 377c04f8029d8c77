"""Data models for the tag store."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WrittenFile:
    """Information about a written file.

    Attributes:
        path: Path relative to the store's data directory.
        absolute_path: Absolute path to the file.
        bytes_written: Number of bytes written.
        sha256: SHA-256 checksum of content.
    """

    path: str
    absolute_path: str
    bytes_written: int
    sha256: str
