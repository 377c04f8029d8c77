"""I/O utilities for the tag store.

Provides atomic file writing and tolerant reads of optional JSON documents.
"""

import hashlib
import json
from pathlib import Path
from typing import Any

import structlog

from src.store.errors import PersistenceError
from src.store.models import WrittenFile


logger = structlog.get_logger()


class AtomicWriter:
    """Provides atomic file writing operations.

    Writes content to a temporary file first, then renames to the final path.
    This ensures that readers never see partially written files.
    """

    def __init__(self, base_dir: Path, run_id: str | None = None) -> None:
        """Initialize the atomic writer.

        Args:
            base_dir: Base directory for relative path calculation.
            run_id: Optional run ID for logging context.
        """
        self._base_dir = base_dir
        self._log = logger.bind(component="atomic_writer")
        if run_id:
            self._log = self._log.bind(run_id=run_id)

    def write(self, path: Path, content: str) -> WrittenFile:
        """Write content to file with atomic semantics.

        Readers see either the complete old file or the complete new file,
        never a partial write.

        Args:
            path: Target file path.
            content: Content to write (encoded as UTF-8).

        Returns:
            WrittenFile with path, checksum, and size information.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        content_bytes = content.encode("utf-8")
        sha256 = hashlib.sha256(content_bytes).hexdigest()

        temp_path = path.with_name(path.name + ".tmp")
        try:
            temp_path.write_bytes(content_bytes)
            temp_path.replace(path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise PersistenceError(path, f"Failed to write file ({e})") from e

        try:
            relative_path = str(path.relative_to(self._base_dir))
        except ValueError:
            relative_path = str(path)

        self._log.debug(
            "file_written",
            path=relative_path,
            bytes=len(content_bytes),
            sha256=sha256[:12],
        )

        return WrittenFile(
            path=relative_path,
            absolute_path=str(path),
            bytes_written=len(content_bytes),
            sha256=sha256,
        )

    def write_json(self, path: Path, data: Any) -> WrittenFile:
        """Serialize data as indented JSON and write it atomically."""
        return self.write(path, json.dumps(data, indent=2, ensure_ascii=False))


def read_optional_json(path: Path) -> Any | None:
    """Read a JSON document that may legitimately be missing.

    Missing files and unparsable content both collapse to ``None``.

    Args:
        path: File to read.

    Returns:
        Decoded JSON, or None when absent or unreadable.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("optional_read_failed", path=str(path), error=str(e))
        return None

    try:
        return json.loads(raw)
    except ValueError as e:
        logger.debug("optional_parse_failed", path=str(path), error=str(e))
        return None
