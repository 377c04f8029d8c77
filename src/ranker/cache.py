"""Expiring cache of relevance scores keyed by tag and content hash.

Entries live in a pluggable key-value store. Each tag owns one key
(``relevance_cache_<tag>``); an entry is a hit only while its content hash
matches the current data and it is at most ``expiry_hours`` old.
"""

from datetime import datetime
from pathlib import Path
from typing import Protocol

import structlog
from pydantic import ValidationError

from src.collectors.models import to_epoch_ms
from src.ranker.constants import (
    CACHE_EXPIRY_HOURS,
    CACHE_KEY_PREFIX,
    COMPONENT_RANKER,
)
from src.ranker.metrics import RankerMetrics
from src.ranker.models import CachedScore, RelevanceCacheEntry
from src.store.errors import PersistenceError
from src.store.io import AtomicWriter
from src.store.store import is_safe_tag


logger = structlog.get_logger()

_MS_PER_HOUR = 60 * 60 * 1000


class KeyValueStore(Protocol):
    """Minimal string key-value storage used by the relevance cache."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


class InMemoryKeyValueStore:
    """Dictionary-backed store, for tests and single-process use."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class FileKeyValueStore:
    """Stores each key as ``<key>.json`` inside a directory.

    Values are JSON documents; a file that no longer parses is returned as
    its raw text so the cache can recognize and evict it.
    """

    def __init__(self, directory: Path) -> None:
        """Initialize the store.

        Args:
            directory: Directory holding one file per key. Created on first write.
        """
        self._directory = Path(directory)
        self._writer = AtomicWriter(self._directory)

    def _path(self, key: str) -> Path:
        if not is_safe_tag(key):
            raise PersistenceError(self._directory / key, "Refusing unsafe cache key")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        try:
            return self._path(key).read_bytes().decode("utf-8", errors="replace")
        except (FileNotFoundError, PersistenceError):
            return None
        except OSError as e:
            logger.debug("cache_read_failed", key=key, error=str(e))
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(self._directory, f"Failed to create directory ({e})") from e
        self._writer.write(path, value)

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except PersistenceError:
            return
        except OSError as e:
            logger.warning("cache_delete_failed", key=key, error=str(e))

    def keys(self) -> list[str]:
        if not self._directory.is_dir():
            return []
        return sorted(path.stem for path in self._directory.glob("*.json"))


class RelevanceCache:
    """Hash-validated, expiring cache of per-tag relevance scores."""

    def __init__(
        self,
        store: KeyValueStore,
        expiry_hours: float = CACHE_EXPIRY_HOURS,
    ) -> None:
        """Initialize the cache.

        Args:
            store: Backing key-value store.
            expiry_hours: Maximum entry age still served as a hit.
        """
        self._store = store
        self._expiry_ms = expiry_hours * _MS_PER_HOUR
        self._metrics = RankerMetrics.get_instance()
        self._log = logger.bind(component=COMPONENT_RANKER, subcomponent="cache")

    @classmethod
    def in_memory(cls, expiry_hours: float = CACHE_EXPIRY_HOURS) -> "RelevanceCache":
        """Build a cache that lives only as long as the process."""
        return cls(InMemoryKeyValueStore(), expiry_hours=expiry_hours)

    @staticmethod
    def key_for(tag: str) -> str:
        """Storage key of a tag's entry."""
        return f"{CACHE_KEY_PREFIX}{tag}"

    def get(
        self, tag: str, data_hash: str, now: datetime
    ) -> dict[int, float] | None:
        """Look up the scores for a tag's current data.

        Args:
            tag: Tag whose scores are wanted.
            data_hash: Content hash of the tag's current articles.
            now: Current time.

        Returns:
            Scores keyed by article id, or None on a miss.
        """
        key = self.key_for(tag)
        entry = self._read_entry(key)

        if entry is None:
            reason = "absent"
        elif entry.data_hash != data_hash:
            reason = "hash_mismatch"
        elif self._is_expired(entry, now):
            reason = "expired"
        else:
            self._metrics.record_hit()
            self._log.debug("relevance_cache_hit", tag=tag, data_hash=data_hash)
            return entry.score_map()

        self._metrics.record_miss()
        self._log.debug("relevance_cache_miss", tag=tag, reason=reason)
        return None

    def put(
        self,
        tag: str,
        data_hash: str,
        scores: dict[int, float],
        now: datetime,
    ) -> RelevanceCacheEntry:
        """Store scores for a tag, replacing any earlier entry.

        Args:
            tag: Tag the scores belong to.
            data_hash: Content hash the scores were computed from.
            scores: Scores keyed by article id.
            now: Write time.

        Returns:
            The stored entry.
        """
        entry = RelevanceCacheEntry(
            tag=tag,
            data_hash=data_hash,
            scores=[
                CachedScore(article_id=article_id, score=score, data_hash=data_hash)
                for article_id, score in scores.items()
            ],
            timestamp=to_epoch_ms(now),
        )
        self._store.set(self.key_for(tag), entry.model_dump_json(by_alias=True))
        self._log.debug("relevance_cache_stored", tag=tag, scores=len(scores))
        return entry

    def sweep_expired(self, now: datetime) -> int:
        """Delete every expired or unreadable entry, whatever its hash.

        Args:
            now: Current time.

        Returns:
            Number of entries deleted.
        """
        removed = 0
        for key in self._store.keys():
            if not key.startswith(CACHE_KEY_PREFIX):
                continue
            raw = self._store.get(key)
            if raw is None:
                continue
            entry = self._parse_entry(key, raw)
            if entry is None:
                removed += 1
                continue
            if self._is_expired(entry, now):
                self._store.delete(key)
                self._metrics.record_eviction()
                removed += 1

        self._log.info("relevance_cache_swept", removed=removed)
        return removed

    def _is_expired(self, entry: RelevanceCacheEntry, now: datetime) -> bool:
        return to_epoch_ms(now) - entry.timestamp > self._expiry_ms

    def _read_entry(self, key: str) -> RelevanceCacheEntry | None:
        raw = self._store.get(key)
        if raw is None:
            return None
        return self._parse_entry(key, raw)

    def _parse_entry(self, key: str, raw: str) -> RelevanceCacheEntry | None:
        try:
            return RelevanceCacheEntry.model_validate_json(raw)
        except ValidationError as e:
            self._store.delete(key)
            self._metrics.record_eviction()
            self._log.debug("relevance_cache_corrupt", key=key, error=str(e))
            return None


def open_file_cache(cache_dir: Path, expiry_hours: float = CACHE_EXPIRY_HOURS) -> RelevanceCache:
    """Build a RelevanceCache persisted under a directory."""
    return RelevanceCache(FileKeyValueStore(cache_dir), expiry_hours=expiry_hours)
