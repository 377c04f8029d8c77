"""JSON document store for challenge tag data.

Persists per-tag submissions and announcements, the tag index, timestamped
backups and the refresh marker polled by the web front-end.
"""

from src.store.errors import NoTagsError, PersistenceError, StoreError
from src.store.io import AtomicWriter, read_optional_json
from src.store.metrics import StoreMetrics
from src.store.models import WrittenFile
from src.store.store import TagStore, is_safe_tag


__all__ = [
    "AtomicWriter",
    "NoTagsError",
    "PersistenceError",
    "StoreError",
    "StoreMetrics",
    "TagStore",
    "WrittenFile",
    "is_safe_tag",
    "read_optional_json",
]
