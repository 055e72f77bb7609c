"""File-backed TTL cache for scraped page text.

The whole mapping lives in memory and is rewritten to a single JSON file
after every mutation, so the file always mirrors the in-memory state.
Expired entries are dropped lazily on lookup and eagerly on every write;
when the entry count still exceeds ``max_entries`` the oldest entries
(by insertion timestamp) are evicted.

The cache is an optimization: file I/O failures are logged, never raised.
"""

import hashlib
import json
import logging
import os
import time
from dataclasses import asdict, dataclass
from pathlib import Path

from architect.core.metrics import cache_evictions_total, cache_lookups_total

logger = logging.getLogger(__name__)

CACHE_PREFIX = "scrape:"
DEFAULT_TTL_SECONDS = 10 * 60
DEFAULT_MAX_ENTRIES = 100


def cache_key(url: str) -> str:
    """Generate a SHA256-based cache key from an already normalized URL."""
    digest = hashlib.sha256(url.encode()).hexdigest()
    return f"{CACHE_PREFIX}{digest}"


@dataclass(frozen=True)
class CacheEntry:
    content: str
    timestamp: float  # epoch seconds
    ttl: float  # seconds

    def is_expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


@dataclass(frozen=True)
class CacheStats:
    size: int
    expired_count: int
    max_size: int
    entries: list[str]


class ScrapeCache:
    """Size- and time-bounded key/value store persisted to a JSON file."""

    def __init__(
        self,
        path: str | Path,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.path = Path(path)
        self.default_ttl = ttl
        self.max_entries = max_entries
        self._entries: dict[str, CacheEntry] = {}
        self._load()

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            cache_lookups_total.labels(result="miss").inc()
            return None

        if entry.is_expired(time.time()):
            self._evict_expired_entry(key)
            cache_lookups_total.labels(result="expired").inc()
            return None

        cache_lookups_total.labels(result="hit").inc()
        return entry.content

    def set(self, key: str, content: str, ttl: float | None = None) -> None:
        # Re-inserting moves the key to the newest position
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(
            content=content,
            timestamp=time.time(),
            ttl=ttl or self.default_ttl,
        )
        self._cleanup()
        self._save()

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry.is_expired(time.time()):
            self._evict_expired_entry(key)
            return False
        return True

    def clear_expired(self) -> int:
        """Drop every expired entry and persist. Returns the number removed."""
        removed = self._remove_expired(time.time())
        self._save()
        return removed

    def clear(self) -> None:
        """Empty the cache and delete the backing file."""
        self._entries.clear()
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Could not delete cache file {self.path}: {e}")

    def stats(self) -> CacheStats:
        now = time.time()
        return CacheStats(
            size=len(self._entries),
            expired_count=sum(1 for e in self._entries.values() if e.is_expired(now)),
            max_size=self.max_entries,
            entries=list(self._entries),
        )

    def flush(self) -> None:
        """Write the current mapping to disk (used at shutdown)."""
        self._save()

    # ------------------------------------------------------------------
    # Eviction
    # ------------------------------------------------------------------

    def _evict_expired_entry(self, key: str) -> None:
        del self._entries[key]
        cache_evictions_total.labels(reason="expired").inc()
        self._cleanup()
        self._save()

    def _remove_expired(self, now: float) -> int:
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            cache_evictions_total.labels(reason="expired").inc(len(expired))
        return len(expired)

    def _cleanup(self) -> None:
        """Remove expired entries, then trim oldest entries down to max_entries."""
        self._remove_expired(time.time())
        self._enforce_capacity()

    def _enforce_capacity(self) -> int:
        overflow = len(self._entries) - self.max_entries
        if overflow <= 0:
            return 0

        # sorted() is stable: equal timestamps keep insertion order
        oldest = sorted(self._entries.items(), key=lambda item: item[1].timestamp)
        for key, _ in oldest[:overflow]:
            del self._entries[key]
        cache_evictions_total.labels(reason="capacity").inc(overflow)
        logger.debug(f"Evicted {overflow} oldest cache entries (max={self.max_entries})")
        return overflow

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if not self.path.exists():
            return

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load cache from {self.path}: {e}")
            return

        if not isinstance(raw, dict):
            logger.warning(f"Ignoring cache file {self.path}: expected a JSON object")
            return

        for key, value in raw.items():
            try:
                entry = CacheEntry(
                    content=str(value["content"]),
                    timestamp=float(value["timestamp"]),
                    ttl=float(value["ttl"]),
                )
            except (KeyError, TypeError, ValueError):
                logger.warning(f"Skipping malformed cache entry {key!r}")
                continue
            self._entries[key] = entry

        # The file may predate a lower max_entries setting
        if self._enforce_capacity():
            self._save()

        logger.info(f"Loaded {len(self._entries)} cache entries from {self.path}")

    def _save(self) -> None:
        payload = {key: asdict(entry) for key, entry in self._entries.items()}
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning(f"Could not save cache to {self.path}: {e}")
