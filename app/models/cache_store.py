"""In-memory TTL store for generated letters.

Generated letters are kept for a short time under a key derived from the
request.  An entry older than its TTL is treated as absent; expired
entries are dropped when read and swept out on every write.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any, Callable, Optional

from pydantic import BaseModel

from app.models.request_models import GenerationRequest

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "cover-letter"
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9:-]")


# ── Models ────────────────────────────────────────────────────────────────────


class CacheEntry(BaseModel):
    """Cached generation artifact."""

    letter: str
    provider: str


class _Slot(BaseModel):
    value: Any
    expires_at: float


# ── Key derivation ────────────────────────────────────────────────────────────


def derive_cache_key(request: GenerationRequest) -> str:
    """Map a request's salient fields to a stable, store-safe key.

    Only the namespace, developer id, role title, company name, request type,
    tone, hiring manager, job source and regeneration count participate; two
    requests differing only in other fields (e.g. description text) share a
    key.  Characters outside ``[A-Za-z0-9:-]`` become ``_``.
    """
    key_parts = [
        CACHE_NAMESPACE,
        request.developer_profile.id,
        request.role_info.title,
        request.company_info.name,
        request.request_type.value,
        request.tone.value,
        request.hiring_manager or "none",
        request.job_source or "none",
        str(request.regeneration_count),
    ]
    return _UNSAFE_KEY_CHARS.sub("_", ":".join(key_parts))


# ── Store ─────────────────────────────────────────────────────────────────────


class CacheStore:
    """Thread-safe key/value store with per-entry time-to-live."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._items: dict[str, _Slot] = {}
        self._lock = threading.Lock()

    # ── Public API ────────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[Any]:
        """Return the value under *key*, or None if absent or expired."""
        with self._lock:
            slot = self._items.get(key)
            if slot is None:
                return None
            if self._clock() >= slot.expires_at:
                del self._items[key]
                logger.debug("Cache entry expired: %s", key)
                return None
            return slot.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """Store *value* under *key*, replacing any entry and resetting its TTL.

        Expired entries under other keys are evicted on every write.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        with self._lock:
            now = self._clock()
            expired = [k for k, slot in self._items.items() if now >= slot.expires_at]
            for k in expired:
                del self._items[k]
            if expired:
                logger.debug("Evicted %d expired cache entries", len(expired))
            self._items[key] = _Slot(value=value, expires_at=now + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._items.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


# Module-level singleton
_store: Optional[CacheStore] = None


def get_cache_store() -> CacheStore:
    """Return the singleton CacheStore instance."""
    global _store
    if _store is None:
        _store = CacheStore()
    return _store
