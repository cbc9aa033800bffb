from __future__ import annotations

import json
import logging
import threading
import time
import typing as t

from studymonk.platform_client import PlatformError, StudyPlatformClient

JsonDict = dict[str, t.Any]

LIST_TTL_S = 30.0
COUNT_TTL_S = 15.0
RATE_LIMIT_TTL_S = 60.0
MAX_ENTRIES = 10000

logger = logging.getLogger(__name__)


class TTLCache:
    """Small expiring cache shared by request threads.

    Expired entries are purged on every write and the cache never holds more
    than `max_entries`; when full, the entry closest to expiry is dropped.
    """

    def __init__(self, clock: t.Callable[[], float] = time.monotonic, max_entries: int = MAX_ENTRIES) -> None:
        self._clock = clock
        self._max_entries = max(1, int(max_entries))
        self._entries: dict[str, tuple[float, t.Any]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> t.Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: t.Any, ttl_s: float) -> None:
        with self._lock:
            now = self._clock()
            self._purge(now)
            if key not in self._entries and len(self._entries) >= self._max_entries:
                oldest = min(self._entries, key=lambda k: self._entries[k][0])
                del self._entries[oldest]
            self._entries[key] = (now + ttl_s, value)

    def invalidate_prefix(self, prefix: str) -> None:
        with self._lock:
            for key in [k for k in self._entries if k.startswith(prefix)]:
                del self._entries[key]

    def _purge(self, now: float) -> None:
        for key in [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]:
            del self._entries[key]


class NotificationService:
    """Per-user notification calls with short-lived caching.

    Cache keys are scoped by token so users never see each other's entries.
    """

    def __init__(self, client: StudyPlatformClient, cache: TTLCache | None = None) -> None:
        self.client = client
        self.cache = cache or TTLCache()

    @staticmethod
    def _prefix(token: str) -> str:
        return f"{token}:notifications:"

    def get_notifications(self, *, token: str, **params: t.Any) -> JsonDict:
        key = self._prefix(token) + json.dumps(params, sort_keys=True, default=str)
        cached = self.cache.get(key)
        if cached is not None:
            return t.cast(JsonDict, cached)
        try:
            data = self.client.get_notifications(token=token, **params)
        except PlatformError as e:
            if e.status == 429:
                self.cache.set(key, {"success": True, "data": {"notifications": []}}, RATE_LIMIT_TTL_S)
                raise PlatformError(429, "Too many requests. Limit: 50 per 15 minutes.") from e
            raise
        self.cache.set(key, data, LIST_TTL_S)
        return data

    def unread_count(self, *, token: str) -> int:
        key = self._prefix(token) + "unread-count"
        cached = self.cache.get(key)
        if cached is not None:
            return int(cached)
        try:
            data = self.client.get_unread_count(token=token)
        except PlatformError as e:
            if e.status == 429:
                self.cache.set(key, 0, RATE_LIMIT_TTL_S)
            logger.warning("Unread count unavailable: %s", e.message)
            return 0
        value = int((data.get("data") or {}).get("count") or 0) if data.get("success") else 0
        self.cache.set(key, value, COUNT_TTL_S)
        return value

    def mark_read(self, notification_id: str, *, token: str) -> JsonDict:
        data = self.client.mark_notification_read(notification_id, token=token)
        self.cache.invalidate_prefix(self._prefix(token))
        return data

    def mark_all_read(self, *, token: str) -> JsonDict:
        data = self.client.mark_all_notifications_read(token=token)
        self.cache.invalidate_prefix(self._prefix(token))
        return data
