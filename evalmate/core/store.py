"""
Local cache with pub/sub over the shared document

DataStore is the only writer of the document service. Reads are served from
memory without blocking (stale-while-revalidate, one background refresh per
collection once the entry is older than the freshness window); writes update
the cache and the local shadow copy first, then the service, then notify.
"""
import asyncio
import copy
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from evalmate.core.document import COLLECTIONS, DEFAULT_TIME_LEFT, default_value, is_well_formed
from evalmate.core.poller import Poller
from evalmate.core.remote import LocalShadowStore, RemoteStoreClient, RemoteStoreError
from evalmate.models import ClientConfig


logger = logging.getLogger(__name__)

Listener = Callable[[], None]


def snapshot(value: Any) -> str:
    """Canonical serialization used for structural comparison"""
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


class _Subscription:
    __slots__ = ("callback", "active")

    def __init__(self, callback: Listener) -> None:
        self.callback = callback
        self.active = True


class DataStore:
    """Cache, subscriber registry and poller handle for one client"""

    def __init__(
        self,
        remote: RemoteStoreClient,
        shadow: LocalShadowStore,
        cache_ttl: float = 0.5,
        poll_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        default_time_left: int = DEFAULT_TIME_LEFT,
    ) -> None:
        self.remote = remote
        self.shadow = shadow
        self.cache_ttl = cache_ttl
        self.default_time_left = default_time_left
        self._clock = clock
        self._cache: Dict[str, Any] = {}
        self._fetched_at: Dict[str, float] = {}
        self._versions: Dict[str, int] = {}
        self._subscribers: Dict[str, List[_Subscription]] = {}
        self._refreshing: Dict[str, asyncio.Task] = {}
        self.poller = Poller(self, interval=poll_interval)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "DataStore":
        return cls(
            remote=RemoteStoreClient(config.api_base, timeout=config.request_timeout),
            shadow=LocalShadowStore(Path(config.shadow_dir)),
            cache_ttl=config.cache_ttl,
            poll_interval=config.poll_interval,
            default_time_left=config.default_time_left,
        )

    # ==================== READS ====================

    def get(self, name: str) -> Any:
        """
        Cached value for a collection, returned immediately

        A missing entry is seeded from the shadow copy (or the default).
        A stale entry schedules a background refresh when an event loop runs.
        """
        if name not in self._cache:
            self._cache[name] = self._fallback(name)
        if self._is_stale(name):
            self._schedule_refresh(name)
        return copy.deepcopy(self._cache[name])

    async def get_fresh(self, name: str) -> Any:
        """Fetch a collection from the service, falling back on failure"""
        version = self._versions.get(name, 0)
        try:
            value = await self.remote.fetch_collection(name)
        except RemoteStoreError as e:
            logger.warning(f"Fetch error for '{name}', using local copy: {e}")
            if name not in self._cache:
                self._cache[name] = self._fallback(name)
            return copy.deepcopy(self._cache[name])

        if value is None or not is_well_formed(name, value):
            logger.warning(f"No usable value for '{name}' on the server, using default")
            value = self.default(name)

        self.reconcile(name, value, version)
        return copy.deepcopy(self._cache[name])

    def _fallback(self, name: str) -> Any:
        value = self.shadow.load(name)
        if value is None or not is_well_formed(name, value):
            return self.default(name)
        return value

    def default(self, name: str) -> Any:
        """Empty value for a collection, with this client's countdown length"""
        return default_value(name, self.default_time_left)

    def _is_stale(self, name: str) -> bool:
        fetched_at = self._fetched_at.get(name)
        return fetched_at is None or self._clock() - fetched_at >= self.cache_ttl

    def _schedule_refresh(self, name: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if name in self._refreshing:
            return
        task = loop.create_task(self.get_fresh(name))
        self._refreshing[name] = task
        task.add_done_callback(lambda t: self._refresh_done(name, t))

    def _refresh_done(self, name: str, task: asyncio.Task) -> None:
        if self._refreshing.get(name) is task:
            del self._refreshing[name]

    # ==================== WRITES ====================

    async def set(self, name: str, value: Any) -> bool:
        """
        Replace a collection

        The cache and the shadow copy hold the new value before the first
        suspension point, so callers reading right after see it and an
        older overlapping write never lands last. Subscribers are notified
        whether or not the service accepted the write.

        Returns:
            True if the service stored the value
        """
        value = copy.deepcopy(value)
        self._cache[name] = value
        self._fetched_at[name] = self._clock()
        self._versions[name] = self._versions.get(name, 0) + 1
        self.shadow.save(name, value)

        saved = await self.remote.put_collection(name, value)
        self.notify(name)
        return saved

    def versions(self) -> Dict[str, int]:
        """Local write counters, used to drop fetch results older than a write"""
        return dict(self._versions)

    def reconcile(self, name: str, value: Any, version: Optional[int] = None) -> bool:
        """
        Take a value fetched from the service

        Ignored when a local write happened after the fetch started
        (version mismatch). Replaces the entry and notifies only when the
        value differs structurally from the cache.

        Returns:
            True if the cache changed
        """
        if version is not None and self._versions.get(name, 0) != version:
            return False
        self._fetched_at[name] = self._clock()
        if name in self._cache and snapshot(self._cache[name]) == snapshot(value):
            return False

        self._cache[name] = value
        self.shadow.save(name, value)
        self.notify(name)
        return True

    async def reset(self) -> bool:
        """Reset the whole document on the service and drop local copies"""
        if not await self.remote.reset_all():
            return False
        self._cache.clear()
        self._fetched_at.clear()
        for name in COLLECTIONS:
            self._versions[name] = self._versions.get(name, 0) + 1
            self.shadow.remove(name)
            self.notify(name)
        return True

    # ==================== PUB/SUB ====================

    def subscribe(self, name: str, callback: Listener) -> Callable[[], None]:
        """
        Register a listener for a collection

        Returns:
            Unsubscribe function; calling it more than once is harmless
        """
        sub = _Subscription(callback)
        self._subscribers.setdefault(name, []).append(sub)

        def unsubscribe() -> None:
            if not sub.active:
                return
            sub.active = False
            subs = self._subscribers.get(name, [])
            if sub in subs:
                subs.remove(sub)

        return unsubscribe

    def notify(self, name: str) -> None:
        # Iterate a copy; listeners removed mid-delivery are skipped
        for sub in list(self._subscribers.get(name, [])):
            if not sub.active:
                continue
            try:
                sub.callback()
            except Exception as e:
                logger.error(f"Listener for '{name}' failed: {e}")

    def subscriber_count(self, name: str) -> int:
        return len(self._subscribers.get(name, []))

    # ==================== LIFECYCLE ====================

    def start_polling(self) -> None:
        self.poller.start()

    def stop_polling(self) -> None:
        self.poller.stop()

    async def close(self) -> None:
        self.poller.stop()
        for task in list(self._refreshing.values()):
            task.cancel()
        self._refreshing.clear()
        await self.remote.aclose()
