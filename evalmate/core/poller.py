"""
Fixed-interval poller reconciling the cache with the document service
"""
import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from evalmate.core.document import COLLECTIONS, is_well_formed

if TYPE_CHECKING:
    from evalmate.core.store import DataStore


logger = logging.getLogger(__name__)


class Poller:
    """
    Background refresh of every collection

    Each tick fetches the whole document and hands each collection to
    DataStore.reconcile, which notifies only for values that changed.
    Failures are swallowed; the next tick simply tries again.
    """

    def __init__(self, store: "DataStore", interval: float = 1.0) -> None:
        self.store = store
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling on the running event loop (no-op if already running)"""
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Polling started (every {self.interval}s)")

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info("Polling stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            await self.tick()

    async def tick(self) -> int:
        """
        Run one poll

        Returns:
            Number of collections that changed
        """
        versions = self.store.versions()
        try:
            document = await self.store.remote.fetch_document()
        except Exception as e:
            logger.debug(f"Poll failed, keeping cache: {e}")
            return 0

        changed = 0
        for name in COLLECTIONS:
            value = document.get(name)
            if value is None or not is_well_formed(name, value):
                value = self.store.default(name)
            try:
                if self.store.reconcile(name, value, versions.get(name, 0)):
                    changed += 1
            except Exception as e:
                logger.debug(f"Poll could not apply '{name}': {e}")
        return changed
