"""
Retention Sweeper
Deletes content older than the retention window from every user partition
"""
import asyncio
import logging
import time
from typing import Optional

from .content_store import ContentStore
from .core import SWEEP_INTERVAL_SECONDS
from .metrics import SWEEP_RUNS, SWEPT_ITEMS, LAST_SWEEP
from .registry import IdentityRegistry

logger = logging.getLogger(__name__)

RETENTION_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


async def sweep_expired_content(registry: IdentityRegistry, store: ContentStore,
                                now: Optional[int] = None) -> int:
    """Run one sweep and return how many items were removed.

    Never raises: a failure listing users aborts the sweep, a failure on a
    single partition is logged and the sweep moves on.
    """
    cutoff = (now if now is not None else now_ms()) - RETENTION_MS

    try:
        users = await registry.list_users()
    except Exception:
        logger.exception("Retention sweep aborted: could not list users")
        SWEEP_RUNS.labels(outcome='failed').inc()
        return 0

    deleted = 0
    failures = 0
    seen = set()
    for user in users:
        partition = store.get_or_create_partition(user.username)
        if partition.name in seen:
            continue
        seen.add(partition.name)
        try:
            deleted += await store.delete_older_than(partition, cutoff)
        except Exception:
            failures += 1
            logger.exception(f"Retention sweep failed for partition {partition.name}")

    SWEPT_ITEMS.inc(deleted)
    SWEEP_RUNS.labels(outcome='partial' if failures else 'ok').inc()
    LAST_SWEEP.set_to_current_time()
    logger.debug(f"Retention sweep removed {deleted} items from {len(seen)} partitions")
    return deleted


class RetentionSweeper:
    """Runs sweep_expired_content on a fixed interval in a background task"""

    def __init__(self, registry: IdentityRegistry, store: ContentStore,
                 interval: float = SWEEP_INTERVAL_SECONDS):
        self.registry = registry
        self.store = store
        self.interval = interval
        self.running = False
        self.runs = 0
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        if self._task is not None and not self._task.done():
            return
        self.running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Retention sweeper started, interval {self.interval}s")

    async def stop(self):
        self.running = False
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        logger.info("Retention sweeper stopped")

    async def _run(self):
        while self.running:
            await asyncio.sleep(self.interval)
            try:
                await sweep_expired_content(self.registry, self.store)
            except Exception as e:
                # the loop must outlive any single sweep
                logger.error(f"Retention sweep error: {e}")
            self.runs += 1
