"""Periodic liveness sweep and status query dispatch."""

import asyncio
import contextlib
import functools
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import TypeAlias

from hlds_master.protocol.models import SweepResult
from hlds_master.registry import ServerRegistry

logger = logging.getLogger(__name__)

QueryHandler: TypeAlias = Callable[[str], Awaitable[object]]


class Sweeper:
    """Evicts stale servers and fans status queries out to the survivors.

    Queries are fire-and-forget from the sweep loop's point of view: a cycle
    never waits for the previous cycle's queries, and those queries are not
    cancelled when a new cycle starts. A semaphore caps how many run at once,
    and an address already queued or in flight is skipped until its query
    finishes.
    """

    def __init__(
        self,
        registry: ServerRegistry,
        query: QueryHandler,
        interval: float = 30.0,
        stale_threshold: timedelta = timedelta(minutes=5),
        max_concurrent_queries: int = 64,
    ) -> None:
        """Initialize sweeper.

        Args:
            registry: Registry to sweep
            query: Coroutine function called with each live address
            interval: Seconds between sweep cycles
            stale_threshold: Maximum heartbeat age before eviction
            max_concurrent_queries: Cap on simultaneously running queries

        """
        self._registry = registry
        self._query = query
        self._interval = interval
        self._stale_threshold = stale_threshold
        self._semaphore = asyncio.Semaphore(max_concurrent_queries)
        self._task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[None]] = set()
        self._queued: set[str] = set()
        self._active = False
        self.cycles = 0

    async def start(self) -> None:
        """Start the periodic sweep loop."""
        if self._active:
            logger.warning("Sweeper already running")
            return

        self._active = True
        self._task = asyncio.create_task(self._sweep_loop())
        logger.debug("Sweeper started")

    async def stop(self) -> None:
        """Stop the sweep loop and cancel in-flight queries."""
        self._active = False

        if self._task and not self._task.done():
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self._task = None

        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("Sweeper stopped")

    def sweep_once(self) -> SweepResult:
        """Run one cycle: evict stale servers, then dispatch queries.

        Returns:
            SweepResult of the eviction pass

        """
        result = self._registry.evict_older_than(self._stale_threshold)
        self.cycles += 1

        dispatched = 0
        for address in result.live:
            if address in self._queued:
                continue
            task = asyncio.create_task(self._run_query(address))
            self._pending.add(task)
            self._queued.add(address)
            task.add_done_callback(functools.partial(self._on_query_done, address))
            dispatched += 1

        logger.debug(
            "Sweep %d: evicted %d, querying %d of %d live",
            self.cycles,
            len(result.evicted),
            dispatched,
            len(result.live),
        )
        return result

    async def wait_idle(self) -> None:
        """Wait until every dispatched query has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        """Get number of dispatched queries not yet finished."""
        return len(self._pending)

    @property
    def is_running(self) -> bool:
        """Check if the sweep loop is active."""
        return self._active

    def _on_query_done(self, address: str, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        self._queued.discard(address)

    async def _run_query(self, address: str) -> None:
        async with self._semaphore:
            try:
                await self._query(address)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Status query to %s failed", address)

    async def _sweep_loop(self) -> None:
        """Sweep on a fixed interval until stopped."""
        try:
            while self._active:
                await asyncio.sleep(self._interval)

                if not self._active:
                    break

                try:
                    self.sweep_once()
                except Exception:
                    logger.exception("Sweep cycle error")

        except asyncio.CancelledError:
            logger.debug("Sweep loop cancelled")
            raise
