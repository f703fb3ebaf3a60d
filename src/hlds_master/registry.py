"""Concurrency-safe registry of announced game servers.

The registry is the only shared mutable state in the master server. The
heartbeat listener admits and touches records, the sweeper evicts them, the
query client writes descriptive fields back, and the status page reads
snapshots. Every operation runs inside a single critical section of a
reader/writer lock so it is atomic with respect to every other operation,
whether callers share an event loop or run on separate threads.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TypeAlias

from hlds_master.protocol.models import ServerRecord, ServerStatus, SweepResult
from hlds_master.utils.locks import ReadWriteLock

logger = logging.getLogger(__name__)

Clock: TypeAlias = Callable[[], datetime]


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(UTC)


class ServerRegistry:
    """Store of ServerRecords keyed by address."""

    def __init__(self, clock: Clock = utc_now) -> None:
        """Initialize an empty registry.

        Args:
            clock: Callable returning the current aware datetime

        """
        self._clock = clock
        self._servers: dict[str, ServerRecord] = {}
        self._lock = ReadWriteLock()

    def touch(self, address: str) -> None:
        """Admit a new server or refresh last_seen for a known one."""
        with self._lock.write():
            now = self._clock()
            record = self._servers.get(address)
            if record is None:
                self._servers[address] = ServerRecord(address=address, last_seen=now)
                logger.info("New server detected: %s", address)
            elif now > record.last_seen:
                record.last_seen = now

    def remove(self, address: str) -> bool:
        """Remove a server. Returns True if a record was deleted."""
        with self._lock.write():
            return self._servers.pop(address, None) is not None

    def apply_status(self, address: str, status: ServerStatus) -> bool:
        """Write query results into a record if it still exists.

        Results for an address removed since the query was dispatched are
        discarded rather than recreating the record.

        Args:
            address: Address the query was sent to
            status: Decoded descriptive fields

        Returns:
            True if the record existed and was updated

        """
        with self._lock.write():
            record = self._servers.get(address)
            if record is None:
                logger.debug("Discarding status for removed server %s", address)
                return False
            record.apply(status)
            return True

    def snapshot(self) -> list[ServerRecord]:
        """Get copies of all records, most recently seen first."""
        with self._lock.read():
            records = [record.copy() for record in self._servers.values()]
        records.sort(key=lambda r: r.last_seen, reverse=True)
        return records

    def evict_older_than(self, threshold: timedelta) -> SweepResult:
        """Remove records not touched within threshold and list the survivors.

        Eviction and enumeration share one exclusive critical section, so a
        concurrent touch lands either before the sweep (and survives) or after
        it (and is a fresh admission).

        Args:
            threshold: Maximum age of last_seen before eviction

        Returns:
            SweepResult with the evicted and the live addresses

        """
        with self._lock.write():
            cutoff = self._clock() - threshold
            evicted = [
                address
                for address, record in self._servers.items()
                if record.last_seen < cutoff
            ]
            for address in evicted:
                del self._servers[address]
            live = tuple(self._servers)

        for address in evicted:
            logger.info("Server removed (timeout): %s", address)

        return SweepResult(evicted=tuple(evicted), live=live)

    def get(self, address: str) -> ServerRecord | None:
        """Get a copy of one record, or None if absent."""
        with self._lock.read():
            record = self._servers.get(address)
            return record.copy() if record else None

    @property
    def count(self) -> int:
        """Get number of registered servers."""
        with self._lock.read():
            return len(self._servers)

    def __len__(self) -> int:
        """Return number of registered servers."""
        return self.count

    def __contains__(self, address: object) -> bool:
        """Check if an address is registered."""
        with self._lock.read():
            return address in self._servers

    def __repr__(self) -> str:
        """Return string representation."""
        return f"ServerRegistry(servers={self.count})"
