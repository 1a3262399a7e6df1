"""
machine_orchestrator.cache.read_through

Read-through cache of machine state keyed by machine id.

Responsibilities:
- Serve recent snapshots without a store round trip.
- Reject snapshots older (by store version) than the one already cached, so a slow
  re-read racing a newer write cannot roll the cache back.
- Expire entries after the configured lifetime and bound the number of entries.
- Expose one lazily-constructed instance per process (`get_machine_cache`).

The cache is never the system of record; a missing or expired entry simply means the
caller goes to the store.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

from machine_orchestrator.domain.machine import Machine
from machine_orchestrator.observability.logging import get_logger
from machine_orchestrator.settings import get_settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class _Entry:
    machine: Machine
    expires_at: float


class ReadThroughCache:
    def __init__(
        self,
        *,
        ttl_seconds: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        # Insertion order doubles as write recency for eviction.
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, machine_id: str) -> Machine | None:
        with self._lock:
            entry = self._entries.get(machine_id)
            if entry is None:
                return None
            if entry.expires_at <= self._clock():
                del self._entries[machine_id]
                return None
            return entry.machine

    def put(self, machine_id: str, machine: Machine) -> bool:
        """
        Store `machine` under `machine_id`. Returns False (and keeps the cached entry) when
        the cached snapshot carries a newer store version than `machine`.
        """

        with self._lock:
            now = self._clock()
            current = self._entries.get(machine_id)
            if (
                current is not None
                and current.expires_at > now
                and current.machine.version > machine.version
            ):
                log.info(
                    "cache_put_rejected_stale",
                    machine_id=machine_id,
                    cached_version=current.machine.version,
                    offered_version=machine.version,
                )
                return False

            self._entries.pop(machine_id, None)
            self._entries[machine_id] = _Entry(machine=machine, expires_at=now + self._ttl)
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
            return True

    def invalidate(self, machine_id: str) -> None:
        with self._lock:
            self._entries.pop(machine_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, machine_id: object) -> bool:
        return isinstance(machine_id, str) and self.get(machine_id) is not None


@lru_cache(maxsize=1)
def get_machine_cache() -> ReadThroughCache:
    # One instance per process; lives until restart.
    settings = get_settings()
    return ReadThroughCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )


# --- Module Notes -----------------------------------------------------------
# Only the composition root (`api.app`) calls `get_machine_cache`; the orchestrator
# receives the instance as a constructor argument.
