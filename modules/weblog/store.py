"""Capacity-bounded, append-only stores for console and request entries."""

from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Deque, Generic, List, Optional, Tuple, TypeVar

from config.constants import LogConstants
from utils import common

from .models import ConsoleEntry, ConsoleLevel, RequestEntry, RequestKind

logger = common.get_logger('log_store')

DEFAULT_CAPACITY = LogConstants.LOG_CAPACITY

EntryT = TypeVar('EntryT')

StoreListener = Callable[['LogStore'], None]


class BoundedLog(Generic[EntryT]):
    """Ordered sequence that drops its oldest entries beyond ``capacity``.

    Not thread-safe on its own; ``LogStore`` serialises access.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f'capacity must be positive, got {capacity}')
        self._capacity = capacity
        self._entries: Deque[EntryT] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: EntryT) -> int:
        """Append ``entry`` and return how many old entries were evicted."""
        self._entries.append(entry)
        evicted = 0
        while len(self._entries) > self._capacity:
            self._entries.popleft()
            evicted += 1
        return evicted

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> Tuple[EntryT, ...]:
        return tuple(self._entries)


class LogStore:
    """Holds the console and request logs of one inspector session.

    Entries are only ever appended (with front eviction at capacity) or
    cleared all at once. Listeners registered through ``subscribe`` are
    notified after every change, outside the internal lock.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self._lock = threading.Lock()
        self._console: BoundedLog[ConsoleEntry] = BoundedLog(capacity)
        self._requests: BoundedLog[RequestEntry] = BoundedLog(capacity)
        self._listeners: List[StoreListener] = []

    @property
    def capacity(self) -> int:
        return self._console.capacity

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def append(self, entry: object) -> None:
        """Append a console or request entry to the matching log."""
        if isinstance(entry, ConsoleEntry):
            with self._lock:
                evicted = self._console.append(entry)
        elif isinstance(entry, RequestEntry):
            with self._lock:
                evicted = self._requests.append(entry)
        else:
            raise TypeError(f'Unsupported log entry type: {type(entry).__name__}')

        if evicted:
            logger.debug('Evicted %d oldest %s entries', evicted, type(entry).__name__)
        self._notify()

    def append_console(self, level: ConsoleLevel, message: str) -> ConsoleEntry:
        entry = ConsoleEntry(level=level, message=message)
        self.append(entry)
        return entry

    def append_request(
        self,
        kind: RequestKind,
        method: str,
        url: str,
        status: Optional[int] = None,
    ) -> RequestEntry:
        entry = RequestEntry(kind=kind, method=method, url=url, status=status)
        self.append(entry)
        return entry

    def clear(self) -> None:
        """Empty both logs. Safe to call on an empty store."""
        with self._lock:
            had_entries = bool(len(self._console) or len(self._requests))
            self._console.clear()
            self._requests.clear()
        if had_entries:
            logger.info('Cleared console and request logs')
        self._notify()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def console_entries(self) -> Tuple[ConsoleEntry, ...]:
        with self._lock:
            return self._console.snapshot()

    def request_entries(self) -> Tuple[RequestEntry, ...]:
        with self._lock:
            return self._requests.snapshot()

    def counts(self) -> Tuple[int, int]:
        """Return ``(console_count, request_count)``."""
        with self._lock:
            return len(self._console), len(self._requests)

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    def subscribe(self, listener: StoreListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception('Log store listener failed')


__all__ = ['BoundedLog', 'DEFAULT_CAPACITY', 'LogStore', 'StoreListener']
