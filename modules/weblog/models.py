"""Data models for captured page console and network activity."""

from __future__ import annotations

import itertools
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional


_ENTRY_IDS = itertools.count(1)
_ENTRY_IDS_LOCK = threading.Lock()


def next_entry_id() -> int:
    """Return the next process-wide entry identifier (creation ordered)."""
    with _ENTRY_IDS_LOCK:
        return next(_ENTRY_IDS)


class ConsoleLevel(Enum):
    """Severity of a captured console signal."""

    LOG = 'log'
    WARN = 'warn'
    ERROR = 'error'

    @classmethod
    def from_wire(cls, value: object) -> Optional['ConsoleLevel']:
        """Map a bridge level string to a level, or None when unknown."""
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        normalized = _LEVEL_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return None


_LEVEL_ALIASES = {
    'info': 'log',
    'debug': 'log',
    'warning': 'warn',
}


class RequestKind(Enum):
    """Classification of a captured network or navigation signal."""

    FETCH = 'fetch'
    XHR = 'xhr'
    RESOURCE = 'resource'
    NAVIGATE = 'navigate'
    NAVIGATION_ACTION = 'navigationAction'
    NAVIGATION_RESPONSE = 'navigationResponse'

    @classmethod
    def from_wire(cls, value: object) -> Optional['RequestKind']:
        """Map a bridge kind string to a kind, or None when unknown."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip())
        except ValueError:
            return None


NAVIGATION_KINDS: FrozenSet[RequestKind] = frozenset({
    RequestKind.NAVIGATE,
    RequestKind.NAVIGATION_ACTION,
    RequestKind.NAVIGATION_RESPONSE,
})


@dataclass(frozen=True)
class ConsoleEntry:
    """A console message, uncaught error or injection result from the page."""

    level: ConsoleLevel
    message: str
    timestamp: float = field(default_factory=time.time)
    id: int = field(default_factory=next_entry_id)


@dataclass(frozen=True)
class RequestEntry:
    """A fetch/XHR call, sub-resource load or page navigation.

    ``method`` holds the HTTP verb, or the initiator type for resource timing
    entries. ``url`` may carry a textual status prefix such as
    ``"404 https://..."`` for navigation responses.
    """

    kind: RequestKind
    method: str
    url: str
    status: Optional[int] = None
    timestamp: float = field(default_factory=time.time)
    id: int = field(default_factory=next_entry_id)


__all__ = [
    'ConsoleEntry',
    'ConsoleLevel',
    'NAVIGATION_KINDS',
    'RequestEntry',
    'RequestKind',
    'next_entry_id',
]
