"""Filter state and pure projections over the console and request logs.

Projections return new lists in store order and never touch the entries or
the store they came from.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Set

from .models import (
    NAVIGATION_KINDS,
    ConsoleEntry,
    ConsoleLevel,
    RequestEntry,
    RequestKind,
)

# A 4xx/5xx code standing alone as a word, e.g. "404 https://..." or "... 503".
_TEXTUAL_ERROR_STATUS = re.compile(r'(?:^|\s)[45]\d{2}(?=\s|$)')


def _all_levels() -> Set[ConsoleLevel]:
    return set(ConsoleLevel)


def _all_kinds() -> Set[RequestKind]:
    return set(RequestKind)


@dataclass
class ConsoleFilterState:
    """Level toggles and free-text search for the console log."""

    levels: Set[ConsoleLevel] = field(default_factory=_all_levels)
    search: str = ''

    def toggle(self, level: ConsoleLevel) -> bool:
        """Flip ``level`` and return whether it is now shown."""
        if level in self.levels:
            self.levels.discard(level)
            return False
        self.levels.add(level)
        return True

    def set_level(self, level: ConsoleLevel, enabled: bool) -> None:
        if enabled:
            self.levels.add(level)
        else:
            self.levels.discard(level)

    def is_default(self) -> bool:
        return self.levels == _all_levels() and not self.search


@dataclass
class RequestFilterState:
    """Kind toggles, free-text search and the "only errors" switch."""

    kinds: Set[RequestKind] = field(default_factory=_all_kinds)
    search: str = ''
    only_errors: bool = False

    def toggle(self, kind: RequestKind) -> bool:
        """Flip ``kind`` and return whether it is now shown."""
        if kind in self.kinds:
            self.kinds.discard(kind)
            return False
        self.kinds.add(kind)
        return True

    def set_kind(self, kind: RequestKind, enabled: bool) -> None:
        if enabled:
            self.kinds.add(kind)
        else:
            self.kinds.discard(kind)

    def set_navigation(self, enabled: bool) -> None:
        """Show or hide all navigation kinds together."""
        for kind in NAVIGATION_KINDS:
            self.set_kind(kind, enabled)

    @property
    def shows_navigation(self) -> bool:
        return bool(self.kinds & NAVIGATION_KINDS)

    def is_default(self) -> bool:
        return self.kinds == _all_kinds() and not self.search and not self.only_errors


def _contains(haystack: str, needle: str) -> bool:
    return needle.casefold() in haystack.casefold()


def console_entry_matches(entry: ConsoleEntry, state: ConsoleFilterState) -> bool:
    if entry.level not in state.levels:
        return False
    if not state.search:
        return True
    return _contains(entry.message, state.search)


def is_error_request(entry: RequestEntry) -> bool:
    """Return whether ``entry`` represents a 4xx/5xx response.

    The structured ``status`` wins when present; otherwise a status code
    embedded as a standalone word in the url text is used.
    """
    if entry.status is not None and entry.status > 0:
        return entry.status >= 400
    return bool(_TEXTUAL_ERROR_STATUS.search(entry.url))


def request_entry_matches(entry: RequestEntry, state: RequestFilterState) -> bool:
    if entry.kind not in state.kinds:
        return False
    if state.only_errors and not is_error_request(entry):
        return False
    if not state.search:
        return True
    return _contains(entry.url, state.search) or _contains(entry.method, state.search)


def filter_console_entries(
    entries: Iterable[ConsoleEntry],
    state: ConsoleFilterState,
) -> List[ConsoleEntry]:
    return [entry for entry in entries if console_entry_matches(entry, state)]


def filter_request_entries(
    entries: Iterable[RequestEntry],
    state: RequestFilterState,
) -> List[RequestEntry]:
    return [entry for entry in entries if request_entry_matches(entry, state)]


__all__ = [
    'ConsoleFilterState',
    'RequestFilterState',
    'console_entry_matches',
    'filter_console_entries',
    'filter_request_entries',
    'is_error_request',
    'request_entry_matches',
]
