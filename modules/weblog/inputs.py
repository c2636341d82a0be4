"""Normalisation of user-typed URLs, scripts and user-agent strings."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from config.constants import UserAgentConstants

_QUOTE_REPLACEMENTS = {
    '“': '"',
    '”': '"',
    '„': '"',
    '‘': "'",
    '’': "'",
    '‚': "'",
}

_QUOTE_TABLE = str.maketrans(_QUOTE_REPLACEMENTS)

_ALLOWED_SCHEMES = ('http://', 'https://')


def normalize_quotes(text: str) -> str:
    """Replace typographic quotes (as inserted by smart keyboards) with ASCII ones."""
    return text.translate(_QUOTE_TABLE)


def normalize_url(raw: str) -> Optional[str]:
    """Return a loadable http(s) URL for ``raw``, or None when it is unusable.

    Input without an ``http://``/``https://`` prefix is treated as an https
    address.
    """
    trimmed = normalize_quotes(raw or '').strip()
    if not trimmed:
        return None

    lowered = trimmed.lower()
    candidate = trimmed if lowered.startswith(_ALLOWED_SCHEMES) else f'https://{trimmed}'

    if any(char.isspace() for char in candidate):
        return None

    try:
        parts = urlsplit(candidate)
        # .port raises ValueError when the port is malformed
        hostname, _port = parts.hostname, parts.port
    except ValueError:
        return None
    if not hostname:
        return None
    return candidate


def shorten(text: str, limit: int = 42, keep: int = 36) -> str:
    """Trim ``text`` for compact display, e.g. long user-agent strings."""
    trimmed = text.strip()
    if len(trimmed) <= limit:
        return trimmed
    return f'{trimmed[:keep]}...'


def looks_mobile(user_agent: str) -> bool:
    return 'mobile' in user_agent.lower()


def default_user_agent_for_layout(current: str, compact: bool) -> str:
    """Pick the user agent to use when the layout mode changes.

    Compact layouts switch to the iPhone preset unless the current agent is
    already a mobile one; regular layouts replace an empty or iPhone agent
    with the desktop preset. Custom agents are otherwise kept.
    """
    trimmed = current.strip()
    if compact:
        if not trimmed or trimmed == UserAgentConstants.DESKTOP or not looks_mobile(trimmed):
            return UserAgentConstants.IPHONE
        return trimmed
    if not trimmed or trimmed == UserAgentConstants.IPHONE:
        return UserAgentConstants.DESKTOP
    return trimmed


__all__ = [
    'default_user_agent_for_layout',
    'looks_mobile',
    'normalize_quotes',
    'normalize_url',
    'shorten',
]
