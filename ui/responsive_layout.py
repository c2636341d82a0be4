"""Breakpoint helpers selecting the compact or regular window layout."""

from __future__ import annotations

from config.constants import UIConstants

LAYOUT_AUTO = 'auto'
LAYOUT_COMPACT = 'compact'
LAYOUT_REGULAR = 'regular'


class BreakpointManager:
    """Maps window widths to the compact (phone-like) or regular layout."""

    BREAKPOINTS = {
        LAYOUT_COMPACT: 0,
        LAYOUT_REGULAR: UIConstants.COMPACT_BREAKPOINT_PX,
    }

    @classmethod
    def get_breakpoint(cls, width: int) -> str:
        """
        Get the layout name for a given width.

        Args:
            width: Width in pixels

        Returns:
            'compact' or 'regular'
        """
        breakpoint = LAYOUT_COMPACT
        for name, min_width in sorted(cls.BREAKPOINTS.items(), key=lambda x: x[1]):
            if width >= min_width:
                breakpoint = name
        return breakpoint

    @classmethod
    def resolve_layout(cls, mode: str, width: int) -> str:
        """Return the effective layout for a configured ``mode`` at ``width``."""
        if mode in (LAYOUT_COMPACT, LAYOUT_REGULAR):
            return mode
        return cls.get_breakpoint(width)

    @classmethod
    def is_compact(cls, mode: str, width: int) -> bool:
        return cls.resolve_layout(mode, width) == LAYOUT_COMPACT


__all__ = [
    'BreakpointManager',
    'LAYOUT_AUTO',
    'LAYOUT_COMPACT',
    'LAYOUT_REGULAR',
]
