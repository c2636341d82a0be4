"""Helpers for rendering entry timestamps as wall-clock strings."""

from __future__ import annotations

import datetime as dt
from typing import Union

from utils import common

logger = common.get_logger("time_formatting")

Number = Union[int, float]


def format_clock_time(timestamp: Number) -> str:
    """Return a zero-padded 24-hour ``HH:MM:SS`` string in host-local time.

    Millisecond epoch values are accepted as well as second values.
    """
    try:
        seconds = float(timestamp)
        if seconds > 1e11:
            seconds /= 1000.0
        moment = dt.datetime.fromtimestamp(seconds)
    except (TypeError, ValueError, OverflowError, OSError):
        logger.debug("Invalid timestamp value for formatting: %r", timestamp)
        return "00:00:00"
    return moment.strftime("%H:%M:%S")


__all__ = ["format_clock_time"]
