"""Plain-text export of the full console and request logs."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Union

from config.constants import BrowserConstants
from utils import common
from utils.time_formatting import format_clock_time

from .models import ConsoleEntry, RequestEntry
from .store import LogStore

logger = common.get_logger('log_exporter')

CONSOLE_HEADER = '== Console =='
REQUESTS_HEADER = '== Requests =='
DEFAULT_EXPORT_FILENAME = BrowserConstants.EXPORT_FILENAME


def _single_line(text: str) -> str:
    # Keep one entry per line in the report.
    return text.replace('\r\n', '\\n').replace('\n', '\\n').replace('\r', '\\n')


def format_console_line(entry: ConsoleEntry) -> str:
    time_text = format_clock_time(entry.timestamp)
    return f'[{time_text}] {entry.level.value.upper()}: {_single_line(entry.message)}'


def format_request_line(entry: RequestEntry) -> str:
    time_text = format_clock_time(entry.timestamp)
    return f'[{time_text}] {entry.kind.value} {_single_line(entry.method)} {_single_line(entry.url)}'


def build_export_text(
    console_entries: Iterable[ConsoleEntry],
    request_entries: Iterable[RequestEntry],
) -> str:
    """Render both logs into the export report layout."""
    lines: List[str] = [CONSOLE_HEADER]
    lines.extend(format_console_line(entry) for entry in console_entries)
    lines.append('')
    lines.append(REQUESTS_HEADER)
    lines.extend(format_request_line(entry) for entry in request_entries)
    return '\n'.join(lines) + '\n'


def build_store_export(store: LogStore) -> str:
    """Render the whole store, ignoring any view filters."""
    return build_export_text(store.console_entries(), store.request_entries())


def export_logs(store: LogStore, file_path: Union[str, Path]) -> Path:
    """Write the report for ``store`` to ``file_path`` as UTF-8.

    Raises ``OSError`` when the file cannot be written.
    """
    target = Path(common.get_full_path(str(file_path)))
    console_entries = store.console_entries()
    request_entries = store.request_entries()
    target.write_text(build_export_text(console_entries, request_entries), encoding='utf-8')
    logger.info(
        'Exported %d console and %d request entries to %s',
        len(console_entries),
        len(request_entries),
        target,
    )
    return target


__all__ = [
    'CONSOLE_HEADER',
    'DEFAULT_EXPORT_FILENAME',
    'REQUESTS_HEADER',
    'build_export_text',
    'build_store_export',
    'export_logs',
    'format_console_line',
    'format_request_line',
]
