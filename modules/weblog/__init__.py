"""Web page console and network capture subsystem."""

from .models import (
    ConsoleEntry,
    ConsoleLevel,
    NAVIGATION_KINDS,
    RequestEntry,
    RequestKind,
)
from .store import BoundedLog, LogStore
from .filters import (
    ConsoleFilterState,
    RequestFilterState,
    filter_console_entries,
    filter_request_entries,
    is_error_request,
)
from .exporter import build_export_text, build_store_export, export_logs
from .bridge import BRIDGE_NAME, BridgeReceiver, NavigationRecorder
from .session import DialogKind, DialogResult, InspectorSession, PageDialog

__all__ = [
    'BRIDGE_NAME',
    'BoundedLog',
    'BridgeReceiver',
    'ConsoleEntry',
    'ConsoleFilterState',
    'ConsoleLevel',
    'DialogKind',
    'DialogResult',
    'InspectorSession',
    'LogStore',
    'NAVIGATION_KINDS',
    'NavigationRecorder',
    'PageDialog',
    'RequestEntry',
    'RequestFilterState',
    'RequestKind',
    'build_export_text',
    'build_store_export',
    'export_logs',
    'filter_console_entries',
    'filter_request_entries',
    'is_error_request',
]
