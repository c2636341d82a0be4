"""Host-side endpoints that turn page and engine signals into log entries.

``BridgeReceiver`` consumes the ``{type, payload}`` messages posted by the
instrumentation script. ``NavigationRecorder`` records the navigation
lifecycle reported natively by the rendering engine, which is visible even
when the in-page script has not attached yet.
"""

from __future__ import annotations

import json
import math
from typing import Any, Mapping, Optional, Sequence, Union

from utils import common

from .models import ConsoleEntry, ConsoleLevel, RequestEntry, RequestKind
from .store import LogStore

logger = common.get_logger('bridge')

BRIDGE_NAME = 'bridge'

MESSAGE_CONSOLE = 'console'
MESSAGE_JS_ERROR = 'js_error'
MESSAGE_REQUEST = 'request'

LogEntry = Union[ConsoleEntry, RequestEntry]


class MalformedMessageError(ValueError):
    """Raised internally when a bridge message lacks a required field."""


def _require_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str):
        raise MalformedMessageError(f'payload.{key} must be a string')
    return value


def _optional_status(value: Any) -> Optional[int]:
    """Return a usable HTTP status, or None for anything that is not one."""
    if isinstance(value, bool) or not value:
        return None
    try:
        if isinstance(value, float):
            return int(value) if math.isfinite(value) else None
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            text = value.strip()
            if text.isascii() and text.isdigit():
                return int(text)
    except (ValueError, OverflowError):
        return None
    return None


class BridgeReceiver:
    """Validate page messages and append the resulting entries to a store."""

    def __init__(self, store: LogStore) -> None:
        self._store = store
        self.discarded_count = 0

    @property
    def store(self) -> LogStore:
        return self._store

    def handle_message(self, message: Any) -> Optional[LogEntry]:
        """Process one bridge message.

        Accepts a mapping or its JSON encoding. Returns the appended entry,
        or ``None`` when the message was ignored or discarded. Never raises.
        """
        try:
            body = self._decode(message)
            message_type = body.get('type')
            if not isinstance(message_type, str):
                raise MalformedMessageError('type must be a string')

            parser = self._PARSERS.get(message_type)
            if parser is None:
                logger.debug('Ignoring bridge message of unknown type %r', message_type)
                return None

            payload = body.get('payload')
            if not isinstance(payload, Mapping):
                raise MalformedMessageError('payload must be an object')

            entry = parser(self, payload)
        except MalformedMessageError as exc:
            self.discarded_count += 1
            logger.warning('Discarded malformed bridge message: %s', exc)
            return None

        self._store.append(entry)
        return entry

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    @staticmethod
    def _decode(message: Any) -> Mapping[str, Any]:
        if isinstance(message, (bytes, bytearray)):
            try:
                message = message.decode('utf-8')
            except UnicodeDecodeError as exc:
                raise MalformedMessageError(f'undecodable message: {exc}') from exc
        if isinstance(message, str):
            try:
                message = json.loads(message)
            except json.JSONDecodeError as exc:
                raise MalformedMessageError(f'invalid JSON: {exc.msg}') from exc
        if not isinstance(message, Mapping):
            raise MalformedMessageError('message must be an object')
        return message

    def _parse_console(self, payload: Mapping[str, Any]) -> ConsoleEntry:
        level = ConsoleLevel.from_wire(payload.get('level'))
        if level is None:
            raise MalformedMessageError(f'unknown console level {payload.get("level")!r}')

        args = payload.get('args')
        if isinstance(args, str) or not isinstance(args, Sequence):
            raise MalformedMessageError('payload.args must be a list')

        message = ' '.join(arg if isinstance(arg, str) else str(arg) for arg in args)
        return ConsoleEntry(level=level, message=message)

    def _parse_js_error(self, payload: Mapping[str, Any]) -> ConsoleEntry:
        message = _require_str(payload, 'message')
        location = payload.get('location')
        if isinstance(location, str) and location.strip():
            message = f'{message} ({location})'
        return ConsoleEntry(level=ConsoleLevel.ERROR, message=message)

    def _parse_request(self, payload: Mapping[str, Any]) -> RequestEntry:
        kind = RequestKind.from_wire(payload.get('kind'))
        if kind is None:
            raise MalformedMessageError(f'unknown request kind {payload.get("kind")!r}')
        method = _require_str(payload, 'method')
        url = _require_str(payload, 'url')
        return RequestEntry(
            kind=kind,
            method=method,
            url=url,
            status=_optional_status(payload.get('status')),
        )

    _PARSERS = {
        MESSAGE_CONSOLE: _parse_console,
        MESSAGE_JS_ERROR: _parse_js_error,
        MESSAGE_REQUEST: _parse_request,
    }


class NavigationRecorder:
    """Record engine-native navigation lifecycle events."""

    def __init__(self, store: LogStore) -> None:
        self._store = store

    def on_load_started(self, url: str) -> Optional[RequestEntry]:
        if not url:
            return None
        return self._store.append_request(RequestKind.NAVIGATE, 'GET', url)

    def on_load_failed(self, description: str) -> ConsoleEntry:
        message = description.strip() if description and description.strip() else 'Page load failed'
        logger.info('Page load failed: %s', message)
        return self._store.append_console(ConsoleLevel.ERROR, message)

    def on_navigation_action(self, url: str, method: Optional[str] = None) -> Optional[RequestEntry]:
        if not url:
            return None
        return self._store.append_request(RequestKind.NAVIGATION_ACTION, method or 'GET', url)

    def on_navigation_response(
        self,
        url: str,
        status: Optional[int] = None,
        method: Optional[str] = None,
    ) -> Optional[RequestEntry]:
        if not url:
            return None
        text = f'{status} {url}' if status else url
        return self._store.append_request(
            RequestKind.NAVIGATION_RESPONSE,
            method or 'GET',
            text,
            status=status or None,
        )


__all__ = [
    'BRIDGE_NAME',
    'BridgeReceiver',
    'MESSAGE_CONSOLE',
    'MESSAGE_JS_ERROR',
    'MESSAGE_REQUEST',
    'MalformedMessageError',
    'NavigationRecorder',
]
