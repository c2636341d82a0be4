"""Page session coordinating loads, script injection and captured logs."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from utils import common

from .bridge import BridgeReceiver, NavigationRecorder
from .instrumentation import build_evaluation_script, parse_evaluation_result
from .inputs import normalize_quotes, normalize_url
from .models import ConsoleLevel
from .store import LogStore


logger = common.get_logger('inspector_session')


EvaluationCallback = Callable[[Any], None]
PageLoader = Callable[[str, Optional[str]], None]
ScriptEvaluator = Callable[[str, EvaluationCallback], None]


class DialogKind(Enum):
    """JavaScript dialogs a page can open."""

    ALERT = 'alert'
    CONFIRM = 'confirm'
    PROMPT = 'prompt'


@dataclass(frozen=True)
class PageDialog:
    """A dialog request raised by page script."""

    kind: DialogKind
    message: str
    default_text: str = ''


@dataclass(frozen=True)
class DialogResult:
    """The user's answer to a page dialog."""

    accepted: bool
    text: Optional[str] = None

    @classmethod
    def dismissed(cls) -> 'DialogResult':
        return cls(accepted=False, text=None)


DialogPresenter = Callable[[PageDialog], DialogResult]


def format_result_value(value: Any) -> str:
    """Render an evaluation result the way page script would print it."""
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)


class InspectorSession(QObject):
    """Owns the log store of one inspected page and the actions on it.

    The session does not know about the rendering engine: it is handed a
    ``loader`` and an ``evaluator`` and is fed navigation callbacks by the
    view layer. All page-facing failures end up as error console entries.
    """

    loading_changed = pyqtSignal(bool)
    url_changed = pyqtSignal(str)
    logs_changed = pyqtSignal()
    dialog_changed = pyqtSignal(object)  # Optional[PageDialog]
    evaluations_changed = pyqtSignal(int)

    def __init__(
        self,
        loader: Optional[PageLoader] = None,
        evaluator: Optional[ScriptEvaluator] = None,
        store: Optional[LogStore] = None,
    ) -> None:
        super().__init__()
        self._loader = loader
        self._evaluator = evaluator
        self.store = store or LogStore()
        self.receiver = BridgeReceiver(self.store)
        self.navigation = NavigationRecorder(self.store)

        self._is_loading = False
        self._current_url = ''
        self._trace_id: Optional[str] = None
        self._active_dialog: Optional[PageDialog] = None
        self.pending_evaluations = 0

        self.store.subscribe(self._on_store_changed)

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------
    def attach_page(self, loader: PageLoader, evaluator: ScriptEvaluator) -> None:
        self._loader = loader
        self._evaluator = evaluator

    def _on_store_changed(self, _store: LogStore) -> None:
        self.logs_changed.emit()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def current_url(self) -> str:
        return self._current_url

    @property
    def active_dialog(self) -> Optional[PageDialog]:
        return self._active_dialog

    def _set_loading(self, loading: bool) -> None:
        if loading == self._is_loading:
            return
        self._is_loading = loading
        self.loading_changed.emit(loading)

    def _set_pending_evaluations(self, count: int) -> None:
        self.pending_evaluations = max(0, count)
        self.evaluations_changed.emit(self.pending_evaluations)

    def _set_url(self, url: str) -> None:
        if url and url != self._current_url:
            self._current_url = url
            self.url_changed.emit(url)

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------
    def load(self, raw_url: str, user_agent: str = '') -> Optional[str]:
        """Validate ``raw_url`` and ask the page to load it.

        Returns the normalised URL, or None when the input was blank or
        invalid. Invalid input is reported as an error console entry.
        """
        trimmed = normalize_quotes(raw_url or '').strip()
        if not trimmed:
            return None

        url = normalize_url(trimmed)
        if url is None:
            logger.info('Rejected invalid URL input: %s', trimmed)
            self.store.append_console(ConsoleLevel.ERROR, f'Invalid URL: {trimmed}')
            return None

        if self._loader is None:
            raise RuntimeError('No page attached to the inspector session')

        self._trace_id = common.start_page_trace(url)
        agent = normalize_quotes(user_agent or '').strip() or None
        with common.trace_id_scope(self._trace_id):
            logger.info('Loading %s (custom user agent: %s)', url, 'yes' if agent else 'no')
            self._set_url(url)
            self._loader(url, agent)
        return url

    def inject_script(self, script: str) -> bool:
        """Evaluate ``script`` in the page; the outcome is logged when it completes.

        Evaluations have no timeout: a callback that never fires leaves the
        evaluation counted in ``pending_evaluations``, which is announced
        through ``evaluations_changed``.
        """
        trimmed = normalize_quotes(script or '').strip()
        if not trimmed:
            return False
        if self._evaluator is None:
            raise RuntimeError('No page attached to the inspector session')

        self._set_pending_evaluations(self.pending_evaluations + 1)
        with common.trace_id_scope(self._trace_id):
            logger.info('Injecting script (%d chars)', len(trimmed))
        self._evaluator(build_evaluation_script(trimmed), self._on_evaluation_finished)
        return True

    def _on_evaluation_finished(self, result: Any) -> None:
        self._set_pending_evaluations(self.pending_evaluations - 1)
        ok, value = parse_evaluation_result(result)
        if not ok:
            with common.trace_id_scope(self._trace_id):
                logger.info('Injected script failed: %s', value)
            self.store.append_console(ConsoleLevel.ERROR, f'JS inject error: {value}')
            return
        if value is None:
            self.store.append_console(ConsoleLevel.LOG, 'JS inject: ok')
        else:
            self.store.append_console(ConsoleLevel.LOG, f'JS inject result: {format_result_value(value)}')

    def clear_logs(self) -> None:
        self.store.clear()

    # ------------------------------------------------------------------
    # Page-originated signals
    # ------------------------------------------------------------------
    def handle_bridge_message(self, message: Any) -> None:
        with common.trace_id_scope(self._trace_id):
            self.receiver.handle_message(message)

    def handle_load_started(self, url: str) -> None:
        self._set_loading(True)
        self._set_url(url)
        with common.trace_id_scope(self._trace_id):
            self.navigation.on_load_started(url)

    def handle_load_finished(self, url: str = '') -> None:
        self._set_url(url)
        self._set_loading(False)

    def handle_load_failed(self, description: str, url: str = '', status: Optional[int] = None) -> None:
        """Record a failed load; HTTP error statuses become navigation responses."""
        with common.trace_id_scope(self._trace_id):
            if status:
                self.navigation.on_navigation_response(url, status)
            else:
                self.navigation.on_load_failed(description)
        self._set_loading(False)

    def handle_navigation_action(self, url: str, method: Optional[str] = None) -> None:
        with common.trace_id_scope(self._trace_id):
            self.navigation.on_navigation_action(url, method)

    def handle_navigation_response(self, url: str, status: Optional[int] = None) -> None:
        with common.trace_id_scope(self._trace_id):
            self.navigation.on_navigation_response(url, status)

    # ------------------------------------------------------------------
    # Dialogs
    # ------------------------------------------------------------------
    def run_dialog(self, dialog: PageDialog, presenter: DialogPresenter) -> DialogResult:
        """Show ``dialog`` through ``presenter`` unless one is already open.

        Only one dialog is active at a time; an overlapping request is
        dismissed immediately.
        """
        if self._active_dialog is not None:
            logger.warning('Dismissing %s dialog while another dialog is open', dialog.kind.value)
            return DialogResult.dismissed()

        self._active_dialog = dialog
        self.dialog_changed.emit(dialog)
        try:
            return presenter(dialog)
        finally:
            self._active_dialog = None
            self.dialog_changed.emit(None)


__all__ = [
    'DialogKind',
    'DialogPresenter',
    'DialogResult',
    'InspectorSession',
    'PageDialog',
    'PageLoader',
    'ScriptEvaluator',
    'format_result_value',
]
