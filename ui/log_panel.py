"""Console and request log views with filter controls."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from PyQt6.QtCore import QAbstractListModel, QModelIndex, QObject, Qt, pyqtSignal
from PyQt6.QtGui import QColor, QFont
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QApplication,
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListView,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from config.constants import UIConstants
from modules.weblog.exporter import format_console_line, format_request_line
from modules.weblog.filters import (
    ConsoleFilterState,
    RequestFilterState,
    filter_console_entries,
    filter_request_entries,
    is_error_request,
)
from modules.weblog.models import ConsoleEntry, ConsoleLevel, RequestEntry, RequestKind
from modules.weblog.store import LogStore
from utils import common
from utils.debounced_refresh import DebouncedRefresh

logger = common.get_logger('log_panel')

LEVEL_COLORS = {
    ConsoleLevel.LOG: None,
    ConsoleLevel.WARN: QColor('#b7791f'),
    ConsoleLevel.ERROR: QColor('#c53030'),
}
ERROR_REQUEST_COLOR = QColor('#c53030')

CONSOLE_LEVEL_LABELS = (
    (ConsoleLevel.LOG, 'Log'),
    (ConsoleLevel.WARN, 'Warn'),
    (ConsoleLevel.ERROR, 'Error'),
)
REQUEST_KIND_LABELS = (
    (RequestKind.FETCH, 'Fetch'),
    (RequestKind.XHR, 'XHR'),
    (RequestKind.RESOURCE, 'Resource'),
)


class _EntryListModel(QAbstractListModel):
    """List model holding the currently visible entries of one log."""

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._entries: List[Any] = []

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # type: ignore[override]
        if parent.isValid():
            return 0
        return len(self._entries)

    def data(self, index: QModelIndex, role: int = Qt.ItemDataRole.DisplayRole) -> Any:  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._entries)):
            return None
        entry = self._entries[index.row()]
        if role == Qt.ItemDataRole.DisplayRole:
            return self.format_entry(entry)
        if role == Qt.ItemDataRole.ForegroundRole:
            return self.entry_color(entry)
        if role == Qt.ItemDataRole.UserRole:
            return entry
        return None

    def set_entries(self, entries: Sequence[Any]) -> None:
        self.beginResetModel()
        self._entries = list(entries)
        self.endResetModel()

    def entries(self) -> List[Any]:
        return list(self._entries)

    def lines(self) -> List[str]:
        return [self.format_entry(entry) for entry in self._entries]

    def format_entry(self, entry: Any) -> str:
        raise NotImplementedError

    def entry_color(self, entry: Any) -> Optional[QColor]:
        return None


class ConsoleListModel(_EntryListModel):
    def format_entry(self, entry: ConsoleEntry) -> str:
        return format_console_line(entry)

    def entry_color(self, entry: ConsoleEntry) -> Optional[QColor]:
        return LEVEL_COLORS.get(entry.level)


class RequestListModel(_EntryListModel):
    def format_entry(self, entry: RequestEntry) -> str:
        return format_request_line(entry)

    def entry_color(self, entry: RequestEntry) -> Optional[QColor]:
        return ERROR_REQUEST_COLOR if is_error_request(entry) else None


class LogPanel(QWidget):
    """Tabbed console/request views over a ``LogStore``.

    Filters only change what is shown; the store and exports are unaffected.
    Store notifications may arrive from any thread and are coalesced before
    the views are rebuilt on the GUI thread.
    """

    _store_changed = pyqtSignal()
    filters_changed = pyqtSignal()

    def __init__(self, store: LogStore, parent: Optional[QWidget] = None, font_size: int = UIConstants.LOG_FONT_SIZE):
        super().__init__(parent)
        self.store = store
        self.console_filter = ConsoleFilterState()
        self.request_filter = RequestFilterState()

        self.console_model = ConsoleListModel(self)
        self.request_model = RequestListModel(self)

        self._refresher = DebouncedRefresh(
            self.refresh,
            UIConstants.LOG_REFRESH_DEBOUNCE_MS,
            self,
            max_wait_ms=UIConstants.LOG_REFRESH_MAX_WAIT_MS,
        )
        self._store_changed.connect(self._refresher.request_refresh)
        self.store.subscribe(self._on_store_changed)

        self.level_checkboxes: Dict[ConsoleLevel, QCheckBox] = {}
        self.kind_checkboxes: Dict[RequestKind, QCheckBox] = {}

        self._init_ui()
        self.set_font_size(font_size)
        self.refresh()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    def _init_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.tabs = QTabWidget(self)
        self.tabs.addTab(self._create_console_tab(), 'Console')
        self.tabs.addTab(self._create_requests_tab(), 'Requests')
        layout.addWidget(self.tabs)

    def _create_list_view(self, model: QAbstractListModel) -> QListView:
        view = QListView(self)
        view.setModel(model)
        view.setUniformItemSizes(True)
        view.setWordWrap(False)
        view.setSelectionMode(QAbstractItemView.SelectionMode.ExtendedSelection)
        return view

    def _create_console_tab(self) -> QWidget:
        tab = QWidget()
        layout = QVBoxLayout(tab)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        controls = QHBoxLayout()
        for level, label in CONSOLE_LEVEL_LABELS:
            checkbox = QCheckBox(label)
            checkbox.setChecked(True)
            checkbox.toggled.connect(lambda checked, lv=level: self._on_level_toggled(lv, checked))
            self.level_checkboxes[level] = checkbox
            controls.addWidget(checkbox)

        self.console_search = QLineEdit()
        self.console_search.setPlaceholderText('Search console')
        self.console_search.setClearButtonEnabled(True)
        self.console_search.textChanged.connect(self._on_console_search_changed)
        controls.addWidget(self.console_search, stretch=1)

        self.console_count_label = QLabel()
        controls.addWidget(self.console_count_label)

        self.console_copy_button = QPushButton('Copy')
        self.console_copy_button.setToolTip('Copy visible console lines')
        self.console_copy_button.clicked.connect(self.copy_visible_console)
        controls.addWidget(self.console_copy_button)
        layout.addLayout(controls)

        self.console_view = self._create_list_view(self.console_model)
        layout.addWidget(self.console_view)
        return tab

    def _create_requests_tab(self) -> QWidget:
        tab = QWidget()
        layout = QVBoxLayout(tab)
        layout.setContentsMargins(6, 6, 6, 6)
        layout.setSpacing(6)

        controls = QHBoxLayout()
        for kind, label in REQUEST_KIND_LABELS:
            checkbox = QCheckBox(label)
            checkbox.setChecked(True)
            checkbox.toggled.connect(lambda checked, kd=kind: self._on_kind_toggled(kd, checked))
            self.kind_checkboxes[kind] = checkbox
            controls.addWidget(checkbox)

        self.navigation_checkbox = QCheckBox('Navigation')
        self.navigation_checkbox.setChecked(True)
        self.navigation_checkbox.toggled.connect(self._on_navigation_toggled)
        controls.addWidget(self.navigation_checkbox)

        self.only_errors_checkbox = QCheckBox('Only errors')
        self.only_errors_checkbox.toggled.connect(self._on_only_errors_toggled)
        controls.addWidget(self.only_errors_checkbox)

        self.request_search = QLineEdit()
        self.request_search.setPlaceholderText('Search url or method')
        self.request_search.setClearButtonEnabled(True)
        self.request_search.textChanged.connect(self._on_request_search_changed)
        controls.addWidget(self.request_search, stretch=1)

        self.request_count_label = QLabel()
        controls.addWidget(self.request_count_label)

        self.request_copy_button = QPushButton('Copy')
        self.request_copy_button.setToolTip('Copy visible request lines')
        self.request_copy_button.clicked.connect(self.copy_visible_requests)
        controls.addWidget(self.request_copy_button)
        layout.addLayout(controls)

        self.request_view = self._create_list_view(self.request_model)
        layout.addWidget(self.request_view)
        return tab

    def set_font_size(self, size: int) -> None:
        font = QFont('Monospace')
        font.setStyleHint(QFont.StyleHint.TypeWriter)
        font.setPointSize(size)
        self.console_view.setFont(font)
        self.request_view.setFont(font)

    # ------------------------------------------------------------------
    # Filter handlers
    # ------------------------------------------------------------------
    def _on_level_toggled(self, level: ConsoleLevel, checked: bool) -> None:
        self.console_filter.set_level(level, checked)
        self._filters_updated()

    def _on_console_search_changed(self, text: str) -> None:
        self.console_filter.search = text.strip()
        self._filters_updated()

    def _on_kind_toggled(self, kind: RequestKind, checked: bool) -> None:
        self.request_filter.set_kind(kind, checked)
        self._filters_updated()

    def _on_navigation_toggled(self, checked: bool) -> None:
        self.request_filter.set_navigation(checked)
        self._filters_updated()

    def _on_only_errors_toggled(self, checked: bool) -> None:
        self.request_filter.only_errors = checked
        self._filters_updated()

    def _on_request_search_changed(self, text: str) -> None:
        self.request_filter.search = text.strip()
        self._filters_updated()

    def _filters_updated(self) -> None:
        self.refresh()
        self.filters_changed.emit()

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------
    def _on_store_changed(self, _store: LogStore) -> None:
        self._store_changed.emit()

    def refresh(self) -> None:
        """Rebuild both views from the store and the current filters."""
        console_entries = self.store.console_entries()
        request_entries = self.store.request_entries()

        visible_console = filter_console_entries(console_entries, self.console_filter)
        visible_requests = filter_request_entries(request_entries, self.request_filter)

        self.console_model.set_entries(visible_console)
        self.request_model.set_entries(visible_requests)
        self.console_view.scrollToBottom()
        self.request_view.scrollToBottom()

        self.console_count_label.setText(f'{len(visible_console)}/{len(console_entries)}')
        self.request_count_label.setText(f'{len(visible_requests)}/{len(request_entries)}')
        self.tabs.setTabText(0, f'Console ({len(console_entries)})')
        self.tabs.setTabText(1, f'Requests ({len(request_entries)})')

    def flush(self) -> None:
        """Apply any pending store change immediately."""
        if self._refresher.is_pending:
            self._refresher.force_refresh()

    # ------------------------------------------------------------------
    # Clipboard
    # ------------------------------------------------------------------
    def copy_visible_console(self) -> str:
        return self._copy_lines(self.console_model.lines())

    def copy_visible_requests(self) -> str:
        return self._copy_lines(self.request_model.lines())

    def _copy_lines(self, lines: List[str]) -> str:
        text = '\n'.join(lines)
        clipboard = QApplication.clipboard()
        if clipboard is not None:
            clipboard.setText(text)
        logger.debug('Copied %d visible lines', len(lines))
        return text

    def detach(self) -> None:
        """Stop listening to the store."""
        self._refresher.cancel()
        self.store.unsubscribe(self._on_store_changed)


__all__ = ['ConsoleListModel', 'LogPanel', 'RequestListModel']
