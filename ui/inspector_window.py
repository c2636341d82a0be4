"""Main window: page view, address controls and the captured logs."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from PyQt6.QtCore import QRect, Qt
from PyQt6.QtGui import QAction, QGuiApplication, QKeySequence
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMenu,
    QPushButton,
    QSplitter,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from config.config_manager import ConfigManager, UISettings
from config.constants import ApplicationConstants, UIConstants, UserAgentConstants
from modules.weblog.exporter import DEFAULT_EXPORT_FILENAME, export_logs
from modules.weblog.inputs import default_user_agent_for_layout, shorten
from modules.weblog.session import DialogPresenter, InspectorSession
from ui.dialog_manager import DialogManager
from ui.error_handler import ErrorCode, ErrorHandler
from ui.file_dialog_manager import FileDialogManager
from ui.log_panel import LogPanel
from ui.responsive_layout import BreakpointManager
from ui.script_inject_dialog import ScriptInjectDialog
from utils import common

logger = common.get_logger('inspector_window')

HostFactory = Callable[[InspectorSession, DialogPresenter, QWidget], QWidget]


def create_web_view_host(session: InspectorSession, presenter: DialogPresenter, parent: QWidget) -> QWidget:
    from ui.web_view_host import WebViewHost

    return WebViewHost(session, presenter, parent)


class InspectorWindow(QMainWindow):
    """Hosts one inspected page next to its console and request logs."""

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        host_factory: Optional[HostFactory] = None,
        dialog_manager: Optional[DialogManager] = None,
        file_dialog_manager: Optional[FileDialogManager] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        super().__init__()
        self.config_manager = config_manager or ConfigManager()
        config = self.config_manager.load_config()

        self.session = InspectorSession()
        self.dialog_manager = dialog_manager or DialogManager(self)
        self.file_dialog_manager = file_dialog_manager or FileDialogManager()
        self.error_handler = error_handler or ErrorHandler(self)

        self._layout_mode = config.ui.layout_mode
        self._compact: Optional[bool] = None
        self._last_export_dir: Optional[str] = None

        factory = host_factory or create_web_view_host
        self.host = factory(self.session, self.dialog_manager.present_page_dialog, self)
        self.log_panel = LogPanel(self.session.store, self, font_size=config.ui.font_size)

        self._init_ui(config.ui)
        self._populate_history()
        self.url_combo.setEditText(config.browser.last_url)

        self._connect_signals()
        self._apply_layout(BreakpointManager.is_compact(self._layout_mode, self.width()))
        if config.browser.last_user_agent:
            self.ua_combo.setEditText(config.browser.last_user_agent)
        self._update_navigation_state()

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------
    def _init_ui(self, ui_settings: UISettings) -> None:
        self.setWindowTitle(f'{ApplicationConstants.APP_NAME} v{ApplicationConstants.APP_VERSION}')
        self.setMinimumSize(UIConstants.WINDOW_MIN_WIDTH, UIConstants.WINDOW_MIN_HEIGHT)
        self._apply_window_geometry(ui_settings)

        central_widget = QWidget()
        central_widget.setObjectName('inspectorCentralWidget')
        self.setCentralWidget(central_widget)
        main_layout = QVBoxLayout(central_widget)
        main_layout.setContentsMargins(6, 6, 6, 6)
        main_layout.setSpacing(6)

        main_layout.addLayout(self._create_address_row())
        main_layout.addLayout(self._create_tools_row())

        self.splitter = QSplitter(Qt.Orientation.Horizontal)
        self.splitter.setChildrenCollapsible(False)
        self.splitter.addWidget(self.host)
        self.splitter.addWidget(self.log_panel)
        self.splitter.setStretchFactor(0, 3)
        self.splitter.setStretchFactor(1, 2)
        self.log_panel.setVisible(ui_settings.show_log_panel)
        self.toggle_logs_button.setChecked(ui_settings.show_log_panel)
        main_layout.addWidget(self.splitter, stretch=1)

        self.status_label = QLabel('Ready')
        self.pending_scripts_label = QLabel()
        self.pending_scripts_label.setVisible(False)
        self.user_agent_label = QLabel()
        self.statusBar().addWidget(self.status_label, 1)
        self.statusBar().addPermanentWidget(self.pending_scripts_label)
        self.statusBar().addPermanentWidget(self.user_agent_label)

        self._create_shortcuts()

    def _create_address_row(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setSpacing(4)

        self.back_button = QToolButton()
        self.back_button.setText('◀')
        self.back_button.setToolTip('Back')
        row.addWidget(self.back_button)

        self.forward_button = QToolButton()
        self.forward_button.setText('▶')
        self.forward_button.setToolTip('Forward')
        row.addWidget(self.forward_button)

        self.reload_button = QToolButton()
        self.reload_button.setText('⟳')
        self.reload_button.setToolTip('Reload')
        row.addWidget(self.reload_button)

        self.url_combo = QComboBox()
        self.url_combo.setEditable(True)
        self.url_combo.setInsertPolicy(QComboBox.InsertPolicy.NoInsert)
        self.url_combo.lineEdit().setPlaceholderText('Enter a URL')
        row.addWidget(self.url_combo, stretch=1)

        self.go_button = QPushButton('Go')
        row.addWidget(self.go_button)
        return row

    def _create_tools_row(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setSpacing(4)

        row.addWidget(QLabel('UA'))
        self.ua_combo = QComboBox()
        self.ua_combo.setEditable(True)
        self.ua_combo.setInsertPolicy(QComboBox.InsertPolicy.NoInsert)
        self.ua_combo.lineEdit().setPlaceholderText('Default user agent')
        row.addWidget(self.ua_combo, stretch=1)

        self.preset_button = QToolButton()
        self.preset_button.setText('Presets')
        self.preset_button.setPopupMode(QToolButton.ToolButtonPopupMode.InstantPopup)
        preset_menu = QMenu(self.preset_button)
        for name, agent in UserAgentConstants.PRESETS.items():
            action = preset_menu.addAction(name)
            action.triggered.connect(lambda _checked=False, ua=agent: self.ua_combo.setEditText(ua))
        reset_action = preset_menu.addAction('Engine default')
        reset_action.triggered.connect(lambda _checked=False: self.ua_combo.setEditText(''))
        self.preset_button.setMenu(preset_menu)
        row.addWidget(self.preset_button)

        self.inject_button = QPushButton('Inject JS')
        row.addWidget(self.inject_button)

        self.toggle_logs_button = QPushButton('Logs')
        self.toggle_logs_button.setCheckable(True)
        self.toggle_logs_button.setChecked(True)
        row.addWidget(self.toggle_logs_button)

        self.clear_button = QPushButton('Clear')
        row.addWidget(self.clear_button)

        self.export_button = QPushButton('Export')
        row.addWidget(self.export_button)
        return row

    def _create_shortcuts(self) -> None:
        focus_address = QAction('Focus address', self)
        focus_address.setShortcut(QKeySequence('Ctrl+L'))
        focus_address.triggered.connect(self._focus_address)
        self.addAction(focus_address)

        reload_action = QAction('Reload', self)
        reload_action.setShortcut(QKeySequence(QKeySequence.StandardKey.Refresh))
        reload_action.triggered.connect(self.reload_or_stop)
        self.addAction(reload_action)

    def _apply_window_geometry(self, ui_settings: UISettings) -> None:
        """Apply window geometry from configuration, clamped to the screen."""
        screen = QGuiApplication.primaryScreen()
        if screen is not None:
            available_rect = QRect(screen.availableGeometry())
        else:
            available_rect = QRect(0, 0, UIConstants.WINDOW_WIDTH, UIConstants.WINDOW_HEIGHT)

        width = max(UIConstants.WINDOW_MIN_WIDTH, ui_settings.window_width)
        height = max(UIConstants.WINDOW_MIN_HEIGHT, ui_settings.window_height)
        if available_rect.width() > 0:
            width = min(width, available_rect.width())
        if available_rect.height() > 0:
            height = min(height, available_rect.height())

        x = min(max(ui_settings.window_x, available_rect.left()), max(available_rect.right() - width, available_rect.left()))
        y = min(max(ui_settings.window_y, available_rect.top()), max(available_rect.bottom() - height, available_rect.top()))
        self.setGeometry(x, y, width, height)

    def _connect_signals(self) -> None:
        self.go_button.clicked.connect(self.load_current)
        self.url_combo.lineEdit().returnPressed.connect(self.load_current)
        self.url_combo.activated.connect(lambda _index: self.load_current())
        self.back_button.clicked.connect(self.host.back)
        self.forward_button.clicked.connect(self.host.forward)
        self.reload_button.clicked.connect(self.reload_or_stop)
        self.inject_button.clicked.connect(self.open_inject_dialog)
        self.clear_button.clicked.connect(self.clear_logs)
        self.export_button.clicked.connect(self.export_logs)
        self.toggle_logs_button.toggled.connect(self.set_log_panel_visible)
        self.ua_combo.editTextChanged.connect(self._update_user_agent_label)

        self.session.loading_changed.connect(self._on_loading_changed)
        self.session.url_changed.connect(self._on_url_changed)
        self.session.evaluations_changed.connect(self._on_evaluations_changed)
        self.host.history_changed.connect(self._update_navigation_state)

    def _populate_history(self) -> None:
        history = self.config_manager.get_history_settings()
        self._set_combo_items(self.url_combo, history.url_history)
        self._set_combo_items(self.ua_combo, history.user_agent_history)

    @staticmethod
    def _set_combo_items(combo: QComboBox, items: Sequence[str]) -> None:
        text = combo.currentText()
        combo.blockSignals(True)
        combo.clear()
        combo.addItems(list(items))
        combo.setEditText(text)
        combo.blockSignals(False)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------
    @property
    def is_compact(self) -> bool:
        return bool(self._compact)

    def set_layout_mode(self, mode: str) -> None:
        self._layout_mode = mode
        self._apply_layout(BreakpointManager.is_compact(mode, self.width()))

    def _apply_layout(self, compact: bool) -> None:
        if compact == self._compact:
            return
        self._compact = compact
        orientation = Qt.Orientation.Vertical if compact else Qt.Orientation.Horizontal
        self.splitter.setOrientation(orientation)
        self.ua_combo.setEditText(default_user_agent_for_layout(self.ua_combo.currentText(), compact))
        logger.info('Switched to %s layout', 'compact' if compact else 'regular')

    def resizeEvent(self, event) -> None:  # type: ignore[override]
        super().resizeEvent(event)
        self._apply_layout(BreakpointManager.is_compact(self._layout_mode, event.size().width()))

    def set_log_panel_visible(self, visible: bool) -> None:
        self.log_panel.setVisible(visible)
        if self.toggle_logs_button.isChecked() != visible:
            self.toggle_logs_button.setChecked(visible)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _focus_address(self) -> None:
        self.url_combo.setFocus()
        self.url_combo.lineEdit().selectAll()

    def load_current(self) -> Optional[str]:
        """Load the address in the URL field with the user agent in the UA field."""
        user_agent = self.ua_combo.currentText().strip()
        raw_url = self.url_combo.currentText()
        url = self.session.load(raw_url, user_agent)
        if url is None:
            if raw_url.strip():
                self.status_label.setText('Invalid URL')
            return None

        self.url_combo.setEditText(url)
        self._persist(lambda: self.config_manager.record_url(url))
        self._persist(lambda: self.config_manager.record_user_agent(user_agent))
        self._populate_history()
        return url

    def reload_or_stop(self) -> None:
        if self.session.is_loading:
            self.host.stop()
        else:
            self.host.reload()

    def open_inject_dialog(self) -> None:
        history = self.config_manager.get_history_settings().script_history
        dialog = ScriptInjectDialog(history, parent=self)
        if dialog.exec():
            script = dialog.get_script()
            if script:
                self.run_script(script)

    def run_script(self, script: str) -> bool:
        if not self.session.inject_script(script):
            return False
        self._persist(lambda: self.config_manager.record_script(script))
        self.status_label.setText('Script injected')
        return True

    def clear_logs(self) -> None:
        self.session.clear_logs()
        self.log_panel.refresh()
        self.status_label.setText('Logs cleared')

    def export_logs(self) -> Optional[str]:
        """Ask for a destination and write the full (unfiltered) logs there."""
        path = self.file_dialog_manager.select_save_path(
            self, 'Export Logs', DEFAULT_EXPORT_FILENAME, self._last_export_dir
        )
        if not path:
            return None
        try:
            target = export_logs(self.session.store, path)
        except OSError as exc:
            self.error_handler.handle_error(ErrorCode.EXPORT_FAILED, details=path, exception=exc)
            self.status_label.setText('Export failed')
            return None
        self._last_export_dir = str(target.parent)
        self.status_label.setText(f'Exported logs to {target}')
        return str(target)

    def _persist(self, action: Callable[[], object]) -> None:
        try:
            action()
        except (OSError, TypeError) as exc:
            self.error_handler.handle_error(ErrorCode.CONFIG_SAVE_FAILED, exception=exc)

    # ------------------------------------------------------------------
    # Session signals
    # ------------------------------------------------------------------
    def _on_loading_changed(self, loading: bool) -> None:
        self.reload_button.setText('✕' if loading else '⟳')
        self.reload_button.setToolTip('Stop' if loading else 'Reload')
        self.status_label.setText('Loading…' if loading else 'Done')
        self._update_navigation_state()

    def _on_evaluations_changed(self, pending: int) -> None:
        self.pending_scripts_label.setText(f'Scripts running: {pending}')
        self.pending_scripts_label.setVisible(pending > 0)

    def _on_url_changed(self, url: str) -> None:
        if not self.url_combo.hasFocus():
            self.url_combo.setEditText(url)

    def _update_navigation_state(self) -> None:
        self.back_button.setEnabled(self.host.can_go_back())
        self.forward_button.setEnabled(self.host.can_go_forward())

    def _update_user_agent_label(self, text: str) -> None:
        agent = text.strip()
        self.user_agent_label.setText(shorten(agent, UIConstants.USER_AGENT_DISPLAY_LIMIT) if agent else 'Default UA')
        self.user_agent_label.setToolTip(agent)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------
    def save_config(self) -> None:
        geometry = self.geometry()
        self._persist(lambda: self.config_manager.update_ui_settings(
            window_width=geometry.width(),
            window_height=geometry.height(),
            window_x=geometry.x(),
            window_y=geometry.y(),
            layout_mode=self._layout_mode,
            show_log_panel=self.toggle_logs_button.isChecked(),
        ))

    def closeEvent(self, event) -> None:  # type: ignore[override]
        self.save_config()
        self.log_panel.detach()
        super().closeEvent(event)


__all__ = ['InspectorWindow', 'create_web_view_host']
