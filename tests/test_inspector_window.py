#!/usr/bin/env python3
"""Window-level tests using a fake page host instead of Qt WebEngine."""

import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from PyQt6.QtCore import QSize, Qt, pyqtSignal
from PyQt6.QtGui import QResizeEvent
from PyQt6.QtWidgets import QApplication, QWidget

from config.config_manager import ConfigManager
from config.constants import UserAgentConstants
from modules.weblog.models import ConsoleLevel
from ui.error_handler import ErrorCode, ErrorHandler
from ui.file_dialog_manager import FileDialogManager
from ui.inspector_window import InspectorWindow


class FakeHost(QWidget):
    history_changed = pyqtSignal()

    def __init__(self, session, presenter, parent=None):
        super().__init__(parent)
        self.session = session
        self.presenter = presenter
        self.loads = []
        self.evaluations = []
        self.calls = []
        session.attach_page(self.load, self.evaluate)

    def load(self, url, user_agent):
        self.loads.append((url, user_agent))

    def evaluate(self, source, callback):
        self.evaluations.append((source, callback))

    def can_go_back(self):
        return False

    def can_go_forward(self):
        return False

    def back(self):
        self.calls.append('back')

    def forward(self):
        self.calls.append('forward')

    def reload(self):
        self.calls.append('reload')

    def stop(self):
        self.calls.append('stop')


class InspectorWindowTest(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._app = QApplication.instance() or QApplication([])

    def setUp(self) -> None:
        self.temp_dir = tempfile.mkdtemp()
        self.config_manager = ConfigManager(str(Path(self.temp_dir) / 'config.json'))
        self.save_paths = []
        self.errors = []
        self.error_handler = ErrorHandler(None)
        self.error_handler.error_occurred.connect(self.errors.append)
        self.window = self._create_window()

    def tearDown(self) -> None:
        self.window.log_panel.detach()
        self.window.deleteLater()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _create_window(self) -> InspectorWindow:
        def save_dialog(parent, title, start, name_filter):
            return (self.save_paths.pop(0) if self.save_paths else '', name_filter)

        return InspectorWindow(
            config_manager=self.config_manager,
            host_factory=FakeHost,
            file_dialog_manager=FileDialogManager(save_dialog_fn=save_dialog),
            error_handler=self.error_handler,
        )

    def test_load_current_records_history(self) -> None:
        self.window.url_combo.setEditText('example.org')
        self.window.ua_combo.setEditText('Agent/2')

        url = self.window.load_current()

        self.assertEqual(url, 'https://example.org')
        self.assertEqual(self.window.host.loads, [('https://example.org', 'Agent/2')])
        history = self.config_manager.get_history_settings()
        self.assertEqual(history.url_history, ['https://example.org'])
        self.assertEqual(history.user_agent_history, ['Agent/2'])
        self.assertEqual(self.window.url_combo.count(), 1)

    def test_invalid_url_logs_error_without_loading(self) -> None:
        self.window.url_combo.setEditText('bad url')

        self.assertIsNone(self.window.load_current())

        self.assertEqual(self.window.host.loads, [])
        entries = self.window.session.store.console_entries()
        self.assertEqual([(e.level, e.message) for e in entries], [(ConsoleLevel.ERROR, 'Invalid URL: bad url')])
        self.assertEqual(self.config_manager.get_history_settings().url_history, [])

    def test_reload_button_stops_while_loading(self) -> None:
        self.window.reload_or_stop()
        self.window.session.handle_load_started('https://example.com/')
        self.window.reload_or_stop()
        self.window.session.handle_load_finished('https://example.com/')
        self.assertEqual(self.window.host.calls, ['reload', 'stop'])
        self.assertEqual(self.window.reload_button.toolTip(), 'Reload')

    def test_run_script_records_history(self) -> None:
        self.assertTrue(self.window.run_script('document.title'))
        self.assertEqual(len(self.window.host.evaluations), 1)
        self.assertEqual(self.config_manager.get_history_settings().script_history, ['document.title'])

    def test_status_bar_shows_running_scripts(self) -> None:
        self.assertTrue(self.window.pending_scripts_label.isHidden())

        self.window.run_script('document.title')
        self.assertFalse(self.window.pending_scripts_label.isHidden())
        self.assertEqual(self.window.pending_scripts_label.text(), 'Scripts running: 1')

        _source, callback = self.window.host.evaluations[0]
        callback({'ok': True, 'value': 't'})
        self.assertTrue(self.window.pending_scripts_label.isHidden())

    def test_export_writes_unfiltered_logs(self) -> None:
        store = self.window.session.store
        store.append_console(ConsoleLevel.LOG, 'visible')
        store.append_console(ConsoleLevel.ERROR, 'hidden by filter')
        self.window.log_panel.level_checkboxes[ConsoleLevel.ERROR].setChecked(False)
        target = Path(self.temp_dir) / 'webview-logs.txt'
        self.save_paths.append(str(target))

        written = self.window.export_logs()

        self.assertEqual(written, str(target))
        content = target.read_text(encoding='utf-8')
        self.assertIn('ERROR: hidden by filter', content)

    def test_export_cancelled(self) -> None:
        self.assertIsNone(self.window.export_logs())

    def test_export_failure_is_reported(self) -> None:
        self.save_paths.append(str(Path(self.temp_dir) / 'missing' / 'out.txt'))

        self.assertIsNone(self.window.export_logs())

        self.assertEqual([info.code for info in self.errors], [ErrorCode.EXPORT_FAILED])

    def test_clear_logs(self) -> None:
        self.window.session.store.append_console(ConsoleLevel.LOG, 'x')
        self.window.clear_logs()
        self.assertEqual(self.window.session.store.counts(), (0, 0))

    def test_layout_follows_breakpoint(self) -> None:
        self.window.resizeEvent(QResizeEvent(QSize(500, 800), QSize(1280, 860)))
        self.assertTrue(self.window.is_compact)
        self.assertEqual(self.window.splitter.orientation(), Qt.Orientation.Vertical)
        self.assertEqual(self.window.ua_combo.currentText(), UserAgentConstants.IPHONE)

        self.window.resizeEvent(QResizeEvent(QSize(1200, 800), QSize(500, 800)))
        self.assertFalse(self.window.is_compact)
        self.assertEqual(self.window.splitter.orientation(), Qt.Orientation.Horizontal)
        self.assertEqual(self.window.ua_combo.currentText(), UserAgentConstants.DESKTOP)

    def test_forced_layout_mode_ignores_width(self) -> None:
        self.window.set_layout_mode('compact')
        self.window.resizeEvent(QResizeEvent(QSize(1400, 800), QSize(500, 800)))
        self.assertTrue(self.window.is_compact)

    def test_save_config_persists_layout_and_panel(self) -> None:
        self.window.set_layout_mode('regular')
        self.window.set_log_panel_visible(False)
        self.window.save_config()

        ui = ConfigManager(str(self.config_manager.config_path)).get_ui_settings()
        self.assertEqual(ui.layout_mode, 'regular')
        self.assertFalse(ui.show_log_panel)


if __name__ == '__main__':
    unittest.main()
