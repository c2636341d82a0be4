"""Unit tests for ConfigManager."""

import json
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.config_manager import AppConfig, ConfigManager, UISettings, update_history
from config.constants import BrowserConstants, HistoryConstants, UIConstants


class TestUpdateHistory(unittest.TestCase):
    def test_moves_existing_value_to_front(self):
        self.assertEqual(update_history(['a', 'b', 'c'], 'c', 8), ['c', 'a', 'b'])

    def test_caps_length(self):
        values = [str(i) for i in range(8)]
        self.assertEqual(update_history(values, 'new', 8), ['new'] + values[:7])

    def test_blank_value_is_ignored(self):
        self.assertEqual(update_history(['a'], '   ', 8), ['a'])


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.json"
        self.config_manager = ConfigManager(str(self.config_path))

    def tearDown(self):
        if Path(self.temp_dir).exists():
            shutil.rmtree(self.temp_dir)

    def test_create_default_config(self):
        config = self.config_manager.load_config()

        self.assertIsInstance(config, AppConfig)
        self.assertIsInstance(config.ui, UISettings)
        self.assertEqual(config.ui.window_width, UIConstants.WINDOW_WIDTH)
        self.assertEqual(config.ui.layout_mode, 'auto')
        self.assertEqual(config.browser.last_url, BrowserConstants.DEFAULT_URL)
        self.assertEqual(config.browser.last_user_agent, '')
        self.assertEqual(config.history.url_history, [])

    def test_save_and_load_config(self):
        config = self.config_manager.load_config()
        config.ui.window_width = 1600
        config.ui.layout_mode = 'compact'
        self.config_manager.save_config(config)

        loaded_config = ConfigManager(str(self.config_path)).load_config()

        self.assertEqual(loaded_config.ui.window_width, 1600)
        self.assertEqual(loaded_config.ui.layout_mode, 'compact')

    def test_config_validation(self):
        invalid_config = {
            "ui": {"window_width": 10, "layout_mode": "tablet", "font_size": 99, "unknown_key": 1},
            "browser": {"last_url": "", "last_user_agent": 5},
            "history": {"url_history": ["a", "a", "", 3, "b"]},
            "logging": {"log_level": "verbose"},
        }
        with open(self.config_path, 'w') as f:
            json.dump(invalid_config, f)

        config = self.config_manager.load_config()

        self.assertEqual(config.ui.window_width, UIConstants.WINDOW_WIDTH)
        self.assertEqual(config.ui.layout_mode, 'auto')
        self.assertEqual(config.ui.font_size, UIConstants.LOG_FONT_SIZE)
        self.assertEqual(config.browser.last_url, BrowserConstants.DEFAULT_URL)
        self.assertEqual(config.browser.last_user_agent, '')
        self.assertEqual(config.history.url_history, ['a', 'b'])
        self.assertEqual(config.logging.log_level, 'INFO')

    def test_corrupted_config_falls_back_to_backup(self):
        self.config_manager.record_url('https://first.example')
        self.config_manager.record_url('https://second.example')  # backs up the first save

        with open(self.config_path, 'w') as f:
            f.write('{broken json')

        config = ConfigManager(str(self.config_path)).load_config()
        self.assertEqual(config.browser.last_url, 'https://first.example')

    def test_corrupted_config_without_backup_uses_defaults(self):
        with open(self.config_path, 'w') as f:
            f.write('[]')

        config = self.config_manager.load_config()
        self.assertEqual(config.browser.last_url, BrowserConstants.DEFAULT_URL)

    def test_record_url_updates_last_url_and_history(self):
        for index in range(10):
            self.config_manager.record_url(f'https://site{index}.example')
        history = self.config_manager.record_url('https://site5.example')

        self.assertEqual(len(history), HistoryConstants.URL_HISTORY_LIMIT)
        self.assertEqual(history[0], 'https://site5.example')
        self.assertEqual(history.count('https://site5.example'), 1)
        self.assertEqual(self.config_manager.get_browser_settings().last_url, 'https://site5.example')

    def test_record_user_agent_blank_keeps_history(self):
        self.config_manager.record_user_agent('Agent A')
        history = self.config_manager.record_user_agent('')

        self.assertEqual(history, ['Agent A'])
        self.assertEqual(self.config_manager.get_browser_settings().last_user_agent, '')

    def test_script_history_capped_at_twelve(self):
        for index in range(15):
            self.config_manager.record_script(f'console.log({index})')
        history = self.config_manager.get_history_settings().script_history

        self.assertEqual(len(history), HistoryConstants.SCRIPT_HISTORY_LIMIT)
        self.assertEqual(history[0], 'console.log(14)')

    def test_history_persists_between_managers(self):
        self.config_manager.record_script('document.title')
        reloaded = ConfigManager(str(self.config_path))
        self.assertEqual(reloaded.get_history_settings().script_history, ['document.title'])

    def test_update_ui_settings_ignores_unknown_keys(self):
        self.config_manager.update_ui_settings(window_x=42, bogus=True)
        self.assertEqual(self.config_manager.get_ui_settings().window_x, 42)
        self.assertFalse(hasattr(self.config_manager.get_ui_settings(), 'bogus'))

    def test_reset_to_defaults(self):
        self.config_manager.record_url('https://example.org')
        self.config_manager.reset_to_defaults()
        self.assertEqual(self.config_manager.get_history_settings().url_history, [])


if __name__ == '__main__':
    unittest.main()
