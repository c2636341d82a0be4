"""Configuration management module for application settings and input history."""

import json
import shutil
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, asdict, field
from pathlib import Path

from config.constants import BrowserConstants, HistoryConstants, UIConstants
from utils import common

logger = common.get_logger('config_manager')

LAYOUT_MODES = ('auto', 'compact', 'regular')


def update_history(values: List[str], value: str, limit: int) -> List[str]:
    """Return ``values`` with ``value`` moved to the front, capped at ``limit``.

    Blank values leave the history unchanged.
    """
    trimmed = value.strip()
    if not trimmed:
        return list(values)
    updated = [item for item in values if item != trimmed]
    updated.insert(0, trimmed)
    return updated[:limit]


def _clean_history(values: Any, limit: int) -> List[str]:
    """Drop non-string, blank and duplicate items from a loaded history."""
    if not isinstance(values, list):
        return []
    cleaned: List[str] = []
    for item in values:
        if not isinstance(item, str):
            continue
        trimmed = item.strip()
        if trimmed and trimmed not in cleaned:
            cleaned.append(trimmed)
    return cleaned[:limit]


@dataclass
class UISettings:
    """UI configuration settings."""
    window_width: int = UIConstants.WINDOW_WIDTH
    window_height: int = UIConstants.WINDOW_HEIGHT
    window_x: int = 100
    window_y: int = 100
    layout_mode: str = 'auto'
    font_size: int = UIConstants.LOG_FONT_SIZE
    show_log_panel: bool = True


@dataclass
class BrowserSettings:
    """Last used page address and device identity."""
    last_url: str = BrowserConstants.DEFAULT_URL
    last_user_agent: str = ''


@dataclass
class HistorySettings:
    """Most-recently-used input histories, newest first."""
    url_history: List[str] = field(default_factory=list)
    user_agent_history: List[str] = field(default_factory=list)
    script_history: List[str] = field(default_factory=list)


@dataclass
class LoggingSettings:
    """Logging configuration."""
    log_level: str = 'INFO'


@dataclass
class AppConfig:
    """Main application configuration."""
    ui: UISettings
    browser: BrowserSettings
    history: HistorySettings
    logging: LoggingSettings
    version: str = "1.0.0"


class ConfigManager:
    """Manages application configuration persistence and validation."""

    DEFAULT_CONFIG_PATH = '~/.webview_inspector_config.json'
    BACKUP_SUFFIX = '.backup.json'

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path or self.DEFAULT_CONFIG_PATH).expanduser()
        self.backup_path = self.config_path.with_name(self.config_path.stem + self.BACKUP_SUFFIX)
        self._config: Optional[AppConfig] = None
        self._ensure_config_dir()

    def _ensure_config_dir(self):
        """Ensure configuration directory exists."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

    def _create_default_config(self) -> AppConfig:
        """Create default configuration."""
        return AppConfig(
            ui=UISettings(),
            browser=BrowserSettings(),
            history=HistorySettings(),
            logging=LoggingSettings(),
        )

    def _validate_config(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and clean configuration dictionary."""
        if not isinstance(config_dict, dict):
            raise ValueError('Configuration root must be an object')

        default_config = asdict(self._create_default_config())

        # Merge with defaults for missing keys
        def merge_dict(default: Dict, user: Dict) -> Dict:
            result = default.copy()
            for key, value in user.items():
                if key in result:
                    if isinstance(value, dict) and isinstance(result[key], dict):
                        result[key] = merge_dict(result[key], value)
                    else:
                        result[key] = value
            return result

        validated = merge_dict(default_config, config_dict)

        ui_settings = validated.get('ui', {})
        if ui_settings.get('layout_mode') not in LAYOUT_MODES:
            ui_settings['layout_mode'] = 'auto'
            logger.warning('Layout mode invalid, reset to auto')
        for key, minimum, default in (
            ('window_width', UIConstants.WINDOW_MIN_WIDTH, UIConstants.WINDOW_WIDTH),
            ('window_height', UIConstants.WINDOW_MIN_HEIGHT, UIConstants.WINDOW_HEIGHT),
        ):
            value = ui_settings.get(key)
            if not isinstance(value, int) or value < minimum:
                ui_settings[key] = default
                logger.warning('%s out of range, reset to %s', key, default)
        font_size = ui_settings.get('font_size')
        if not isinstance(font_size, int) or not 6 <= font_size <= 32:
            ui_settings['font_size'] = UIConstants.LOG_FONT_SIZE
            logger.warning('Font size out of range, reset to %s', UIConstants.LOG_FONT_SIZE)
        if not isinstance(ui_settings.get('show_log_panel'), bool):
            ui_settings['show_log_panel'] = True

        browser_settings = validated.get('browser', {})
        last_url = browser_settings.get('last_url')
        if not isinstance(last_url, str) or not last_url.strip():
            browser_settings['last_url'] = BrowserConstants.DEFAULT_URL
        if not isinstance(browser_settings.get('last_user_agent'), str):
            browser_settings['last_user_agent'] = ''

        history_settings = validated.get('history', {})
        history_settings['url_history'] = _clean_history(
            history_settings.get('url_history'), HistoryConstants.URL_HISTORY_LIMIT
        )
        history_settings['user_agent_history'] = _clean_history(
            history_settings.get('user_agent_history'), HistoryConstants.USER_AGENT_HISTORY_LIMIT
        )
        history_settings['script_history'] = _clean_history(
            history_settings.get('script_history'), HistoryConstants.SCRIPT_HISTORY_LIMIT
        )

        logging_settings = validated.get('logging', {})
        log_level = str(logging_settings.get('log_level', 'INFO')).upper()
        if log_level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            log_level = 'INFO'
            logger.warning('Log level invalid, reset to INFO')
        logging_settings['log_level'] = log_level

        return validated

    def _config_from_dict(self, validated_dict: Dict[str, Any]) -> AppConfig:
        return AppConfig(
            ui=UISettings(**validated_dict['ui']),
            browser=BrowserSettings(**validated_dict['browser']),
            history=HistorySettings(**validated_dict['history']),
            logging=LoggingSettings(**validated_dict['logging']),
            version=validated_dict.get('version', '1.0.0'),
        )

    def _read_config_file(self, path: Path) -> AppConfig:
        with open(path, 'r', encoding='utf-8') as f:
            config_dict = json.load(f)
        return self._config_from_dict(self._validate_config(config_dict))

    def load_config(self) -> AppConfig:
        """Load configuration from file."""
        if self._config is not None:
            return self._config

        try:
            if self.config_path.exists():
                self._config = self._read_config_file(self.config_path)
                logger.info(f'Configuration loaded from {self.config_path}')
            else:
                self._config = self._create_default_config()
                logger.info('Created default configuration')

        except (OSError, ValueError, TypeError) as e:
            logger.error(f'Failed to load config: {e}')
            # Try backup if available
            if self.backup_path.exists():
                try:
                    logger.info('Attempting to load from backup')
                    self._config = self._read_config_file(self.backup_path)
                    logger.info('Configuration loaded from backup')
                except (OSError, ValueError, TypeError) as backup_error:
                    logger.error(f'Backup config also failed: {backup_error}')
                    self._config = self._create_default_config()
            else:
                self._config = self._create_default_config()

        return self._config

    def save_config(self, config: Optional[AppConfig] = None):
        """Save configuration to file."""
        if config is None:
            config = self._config

        if config is None:
            logger.warning('No configuration to save')
            return

        try:
            # Create backup of existing config
            if self.config_path.exists():
                try:
                    shutil.copy2(self.config_path, self.backup_path)
                except OSError as e:
                    logger.warning(f'Failed to create config backup: {e}')

            config_dict = asdict(config)
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(config_dict, f, indent=4, ensure_ascii=False)

            self._config = config
            logger.debug(f'Configuration saved to {self.config_path}')

        except (OSError, TypeError) as e:
            logger.error(f'Failed to save config: {e}')
            raise

    def get_ui_settings(self) -> UISettings:
        """Get UI settings."""
        return self.load_config().ui

    def get_browser_settings(self) -> BrowserSettings:
        """Get last used URL and user agent."""
        return self.load_config().browser

    def get_history_settings(self) -> HistorySettings:
        """Get input histories."""
        return self.load_config().history

    def get_logging_settings(self) -> LoggingSettings:
        """Get logging settings."""
        return self.load_config().logging

    def update_ui_settings(self, **kwargs):
        """Update UI settings."""
        config = self.load_config()
        for key, value in kwargs.items():
            if hasattr(config.ui, key):
                setattr(config.ui, key, value)
        self.save_config(config)

    # ------------------------------------------------------------------
    # Input history
    # ------------------------------------------------------------------
    def record_url(self, url: str) -> List[str]:
        """Remember ``url`` as the last loaded address and in the URL history."""
        trimmed = url.strip()
        config = self.load_config()
        if not trimmed:
            return list(config.history.url_history)
        config.browser.last_url = trimmed
        config.history.url_history = update_history(
            config.history.url_history, trimmed, HistoryConstants.URL_HISTORY_LIMIT
        )
        self.save_config(config)
        return list(config.history.url_history)

    def record_user_agent(self, user_agent: str) -> List[str]:
        """Remember ``user_agent`` as current; blank means the engine default."""
        trimmed = user_agent.strip()
        config = self.load_config()
        config.browser.last_user_agent = trimmed
        if trimmed:
            config.history.user_agent_history = update_history(
                config.history.user_agent_history, trimmed, HistoryConstants.USER_AGENT_HISTORY_LIMIT
            )
        self.save_config(config)
        return list(config.history.user_agent_history)

    def record_script(self, script: str) -> List[str]:
        """Add an injected script to the script history."""
        config = self.load_config()
        if not script.strip():
            return list(config.history.script_history)
        config.history.script_history = update_history(
            config.history.script_history, script, HistoryConstants.SCRIPT_HISTORY_LIMIT
        )
        self.save_config(config)
        return list(config.history.script_history)

    def reset_to_defaults(self):
        """Reset configuration to defaults."""
        self._config = self._create_default_config()
        self.save_config()
        logger.info('Configuration reset to defaults')
