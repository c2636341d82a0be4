"""Application constants and configuration values."""


class UIConstants:
    """UI-related constants."""

    # Window dimensions
    WINDOW_WIDTH = 1280
    WINDOW_HEIGHT = 860
    WINDOW_MIN_WIDTH = 360
    WINDOW_MIN_HEIGHT = 480

    # Below this width the window switches to the compact (phone-like) layout
    COMPACT_BREAKPOINT_PX = 768

    # Debounce for re-rendering log lists while entries stream in
    LOG_REFRESH_DEBOUNCE_MS = 120
    LOG_REFRESH_MAX_WAIT_MS = 400

    LOG_FONT_SIZE = 10
    USER_AGENT_DISPLAY_LIMIT = 42


class LogConstants:
    """Captured log limits."""

    # Entries kept per log (console, requests); oldest are evicted first
    LOG_CAPACITY = 500

    # Application run logs kept on disk; older files are pruned at startup
    LOG_FILES_KEPT = 10


class HistoryConstants:
    """Persisted input history sizes."""

    URL_HISTORY_LIMIT = 8
    USER_AGENT_HISTORY_LIMIT = 8
    SCRIPT_HISTORY_LIMIT = 12


class UserAgentConstants:
    """User-agent presets."""

    DESKTOP = (
        'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36'
    )
    IPHONE = (
        'Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 '
        '(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1'
    )

    PRESETS = {
        'Desktop': DESKTOP,
        'iPhone': IPHONE,
    }


class BrowserConstants:
    """Web view defaults."""

    DEFAULT_URL = 'https://example.com'
    PROFILE_NAME = 'webview_inspector'
    EXPORT_FILENAME = 'webview-logs.txt'


class ApplicationConstants:
    """General application constants."""

    APP_NAME = "WebView Inspector"
    APP_VERSION = "1.0.0"
    APP_DESCRIPTION = "A PyQt6 web view harness that mirrors page console and network activity"

