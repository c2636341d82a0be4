"""Entry point for the WebView Inspector PyQt application."""

import sys

from PyQt6.QtWidgets import QApplication

from config.config_manager import ConfigManager
from config.constants import ApplicationConstants
from ui.error_handler import ErrorCode, ErrorHandler, setup_exception_hook
from ui.inspector_window import InspectorWindow
from utils import common

__all__ = [
    "InspectorWindow",
    "main",
]


def _import_web_engine() -> bool:
    """Load QtWebEngine, which has to happen before the QApplication exists."""
    try:
        import ui.web_view_host  # noqa: F401
    except ImportError as exc:
        ErrorHandler().handle_error(ErrorCode.WEB_ENGINE_UNAVAILABLE, exception=exc)
        return False
    return True


def main() -> None:
    """Main application entry point."""
    config_manager = ConfigManager()
    common.set_log_level(config_manager.get_logging_settings().log_level)
    logger = common.get_logger('webview_inspector')

    if not _import_web_engine():
        sys.exit(1)

    app = QApplication(sys.argv)
    app.setApplicationName(ApplicationConstants.APP_NAME)
    app.setApplicationVersion(ApplicationConstants.APP_VERSION)

    window = InspectorWindow(config_manager=config_manager)
    setup_exception_hook(window.error_handler)
    window.show()
    logger.info('%s v%s started', ApplicationConstants.APP_NAME, ApplicationConstants.APP_VERSION)
    window.load_current()

    sys.exit(app.exec())


if __name__ == "__main__":  # pragma: no cover
    main()
