"""Shared Qt setup for the test session.

Qt WebEngine has to be loaded before the first QApplication exists, and
every widget test needs a QApplication rather than a bare QCoreApplication.
"""

import os

import pytest

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
os.environ.setdefault('QTWEBENGINE_CHROMIUM_FLAGS', '--no-sandbox --disable-gpu')
os.environ.setdefault('QTWEBENGINE_DISABLE_SANDBOX', '1')

from PyQt6.QtCore import QCoreApplication, Qt
from PyQt6.QtWidgets import QApplication

try:
    import PyQt6.QtWebEngineCore  # noqa: F401
except ImportError:
    # Runtime instrumentation tests skip themselves without WebEngine.
    pass


@pytest.fixture(scope='session', autouse=True)
def qt_application():
    app = QApplication.instance()
    if app is None:
        QCoreApplication.setAttribute(Qt.ApplicationAttribute.AA_ShareOpenGLContexts)
        app = QApplication([])
    yield app
