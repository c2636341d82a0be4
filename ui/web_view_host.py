"""Qt WebEngine shell hosting the inspected page.

The host installs the instrumentation script on every frame, exposes the
bridge object over QWebChannel and forwards the engine's navigation and
dialog callbacks to an ``InspectorSession``.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import QFile, QIODevice, QObject, QUrl, pyqtSignal, pyqtSlot
from PyQt6.QtWebChannel import QWebChannel
from PyQt6.QtWebEngineCore import (
    QWebEngineLoadingInfo,
    QWebEnginePage,
    QWebEngineProfile,
    QWebEngineScript,
)
from PyQt6.QtWebEngineWidgets import QWebEngineView
from PyQt6.QtWidgets import QVBoxLayout, QWidget

from config.constants import BrowserConstants
from modules.weblog.bridge import BRIDGE_NAME
from modules.weblog.instrumentation import build_instrumentation_script
from modules.weblog.session import (
    DialogKind,
    DialogPresenter,
    EvaluationCallback,
    InspectorSession,
    PageDialog,
)
from utils import common

logger = common.get_logger('web_view_host')

QWEBCHANNEL_RESOURCE = ':/qtwebchannel/qwebchannel.js'
INSTRUMENTATION_SCRIPT_NAME = 'webview-inspector-instrumentation'


def read_qwebchannel_library() -> str:
    """Return the qwebchannel.js client bundled with QtWebChannel."""
    resource = QFile(QWEBCHANNEL_RESOURCE)
    if not resource.open(QIODevice.OpenModeFlag.ReadOnly):
        raise RuntimeError(f'Unable to open {QWEBCHANNEL_RESOURCE}')
    try:
        return bytes(resource.readAll()).decode('utf-8')
    finally:
        resource.close()


class WebChannelBridge(QObject):
    """Object published to page script; receives instrumentation messages."""

    message_received = pyqtSignal(str)

    @pyqtSlot(str)
    def postMessage(self, message: str) -> None:  # noqa: N802 (called from JavaScript)
        self.message_received.emit(message)


class InspectorPage(QWebEnginePage):
    """Page that reports navigations and routes JavaScript dialogs."""

    def __init__(
        self,
        profile: QWebEngineProfile,
        session: InspectorSession,
        presenter: DialogPresenter,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(profile, parent)
        self._session = session
        self._presenter = presenter

    def acceptNavigationRequest(self, url: QUrl, nav_type, is_main_frame: bool) -> bool:  # type: ignore[override]
        if is_main_frame:
            method = 'POST' if nav_type == QWebEnginePage.NavigationType.NavigationTypeFormSubmitted else 'GET'
            self._session.handle_navigation_action(url.toString(), method)
        return True

    def javaScriptAlert(self, security_origin: QUrl, msg: str) -> None:  # type: ignore[override]
        self._session.run_dialog(PageDialog(DialogKind.ALERT, msg or ''), self._presenter)

    def javaScriptConfirm(self, security_origin: QUrl, msg: str) -> bool:  # type: ignore[override]
        result = self._session.run_dialog(PageDialog(DialogKind.CONFIRM, msg or ''), self._presenter)
        return result.accepted

    def javaScriptPrompt(self, security_origin: QUrl, msg: str, default_value: str):  # type: ignore[override]
        dialog = PageDialog(DialogKind.PROMPT, msg or '', default_value or '')
        result = self._session.run_dialog(dialog, self._presenter)
        if not result.accepted or result.text is None:
            return False, ''
        return True, result.text


class WebViewHost(QWidget):
    """Widget wrapping a QWebEngineView wired to an inspector session."""

    history_changed = pyqtSignal()

    def __init__(
        self,
        session: InspectorSession,
        presenter: DialogPresenter,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._session = session

        self.profile = QWebEngineProfile(BrowserConstants.PROFILE_NAME, self)
        self.page = InspectorPage(self.profile, session, presenter, self)
        self.view = QWebEngineView(self)
        self.view.setPage(self.page)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.view)

        self.bridge = WebChannelBridge(self)
        self.bridge.message_received.connect(session.handle_bridge_message)
        self.channel = QWebChannel(self.page)
        self.channel.registerObject(BRIDGE_NAME, self.bridge)
        self.page.setWebChannel(self.channel)

        self._install_instrumentation()

        self.page.loadingChanged.connect(self._on_loading_changed)
        self.view.urlChanged.connect(lambda _url: self.history_changed.emit())

        session.attach_page(self.load, self.evaluate)

    def _install_instrumentation(self) -> None:
        source = build_instrumentation_script(BRIDGE_NAME, prelude=read_qwebchannel_library())
        script = QWebEngineScript()
        script.setName(INSTRUMENTATION_SCRIPT_NAME)
        script.setSourceCode(source)
        script.setInjectionPoint(QWebEngineScript.InjectionPoint.DocumentCreation)
        script.setWorldId(QWebEngineScript.ScriptWorldId.MainWorld)
        script.setRunsOnSubFrames(True)
        self.page.scripts().insert(script)
        logger.debug('Installed instrumentation script (%d chars)', len(source))

    # ------------------------------------------------------------------
    # Page driver
    # ------------------------------------------------------------------
    def load(self, url: str, user_agent: Optional[str]) -> None:
        # An empty agent restores the engine default.
        self.profile.setHttpUserAgent(user_agent or '')
        self.view.load(QUrl(url))

    def evaluate(self, source: str, callback: EvaluationCallback) -> None:
        self.page.runJavaScript(source, callback)

    def user_agent(self) -> str:
        return self.profile.httpUserAgent()

    # ------------------------------------------------------------------
    # Navigation controls
    # ------------------------------------------------------------------
    def can_go_back(self) -> bool:
        return self.view.history().canGoBack()

    def can_go_forward(self) -> bool:
        return self.view.history().canGoForward()

    def back(self) -> None:
        self.view.back()

    def forward(self) -> None:
        self.view.forward()

    def reload(self) -> None:
        self.view.reload()

    def stop(self) -> None:
        self.view.stop()

    # ------------------------------------------------------------------
    # Engine callbacks
    # ------------------------------------------------------------------
    def _on_loading_changed(self, info: QWebEngineLoadingInfo) -> None:
        url = info.url().toString()
        status = info.status()
        if status == QWebEngineLoadingInfo.LoadStatus.LoadStartedStatus:
            self._session.handle_load_started(url)
        elif status == QWebEngineLoadingInfo.LoadStatus.LoadSucceededStatus:
            self._session.handle_navigation_response(url)
            self._session.handle_load_finished(url)
        elif status == QWebEngineLoadingInfo.LoadStatus.LoadFailedStatus:
            http_status = None
            if info.errorDomain() == QWebEngineLoadingInfo.ErrorDomain.HttpStatusCodeDomain:
                http_status = info.errorCode()
            self._session.handle_load_failed(info.errorString(), url, http_status)
        else:
            self._session.handle_load_finished(url)
        self.history_changed.emit()


__all__ = [
    'InspectorPage',
    'WebChannelBridge',
    'WebViewHost',
    'read_qwebchannel_library',
]
