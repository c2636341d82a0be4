"""Centralised helpers for displaying Qt dialog messages and page dialogs."""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from PyQt6.QtWidgets import QInputDialog, QLineEdit, QMessageBox, QWidget

from modules.weblog.session import DialogKind, DialogResult, PageDialog


DialogCallable = Callable[[Optional[QWidget], str, str], None]
ConfirmCallable = Callable[[Optional[QWidget], str, str], bool]
PromptCallable = Callable[[Optional[QWidget], str, str, str], Tuple[str, bool]]

PAGE_DIALOG_TITLES = {
    DialogKind.ALERT: 'Page Alert',
    DialogKind.CONFIRM: 'Page Confirm',
    DialogKind.PROMPT: 'Page Prompt',
}


def _ask_confirm(parent: Optional[QWidget], title: str, message: str) -> bool:
    answer = QMessageBox.question(
        parent,
        title,
        message,
        QMessageBox.StandardButton.Ok | QMessageBox.StandardButton.Cancel,
    )
    return answer == QMessageBox.StandardButton.Ok


def _ask_text(parent: Optional[QWidget], title: str, message: str, default_text: str) -> Tuple[str, bool]:
    return QInputDialog.getText(parent, title, message, QLineEdit.EchoMode.Normal, default_text)


class DialogManager:
    """Provide consistent wrappers around QMessageBox and QInputDialog APIs."""

    def __init__(
        self,
        window: Optional[QWidget],
        info_fn: Optional[DialogCallable] = None,
        warning_fn: Optional[DialogCallable] = None,
        error_fn: Optional[DialogCallable] = None,
        confirm_fn: Optional[ConfirmCallable] = None,
        prompt_fn: Optional[PromptCallable] = None,
    ) -> None:
        self.window = window
        self._info_fn = info_fn or QMessageBox.information
        self._warning_fn = warning_fn or QMessageBox.warning
        self._error_fn = error_fn or QMessageBox.critical
        self._confirm_fn = confirm_fn or _ask_confirm
        self._prompt_fn = prompt_fn or _ask_text

    def show_info(self, title: str, message: str) -> None:
        self._info_fn(self.window, title, message)

    def show_warning(self, title: str, message: str) -> None:
        self._warning_fn(self.window, title, message)

    def show_error(self, title: str, message: str) -> None:
        self._error_fn(self.window, title, message)

    def present_page_dialog(self, dialog: PageDialog) -> DialogResult:
        """Show a page-originated dialog modally and return the user's answer."""
        title = PAGE_DIALOG_TITLES[dialog.kind]
        if dialog.kind is DialogKind.ALERT:
            self._info_fn(self.window, title, dialog.message)
            return DialogResult(accepted=True)
        if dialog.kind is DialogKind.CONFIRM:
            return DialogResult(accepted=bool(self._confirm_fn(self.window, title, dialog.message)))

        text, ok = self._prompt_fn(self.window, title, dialog.message, dialog.default_text)
        if not ok:
            return DialogResult.dismissed()
        return DialogResult(accepted=True, text=text)


__all__ = ["DialogManager", "PAGE_DIALOG_TITLES"]
