"""Dialog for composing a script to evaluate in the inspected page."""

from __future__ import annotations

from typing import List, Optional, Sequence

from PyQt6.QtGui import QFont
from PyQt6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QLabel,
    QPlainTextEdit,
    QVBoxLayout,
)

from modules.weblog.inputs import normalize_quotes, shorten

SAMPLE_SCRIPT = 'document.title'


class ScriptInjectDialog(QDialog):
    """Editor with recent-script history; accepted only with non-blank text."""

    def __init__(self, history: Sequence[str] = (), initial_script: str = '', parent=None):
        super().__init__(parent)
        self.setWindowTitle("Inject JavaScript")
        self.setModal(True)
        self.setMinimumSize(520, 360)
        self._history: List[str] = list(history)
        self._result_script: Optional[str] = None

        self._build_ui(initial_script)

    def _build_ui(self, initial_script: str) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(10)

        desc = QLabel("The script runs in the page; its result or error is written to the console log.")
        desc.setWordWrap(True)
        desc.setStyleSheet("color: #888; font-size: 12px;")
        layout.addWidget(desc)

        self.history_combo = QComboBox()
        self.history_combo.addItem("Recent scripts", None)
        for script in self._history:
            self.history_combo.addItem(shorten(script.replace('\n', ' '), 60, 56), script)
        self.history_combo.setEnabled(bool(self._history))
        self.history_combo.currentIndexChanged.connect(self._on_history_selected)
        layout.addWidget(self.history_combo)

        self.editor = QPlainTextEdit()
        self.editor.setPlaceholderText(SAMPLE_SCRIPT)
        font = QFont('Monospace')
        font.setStyleHint(QFont.StyleHint.TypeWriter)
        self.editor.setFont(font)
        self.editor.setPlainText(initial_script)
        layout.addWidget(self.editor, stretch=1)

        self.buttons = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel
        )
        self.run_button = self.buttons.button(QDialogButtonBox.StandardButton.Ok)
        self.run_button.setText("Run")
        self.buttons.accepted.connect(self._handle_accept)
        self.buttons.rejected.connect(self.reject)
        layout.addWidget(self.buttons)

        self.editor.textChanged.connect(self._update_run_state)
        self._update_run_state()

    def _on_history_selected(self, index: int) -> None:
        script = self.history_combo.itemData(index)
        if script:
            self.editor.setPlainText(script)

    def _update_run_state(self) -> None:
        self.run_button.setEnabled(bool(self.editor.toPlainText().strip()))

    def _handle_accept(self) -> None:
        script = normalize_quotes(self.editor.toPlainText()).strip()
        if not script:
            return
        self._result_script = script
        self.accept()

    def get_script(self) -> Optional[str]:
        """Return the script to run, or None if the dialog was cancelled."""
        return self._result_script


__all__ = ["ScriptInjectDialog", "SAMPLE_SCRIPT"]
