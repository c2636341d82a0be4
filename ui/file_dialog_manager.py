"""Wrapper around QFileDialog invocations for better testability."""

from __future__ import annotations

import os
from typing import Callable, Optional, Tuple

from PyQt6.QtWidgets import QFileDialog

SaveDialogFn = Callable[[object, str, str, str], Tuple[str, str]]

TEXT_FILE_FILTER = 'Text files (*.txt);;All files (*)'


class FileDialogManager:
    """Provide higher-level helpers around QFileDialog."""

    def __init__(self, save_dialog_fn: Optional[SaveDialogFn] = None) -> None:
        self._save_dialog_fn = save_dialog_fn or QFileDialog.getSaveFileName

    def select_save_path(
        self,
        parent,
        title: str,
        default_name: str,
        directory: Optional[str] = None,
        name_filter: str = TEXT_FILE_FILTER,
    ) -> Optional[str]:
        """Ask for a destination file; returns None when the user cancels."""
        start = os.path.join(directory, default_name) if directory else default_name
        result, _selected_filter = self._save_dialog_fn(parent, title, start, name_filter)
        return result or None


__all__ = ["FileDialogManager", "TEXT_FILE_FILTER"]
