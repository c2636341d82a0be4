#!/usr/bin/env python3
"""Tests for the host-side error handler."""

import os
import sys
import unittest

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from PyQt6.QtWidgets import QApplication, QWidget

from ui.error_handler import (
    ERROR_TEMPLATES,
    ErrorCode,
    ErrorHandler,
    ErrorLevel,
    format_error_message,
)


class ErrorHandlerTest(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QApplication.instance() or QApplication([])

    def setUp(self):
        self.dialogs = []
        self.emitted = []

    def _make_handler(self, parent=None):
        handler = ErrorHandler(parent, dialog_fn=lambda widget, info: self.dialogs.append((widget, info)))
        handler.error_occurred.connect(self.emitted.append)
        return handler

    def test_template_is_copied_with_details(self):
        handler = self._make_handler()
        info = handler.handle_error(ErrorCode.EXPORT_FAILED, details='/readonly/logs.txt')

        self.assertEqual(info.message, 'Failed to export logs')
        self.assertEqual(info.details, '/readonly/logs.txt')
        self.assertIsNone(ERROR_TEMPLATES[ErrorCode.EXPORT_FAILED].details)
        self.assertEqual(self.emitted, [info])
        self.assertEqual(handler.error_count, 1)

    def test_code_without_template_uses_generic_message(self):
        handler = self._make_handler()
        info = handler.handle_error(ErrorCode.UNKNOWN_ERROR)
        self.assertEqual(info.level, ErrorLevel.ERROR)
        self.assertIn('UNKNOWN_ERROR', info.message)

    def test_exception_adds_traceback_for_errors(self):
        handler = self._make_handler()
        try:
            raise PermissionError('denied')
        except PermissionError as exc:
            info = handler.handle_exception(exc, 'writing export')

        self.assertEqual(info.code, ErrorCode.FILE_PERMISSION_DENIED)
        self.assertEqual(info.details, 'writing export')
        self.assertTrue(info.technical_info.startswith('PermissionError: denied'))
        self.assertIn('Traceback', info.technical_info)

    def test_warning_keeps_short_technical_info(self):
        handler = self._make_handler()
        info = handler.handle_error(ErrorCode.CONFIG_SAVE_FAILED, exception=TypeError('bad value'))
        self.assertEqual(info.technical_info, 'TypeError: bad value')

    def test_exception_mapping(self):
        self.assertEqual(ErrorHandler._map_exception_to_error_code(OSError('x')), ErrorCode.EXPORT_FAILED)
        self.assertEqual(ErrorHandler._map_exception_to_error_code(ValueError('x')), ErrorCode.UNKNOWN_ERROR)

    def test_custom_handler_is_invoked(self):
        handler = self._make_handler()
        seen = []
        handler.register_error_handler(ErrorCode.EXPORT_FAILED, lambda info, ctx: seen.append((info.code, ctx)))

        handler.handle_error(ErrorCode.EXPORT_FAILED, context={'path': 'x'})
        self.assertEqual(seen, [(ErrorCode.EXPORT_FAILED, {'path': 'x'})])

    def test_failing_custom_handler_does_not_propagate(self):
        handler = self._make_handler()

        def broken(info, ctx):
            raise RuntimeError('handler broke')

        handler.register_error_handler(ErrorCode.EXPORT_FAILED, broken)
        info = handler.handle_error(ErrorCode.EXPORT_FAILED)
        self.assertEqual(info.code, ErrorCode.EXPORT_FAILED)

    def test_dialog_shown_only_with_parent(self):
        self._make_handler().handle_error(ErrorCode.EXPORT_FAILED)
        self.assertEqual(self.dialogs, [])

        parent = QWidget()
        self.addCleanup(parent.deleteLater)
        info = self._make_handler(parent).handle_error(ErrorCode.EXPORT_FAILED)
        self.assertEqual(self.dialogs, [(parent, info)])

    def test_format_error_message_includes_suggestion(self):
        info = ERROR_TEMPLATES[ErrorCode.EXPORT_FAILED]
        text = format_error_message(info)
        self.assertTrue(text.startswith('Failed to export logs'))
        self.assertIn('Suggestion: Choose a writable location', text)


if __name__ == '__main__':
    unittest.main()
