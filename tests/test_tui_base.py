import unittest

from tui_base import AppError, ErrorSeverity, StatusLog, append_log, format_scroll_indicator, handle_error, scrollbar_thumb


class ScrollIndicatorTests(unittest.TestCase):
    def test_hidden_when_everything_fits(self):
        self.assertEqual(format_scroll_indicator(0, 4, 4), "")

    def test_reports_visible_window(self):
        self.assertEqual(format_scroll_indicator(2, 20, 4), "[3-6/20]")
        self.assertEqual(format_scroll_indicator(16, 20, 4), "[17-20/20]")

    def test_thumb_spans_track(self):
        self.assertEqual(scrollbar_thumb(0, 20, 4), (0, 1))
        self.assertEqual(scrollbar_thumb(16, 20, 4), (3, 1))
        self.assertEqual(scrollbar_thumb(0, 10, 8), (0, 6))
        self.assertEqual(scrollbar_thumb(2, 10, 8), (2, 6))


class StatusLogTests(unittest.TestCase):
    def test_handle_error_records_message(self):
        status = StatusLog()
        with self.assertLogs("tui_base", level="WARNING"):
            message = handle_error(AppError("Ollama unreachable", ErrorSeverity.WARNING), status)
        self.assertEqual(message, "[WARNING] Ollama unreachable")
        self.assertEqual(status.current, message)
        self.assertTrue(status.entries[-1].endswith(message))

    def test_fatal_is_logged_as_error_and_returned(self):
        with self.assertLogs("tui_base", level="ERROR") as logs:
            message = handle_error(AppError("terminal too narrow", ErrorSeverity.FATAL))
        self.assertEqual(message, "[FATAL] terminal too narrow")
        self.assertIn("[FATAL] terminal too narrow", logs.output[0])

    def test_empty_messages_are_ignored(self):
        status = StatusLog()
        append_log(status, "")
        self.assertEqual(len(status.entries), 0)
        self.assertIsNone(status.current)


if __name__ == "__main__":
    unittest.main()
