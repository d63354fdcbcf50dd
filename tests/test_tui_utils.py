import curses
import unittest

from tui_utils import LineBuffer, yes_no_answer


def type_text(buffer, text):
    for ch in text:
        buffer.handle_key(ord(ch))


class LineBufferTests(unittest.TestCase):
    def test_typing_and_accept(self):
        buffer = LineBuffer()
        type_text(buffer, "llama3")
        self.assertEqual(buffer.text, "llama3")
        self.assertEqual(buffer.handle_key(ord("\n")), "accept")

    def test_escape_cancels(self):
        buffer = LineBuffer.from_text("gemma")
        self.assertEqual(buffer.handle_key(27), "cancel")

    def test_editing_keys(self):
        buffer = LineBuffer.from_text("gemma:2b")
        buffer.handle_key(curses.KEY_BACKSPACE)
        self.assertEqual(buffer.text, "gemma:2")
        buffer.handle_key(curses.KEY_HOME)
        buffer.handle_key(curses.KEY_DC)
        self.assertEqual(buffer.text, "emma:2")
        buffer.handle_key(curses.KEY_RIGHT)
        type_text(buffer, "X")
        self.assertEqual(buffer.text, "eXmma:2")
        buffer.handle_key(21)
        self.assertEqual(buffer.text, "")
        self.assertEqual(buffer.cursor, 0)

    def test_visible_window_follows_cursor(self):
        buffer = LineBuffer.from_text("abcdefghij")
        text, col = buffer.visible(5)
        self.assertTrue("abcdefghij".endswith(text))
        self.assertEqual(text[col - 1], "j")


class YesNoTests(unittest.TestCase):
    def test_answers(self):
        self.assertTrue(yes_no_answer(ord("y"), False))
        self.assertFalse(yes_no_answer(ord("N"), True))
        self.assertFalse(yes_no_answer(27, True))
        self.assertTrue(yes_no_answer(ord("\n"), True))
        self.assertFalse(yes_no_answer(ord("\n"), False))
        self.assertIsNone(yes_no_answer(ord("x"), True))


if __name__ == "__main__":
    unittest.main()
