import unittest

from commit_wizard.tui.editor import CommitMessageEditor, EditorSignal


def type_text(editor: CommitMessageEditor, text: str) -> None:
    for ch in text:
        editor.handle_key(ch)


class TestCommitMessageEditor(unittest.TestCase):
    def setUp(self) -> None:
        self.editor = CommitMessageEditor()
        self.editor.activate("hello\nworld")

    def test_activate_puts_cursor_at_end(self) -> None:
        self.assertTrue(self.editor.is_active)
        self.assertEqual((self.editor.cursor_row, self.editor.cursor_col), (1, 5))

    def test_typing_and_newline(self) -> None:
        type_text(self.editor, "!")
        self.editor.handle_key("ENTER")
        type_text(self.editor, "- more")
        self.assertEqual(self.editor.text, "hello\nworld!\n- more")

    def test_backspace_and_delete(self) -> None:
        self.editor.handle_key("BACKSPACE")
        self.assertEqual(self.editor.text, "hello\nworl")
        self.editor.handle_key("HOME")
        self.editor.handle_key("DELETE")
        self.assertEqual(self.editor.text, "hello\norl")

    def test_line_kill_keys(self) -> None:
        self.editor.handle_key("LEFT")
        self.editor.handle_key("LEFT")
        self.editor.handle_key("CTRL_K")
        self.assertEqual(self.editor.text, "hello\nwor")
        self.editor.handle_key("CTRL_U")
        self.assertEqual(self.editor.text, "hello\n")

    def test_cursor_movement(self) -> None:
        self.editor.handle_key("CTRL_A")
        self.editor.handle_key("UP")
        self.assertEqual((self.editor.cursor_row, self.editor.cursor_col), (0, 0))
        self.editor.handle_key("END")
        self.assertEqual(self.editor.cursor_col, 5)
        self.editor.handle_key("PAGE_DOWN")
        self.assertEqual(self.editor.cursor_row, 1)
        self.editor.handle_key("PAGE_UP")
        self.assertEqual(self.editor.cursor_row, 0)

    def test_tab_inserts_spaces(self) -> None:
        self.editor.handle_key("TAB")
        self.assertEqual(self.editor.text, "hello\nworld    ")

    def test_unknown_tokens_are_ignored(self) -> None:
        self.assertIs(self.editor.handle_key("CTRL_L"), EditorSignal.CONTINUE)
        self.assertIs(self.editor.handle_key("F1"), EditorSignal.CONTINUE)
        self.assertEqual(self.editor.text, "hello\nworld")

    def test_save(self) -> None:
        type_text(self.editor, "s")
        self.assertIs(self.editor.handle_key("CTRL_S"), EditorSignal.SAVE)
        self.assertFalse(self.editor.is_active)
        self.assertEqual(self.editor.text, "hello\nworlds")

    def test_cancel_restores_original(self) -> None:
        type_text(self.editor, "xyz")
        self.assertIs(self.editor.handle_key("CTRL_C"), EditorSignal.CANCEL)
        self.assertFalse(self.editor.is_active)
        self.assertEqual(self.editor.text, "hello\nworld")

    def test_escape_cancels(self) -> None:
        type_text(self.editor, "xyz")
        self.assertIs(self.editor.handle_key("ESC"), EditorSignal.CANCEL)
        self.assertEqual(self.editor.text, "hello\nworld")


if __name__ == "__main__":
    unittest.main()
