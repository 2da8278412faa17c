import json
import unittest
from types import SimpleNamespace
from unittest.mock import patch

from commit_wizard.grouping.group_model import ChangedFile, ChangeGroup, CommitType
from commit_wizard.llm.ai_client import ChatClient
from commit_wizard.llm.commit_message_generator import CommitMessageGenerator
from commit_wizard.tui.app import handle_key
from commit_wizard.tui.state import AppState, Overlay, Panel


class DummyGitClient:
    def __init__(self):
        self.committed = []

    def get_file_diff(self, path):
        return "\n".join(f"+line {i}" for i in range(30)) + "\n"

    def commit_group(self, group):
        self.committed.append(group.header())
        return "ok"


class DummyResponse(SimpleNamespace):
    def json(self):
        return json.loads(self.text)


def make_state():
    return AppState(
        [
            ChangeGroup(commit_type=CommitType.FEAT, scope="api", files=[ChangedFile("api/a.py")], description="add api"),
            ChangeGroup(commit_type=CommitType.DOCS, files=[ChangedFile("README.md")], description="update readme"),
        ]
    )


def press(state, *keys, client=None):
    client = client or DummyGitClient()
    return [handle_key(state, key, client) for key in keys]


class TestNormalMode(unittest.TestCase):
    def test_quit_keys(self) -> None:
        self.assertTrue(handle_key(make_state(), "q", DummyGitClient()))
        self.assertTrue(handle_key(make_state(), "ESC", DummyGitClient()))

    def test_navigation_keys(self) -> None:
        state = make_state()
        press(state, "j")
        self.assertEqual(state.selected_index, 1)
        press(state, "k", "k")
        self.assertEqual(state.selected_index, 1)
        press(state, "TAB", "TAB")
        self.assertIs(state.active_panel, Panel.FILES)
        press(state, "BACKTAB")
        self.assertIs(state.active_panel, Panel.COMMIT_MESSAGE)

    def test_unbound_keys_are_ignored(self) -> None:
        state = make_state()
        self.assertEqual(press(state, "x", "DELETE"), [False, False])
        self.assertIs(state.overlay, Overlay.NONE)

    def test_commit_keys(self) -> None:
        state = make_state()
        client = DummyGitClient()
        press(state, "c", client=client)
        self.assertEqual(client.committed, ["feat(api): add api"])
        press(state, "ENTER", "C", client=client)
        self.assertEqual(state.committed_count(), 2)

    def test_ai_key_without_ai(self) -> None:
        state = make_state()
        press(state, "a")
        self.assertIn("AI mode not enabled", state.status_message)

    def test_ai_key_with_malformed_answer_reports_failure(self) -> None:
        generator = CommitMessageGenerator(ChatClient(api_url="https://models.invalid", token="t", model="m"))
        for body in ({"choices": {"a": 1}}, {"choices": ["oops"]}):
            with self.subTest(body=body):
                state = make_state()
                answer = DummyResponse(status_code=200, text=json.dumps(body))
                with patch("requests.post", return_value=answer):
                    quit_requested = handle_key(state, "a", DummyGitClient(), generator, True)
                self.assertFalse(quit_requested)
                self.assertIs(state.overlay, Overlay.POPUP)
                self.assertTrue(state.status_message.startswith("✗ AI generation failed"))
                self.assertEqual(state.groups[0].description, "add api")


class TestPopup(unittest.TestCase):
    def test_popup_captures_keys(self) -> None:
        state = make_state()
        state.set_status("line 1\nline 2")
        self.assertEqual(press(state, "j", "q"), [False, False])
        self.assertEqual(state.selected_index, 0)
        self.assertEqual(state.popup_scroll_offset, 1)
        press(state, "ESC")
        self.assertIs(state.overlay, Overlay.NONE)

    def test_ctrl_l_clears_status(self) -> None:
        state = make_state()
        state.status_message = "stale"
        press(state, "CTRL_L")
        self.assertEqual(state.status_message, "")


class TestEditorFlow(unittest.TestCase):
    def test_edit_and_save(self) -> None:
        state = make_state()
        press(state, "e")
        self.assertIs(state.overlay, Overlay.EDITOR)
        self.assertEqual(press(state, "s", "q"), [False, False])
        press(state, "CTRL_S")
        self.assertEqual(state.groups[0].description, "add apisq")
        self.assertIs(state.overlay, Overlay.POPUP)
        self.assertEqual(state.status_message, "✓ Updated commit message from editor")

    def test_edit_and_cancel(self) -> None:
        state = make_state()
        press(state, "e", "x", "ESC")
        self.assertEqual(state.groups[0].description, "add api")
        self.assertIs(state.overlay, Overlay.NONE)

    def test_help_from_editor(self) -> None:
        state = make_state()
        press(state, "e", "F1")
        self.assertIs(state.overlay, Overlay.HELP)
        press(state, "x")
        self.assertIs(state.overlay, Overlay.HELP)
        press(state, "ESC")
        self.assertIs(state.overlay, Overlay.EDITOR)
        self.assertEqual(state.editor.text, "feat(api): add api")


class TestDiffFlow(unittest.TestCase):
    def test_open_scroll_close(self) -> None:
        state = make_state()
        press(state, "TAB", "TAB", "d")
        self.assertIs(state.overlay, Overlay.DIFF)
        press(state, "PAGE_DOWN", "j")
        self.assertEqual(state.diff_scroll_offset, 11)
        press(state, "PAGE_UP", "PAGE_UP")
        self.assertEqual(state.diff_scroll_offset, 0)
        self.assertFalse(handle_key(state, "q", DummyGitClient()))
        press(state, "ESC")
        self.assertIs(state.overlay, Overlay.NONE)


if __name__ == "__main__":
    unittest.main()
