"""Side-effecting actions triggered from the interface.

Each handler takes the :class:`AppState` explicitly, talks to one
collaborator synchronously and reports the outcome through the status
popup. Collaborator failures (:class:`GitError`, :class:`LLMError`) are
turned into status text here and never propagate to the event loop.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from commit_wizard.diff.diff_extractor import extract_diffs, join_diffs
from commit_wizard.llm.ai_client import LLMError
from commit_wizard.llm.commit_message_generator import CommitMessageGenerator
from commit_wizard.tui.state import AppState, Panel
from commit_wizard.vcs.git_client import GitClient, GitError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def _body_lines_from_text(body: Optional[str]) -> List[str]:
    lines: List[str] = []
    for line in (body or "").splitlines():
        trimmed = line.strip()
        if trimmed.startswith("- "):
            trimmed = trimmed[2:].strip()
        elif trimmed == "-":
            continue
        if trimmed:
            lines.append(trimmed)
    return lines


def handle_edit(state: AppState) -> None:
    """Open the editor on the selected group's full message."""
    group = state.selected_group()
    if group is None:
        return
    if group.committed:
        state.set_status("✗ Cannot edit a group that is already committed")
        return
    state.open_editor(group.full_message())


def apply_editor_text(state: AppState) -> None:
    """Copy the saved editor text into the selected group."""
    group = state.selected_group()
    if group is None:
        return
    group.set_from_commit_text(state.editor.text)
    state.commit_message_scroll_offset = 0
    state.set_status("✓ Updated commit message from editor")


def handle_diff(state: AppState, git_client: GitClient) -> None:
    """Show the staged diff of the selected file."""
    if state.active_panel is not Panel.FILES:
        state.set_status("ℹ Switch to the Files panel (Tab) to view a diff")
        return
    changed = state.selected_file()
    if changed is None:
        state.set_status("ℹ No file selected")
        return
    group = state.selected_group()
    try:
        diff = git_client.get_file_diff(changed.path)
    except GitError as exc:
        logger.error("Failed to read diff for %s: %s", changed.path, exc)
        state.set_status(f"✗ Failed to read diff: {exc}")
        return
    if not diff.strip():
        state.set_status(f"ℹ No staged changes for {changed.path}")
        return
    state.open_diff(changed.path, diff)
    if group is not None and group.committed:
        state.set_status("ℹ This group is already committed; showing its last staged diff")


def handle_ai_generate(
    state: AppState,
    generator: Optional[CommitMessageGenerator],
    git_client: GitClient,
    ai_enabled: bool,
    redraw: Optional[Callable[[], None]] = None,
) -> None:
    """Replace the selected group's description and body with an AI answer.

    The call blocks until the model answers or its request times out.
    ``redraw`` is called once beforehand so that the progress message is
    visible while waiting.
    """
    if not ai_enabled or generator is None:
        state.set_status("✗ AI mode not enabled. Set GITHUB_TOKEN or OPENAI_API_KEY and run without --no-ai.")
        return
    group = state.selected_group()
    if group is None:
        return
    if group.committed:
        state.set_status("✗ Cannot regenerate the message of a committed group")
        return

    state.set_status("🤖 Generating commit message with AI...")
    if redraw is not None:
        redraw()

    files = list(group.files)
    diff = join_diffs(extract_diffs(git_client, files))
    try:
        description, body = generator.generate_commit_message(group, files, diff)
    except LLMError as exc:
        logger.error("AI generation failed: %s", exc)
        state.set_status(f"✗ AI generation failed: {exc}. Check GITHUB_TOKEN.")
        return

    group.description = description
    group.body_lines = _body_lines_from_text(body)
    state.commit_message_scroll_offset = 0
    state.set_status("✓ AI generated commit message successfully")


def handle_commit(state: AppState, git_client: GitClient) -> None:
    """Commit the selected group."""
    group = state.selected_group()
    if group is None:
        return
    if group.committed:
        state.set_status("ℹ This group is already committed")
        return
    try:
        git_client.commit_group(group)
    except GitError as exc:
        logger.error("Commit failed for '%s': %s", group.header(), exc)
        state.set_status(f"✗ Commit failed: {exc}")
        return
    group.committed = True
    state.set_status("✓ Committed selected group successfully")


def handle_commit_all(state: AppState, git_client: GitClient) -> None:
    """Commit every uncommitted group in order, stopping at the first failure.

    Groups committed before a failure stay committed; nothing is rolled
    back or retried.
    """
    pending = [(idx, group) for idx, group in enumerate(state.groups) if not group.committed]
    if not pending:
        state.set_status("ℹ All groups are already committed")
        return

    committed_now = 0
    for idx, group in pending:
        try:
            git_client.commit_group(group)
        except GitError as exc:
            logger.error("Commit all stopped at group %d ('%s'): %s", idx + 1, group.header(), exc)
            state.set_status(
                f"✗ Failed to commit all: group {idx + 1} ({group.header()}) failed: {exc}\n"
                f"{committed_now} group(s) committed before the failure; "
                f"{len(pending) - committed_now} left uncommitted."
            )
            return
        group.committed = True
        committed_now += 1
    state.set_status("✓ Successfully committed all groups")
