"""Application state of the interactive interface.

:class:`AppState` owns the list of change groups and every cursor, scroll
offset and overlay the interface needs. It is passed explicitly to the
key dispatcher, the action handlers and the renderer; nothing else keeps
a reference to it.

Only one overlay captures input at a time. Overlays are modelled as a
single :class:`Overlay` value instead of separate flags, so for example
the diff viewer and the editor can never be open together. A status
message that arrives while another overlay is open stays pending and is
shown as a popup once that overlay closes.
"""

from __future__ import annotations

import enum
import logging
from typing import List, Optional

from commit_wizard.grouping.group_model import ChangedFile, ChangeGroup
from commit_wizard.grouping.validation import validate_no_duplicate_files
from commit_wizard.tui.editor import CommitMessageEditor


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class Panel(enum.Enum):
    """The three always visible regions, in Tab order."""

    GROUPS = "groups"
    COMMIT_MESSAGE = "commit_message"
    FILES = "files"

    def next(self) -> "Panel":
        members = list(Panel)
        return members[(members.index(self) + 1) % len(members)]

    def previous(self) -> "Panel":
        members = list(Panel)
        return members[(members.index(self) - 1) % len(members)]


class Overlay(enum.Enum):
    """The modal layer that currently captures input."""

    NONE = "none"
    POPUP = "popup"
    EDITOR = "editor"
    DIFF = "diff"
    HELP = "help"


class AppState:
    """Mutable state of one interactive session.

    Parameters
    ----------
    groups : List[ChangeGroup]
        The groups to work on. They must not share files.

    Raises
    ------
    DuplicateFileError
        If a file path appears in more than one group.
    """

    def __init__(self, groups: List[ChangeGroup]) -> None:
        validate_no_duplicate_files(groups)
        self.groups = groups
        self.selected_index = 0
        self.active_panel = Panel.GROUPS
        self.selected_file_index = 0
        self.commit_message_scroll_offset = 0
        self.editor = CommitMessageEditor()
        self.overlay = Overlay.NONE
        self.status_message = ""
        self.popup_scroll_offset = 0
        self.diff_file_path: Optional[str] = None
        self.diff_content = ""
        self.diff_scroll_offset = 0

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------
    @property
    def popup_active(self) -> bool:
        return self.overlay is Overlay.POPUP

    @property
    def show_diff_viewer(self) -> bool:
        return self.overlay is Overlay.DIFF

    @property
    def show_editor_help(self) -> bool:
        return self.overlay is Overlay.HELP

    def selected_group(self) -> Optional[ChangeGroup]:
        if not self.groups:
            return None
        return self.groups[self.selected_index]

    def selected_file(self) -> Optional[ChangedFile]:
        group = self.selected_group()
        if group is None or not group.files:
            return None
        if self.selected_file_index >= len(group.files):
            return None
        return group.files[self.selected_file_index]

    def committed_count(self) -> int:
        return sum(1 for group in self.groups if group.committed)

    # ------------------------------------------------------------------
    # Panel navigation
    # ------------------------------------------------------------------
    def next_panel(self) -> None:
        self.active_panel = self.active_panel.next()

    def previous_panel(self) -> None:
        self.active_panel = self.active_panel.previous()

    def _select_group(self, index: int) -> None:
        self.selected_index = index
        self.selected_file_index = 0
        self.commit_message_scroll_offset = 0

    def move_down(self) -> None:
        if self.active_panel is Panel.GROUPS:
            if self.groups:
                self._select_group((self.selected_index + 1) % len(self.groups))
        elif self.active_panel is Panel.COMMIT_MESSAGE:
            self.scroll_commit_message(1)
        else:
            group = self.selected_group()
            if group is not None and group.files:
                self.selected_file_index = (self.selected_file_index + 1) % len(group.files)

    def move_up(self) -> None:
        if self.active_panel is Panel.GROUPS:
            if self.groups:
                self._select_group((self.selected_index - 1) % len(self.groups))
        elif self.active_panel is Panel.COMMIT_MESSAGE:
            self.scroll_commit_message(-1)
        else:
            group = self.selected_group()
            if group is not None and group.files:
                self.selected_file_index = (self.selected_file_index - 1) % len(group.files)

    def scroll_commit_message(self, delta: int) -> None:
        group = self.selected_group()
        line_count = len(group.full_message().splitlines()) if group is not None else 0
        max_offset = max(0, line_count - 1)
        self.commit_message_scroll_offset = min(max_offset, max(0, self.commit_message_scroll_offset + delta))

    # ------------------------------------------------------------------
    # Status popup
    # ------------------------------------------------------------------
    def set_status(self, message: str) -> None:
        """Show ``message`` in the popup.

        The popup opens right away unless another overlay is open, in which
        case it opens when that overlay closes.
        """
        self.status_message = message
        self.popup_scroll_offset = 0
        if self.overlay is Overlay.NONE:
            self.overlay = Overlay.POPUP
        logger.info("Status: %s", message)

    def close_popup(self) -> None:
        self.status_message = ""
        self.popup_scroll_offset = 0
        if self.overlay is Overlay.POPUP:
            self.overlay = Overlay.NONE

    def scroll_popup(self, delta: int) -> None:
        max_offset = max(0, len(self.status_message.splitlines()) - 1)
        self.popup_scroll_offset = min(max_offset, max(0, self.popup_scroll_offset + delta))

    def _return_from_overlay(self) -> None:
        self.overlay = Overlay.POPUP if self.status_message else Overlay.NONE

    # ------------------------------------------------------------------
    # Diff viewer
    # ------------------------------------------------------------------
    def open_diff(self, path: str, content: str) -> None:
        self.diff_file_path = path
        self.diff_content = content
        self.diff_scroll_offset = 0
        self.overlay = Overlay.DIFF

    def close_diff(self) -> None:
        self.diff_file_path = None
        self.diff_content = ""
        self.diff_scroll_offset = 0
        self._return_from_overlay()

    def scroll_diff(self, delta: int) -> None:
        max_offset = max(0, len(self.diff_content.splitlines()) - 1)
        self.diff_scroll_offset = min(max_offset, max(0, self.diff_scroll_offset + delta))

    # ------------------------------------------------------------------
    # Editor and editor help
    # ------------------------------------------------------------------
    def open_editor(self, text: str) -> None:
        self.editor.activate(text)
        self.overlay = Overlay.EDITOR

    def close_editor(self) -> None:
        self.editor.deactivate()
        self._return_from_overlay()

    def open_help(self) -> None:
        self.overlay = Overlay.HELP

    def close_help(self) -> None:
        if self.editor.is_active:
            self.overlay = Overlay.EDITOR
        else:
            self._return_from_overlay()
