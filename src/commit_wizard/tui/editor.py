"""Embedded commit message editor.

:class:`CommitMessageEditor` wraps a :class:`prompt_toolkit.buffer.Buffer`
and adds the activate / save / cancel life cycle the interface needs.
Key tokens from :mod:`commit_wizard.tui.keys` are translated into buffer
operations; Ctrl+S and Ctrl+C (or Esc) end the editing session.
"""

from __future__ import annotations

import enum
import logging

from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


PAGE_LINES = 10
TAB_TEXT = "    "


class EditorSignal(enum.Enum):
    """Result of feeding one key to the editor."""

    CONTINUE = "continue"
    SAVE = "save"
    CANCEL = "cancel"


class CommitMessageEditor:
    """Text editor state for one commit message at a time.

    The editor is inactive until :meth:`activate` loads a message. The
    text passed to :meth:`activate` is remembered so that :meth:`cancel`
    can restore it; :meth:`save` makes the current text the new original.
    Both end the session.
    """

    def __init__(self) -> None:
        self.buffer = Buffer(multiline=True)
        self._original = ""
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def cursor_row(self) -> int:
        return self.buffer.document.cursor_position_row

    @property
    def cursor_col(self) -> int:
        return self.buffer.document.cursor_position_col

    def set_text(self, text: str) -> None:
        """Replace the buffer contents and put the cursor at the end."""
        self.buffer.reset(document=Document(text, cursor_position=len(text)))

    def activate(self, text: str) -> None:
        self._original = text
        self.set_text(text)
        self._active = True
        logger.debug("Editor activated with %d characters", len(text))

    def deactivate(self) -> None:
        self._active = False

    def save(self) -> str:
        """Accept the current text, end the session and return the text."""
        self._original = self.buffer.text
        self._active = False
        logger.debug("Editor saved")
        return self._original

    def cancel(self) -> None:
        """Discard edits, end the session and restore the original text."""
        self.set_text(self._original)
        self._active = False
        logger.debug("Editor cancelled")

    def handle_key(self, key: str) -> EditorSignal:
        """Apply ``key`` to the buffer.

        Returns :attr:`EditorSignal.SAVE` or :attr:`EditorSignal.CANCEL`
        when the key ends the session, :attr:`EditorSignal.CONTINUE`
        otherwise.
        """
        if key == "CTRL_S":
            self.save()
            return EditorSignal.SAVE
        if key in ("CTRL_C", "ESC"):
            self.cancel()
            return EditorSignal.CANCEL

        buf = self.buffer
        if key == "LEFT":
            buf.cursor_left()
        elif key == "RIGHT":
            buf.cursor_right()
        elif key == "UP":
            buf.cursor_up()
        elif key == "DOWN":
            buf.cursor_down()
        elif key == "PAGE_UP":
            buf.cursor_up(count=PAGE_LINES)
        elif key == "PAGE_DOWN":
            buf.cursor_down(count=PAGE_LINES)
        elif key in ("HOME", "CTRL_A"):
            buf.cursor_position += buf.document.get_start_of_line_position()
        elif key in ("END", "CTRL_E"):
            buf.cursor_position += buf.document.get_end_of_line_position()
        elif key == "BACKSPACE":
            buf.delete_before_cursor()
        elif key == "DELETE":
            buf.delete()
        elif key == "CTRL_K":
            buf.delete(count=buf.document.get_end_of_line_position())
        elif key == "CTRL_U":
            buf.delete_before_cursor(count=-buf.document.get_start_of_line_position())
        elif key == "ENTER":
            buf.newline(copy_margin=False)
        elif key == "TAB":
            buf.insert_text(TAB_TEXT)
        elif len(key) == 1 and key.isprintable():
            buf.insert_text(key)
        return EditorSignal.CONTINUE
