"""Entry point and event loop of the interactive interface.

:func:`run` takes over the terminal, then repeats a fixed cycle until the
user quits: draw the current state, wait for one key for at most the rest
of the 250 ms tick, and dispatch that key. Actions run synchronously, so
the interface does not redraw or read keys while git or the AI provider
is working.

:func:`handle_key` routes a key to the overlay that currently captures
input, in the order help, diff viewer, editor, status popup, and finally
the normal panel navigation.
"""

from __future__ import annotations

import logging
import sys
import termios
import time
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.live import Live

from commit_wizard.llm.commit_message_generator import CommitMessageGenerator
from commit_wizard.tui import actions
from commit_wizard.tui.editor import EditorSignal
from commit_wizard.tui.keys import read_key
from commit_wizard.tui.render import render
from commit_wizard.tui.state import AppState, Overlay
from commit_wizard.tui.terminal import TerminalController, TerminalError
from commit_wizard.vcs.git_client import GitClient


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


TICK_SECONDS = 0.25
SCROLL_PAGE = 10

_DOWN_KEYS = ("DOWN", "j")
_UP_KEYS = ("UP", "k")


def _handle_help_key(state: AppState, key: str) -> None:
    if key in ("ESC", "F1"):
        state.close_help()


def _handle_diff_key(state: AppState, key: str) -> None:
    if key == "ESC":
        state.close_diff()
    elif key in _DOWN_KEYS:
        state.scroll_diff(1)
    elif key in _UP_KEYS:
        state.scroll_diff(-1)
    elif key == "PAGE_DOWN":
        state.scroll_diff(SCROLL_PAGE)
    elif key == "PAGE_UP":
        state.scroll_diff(-SCROLL_PAGE)


def _handle_editor_key(state: AppState, key: str) -> None:
    if key == "F1":
        state.open_help()
        return
    signal = state.editor.handle_key(key)
    if signal is EditorSignal.SAVE:
        state.close_editor()
        actions.apply_editor_text(state)
    elif signal is EditorSignal.CANCEL:
        state.close_editor()


def _handle_popup_key(state: AppState, key: str) -> None:
    if key in ("ESC", "ENTER"):
        state.close_popup()
    elif key in _DOWN_KEYS:
        state.scroll_popup(1)
    elif key in _UP_KEYS:
        state.scroll_popup(-1)


def handle_key(
    state: AppState,
    key: str,
    git_client: GitClient,
    generator: Optional[CommitMessageGenerator] = None,
    ai_enabled: bool = False,
    redraw: Optional[Callable[[], None]] = None,
) -> bool:
    """Dispatch one key token. Returns True when the user asked to quit."""
    if state.overlay is Overlay.HELP:
        _handle_help_key(state, key)
        return False
    if state.overlay is Overlay.DIFF:
        _handle_diff_key(state, key)
        return False
    if state.overlay is Overlay.EDITOR:
        _handle_editor_key(state, key)
        return False
    if state.overlay is Overlay.POPUP:
        _handle_popup_key(state, key)
        return False

    if key in ("q", "ESC"):
        return True
    if key == "TAB":
        state.next_panel()
    elif key == "BACKTAB":
        state.previous_panel()
    elif key in _DOWN_KEYS:
        state.move_down()
    elif key in _UP_KEYS:
        state.move_up()
    elif key == "e":
        actions.handle_edit(state)
    elif key == "d":
        actions.handle_diff(state, git_client)
    elif key == "a":
        actions.handle_ai_generate(state, generator, git_client, ai_enabled, redraw)
    elif key == "c":
        actions.handle_commit(state, git_client)
    elif key == "C":
        actions.handle_commit_all(state, git_client)
    elif key == "CTRL_L":
        state.close_popup()
    return False


def run(
    app_state: AppState,
    repo_path: Path,
    ai_enabled: bool,
    git_client: Optional[GitClient] = None,
    generator: Optional[CommitMessageGenerator] = None,
    console: Optional[Console] = None,
) -> None:
    """Run the interface until the user quits.

    Raises
    ------
    TerminalError
        If the terminal cannot be put into raw mode or drawing fails. The
        terminal settings are restored before the error propagates.
    """
    git_client = git_client or GitClient(repo_path)
    console = console or Console()
    logger.info("Starting interface with %d group(s), AI %s", len(app_state.groups), "on" if ai_enabled else "off")

    try:
        stdin_fd = sys.stdin.fileno()
        stdout_fd = sys.stdout.fileno()
        terminal = TerminalController(stdin_fd, stdout_fd)
        with terminal.raw_mode():
            with Live(console=console, screen=True, auto_refresh=False) as live:

                def redraw() -> None:
                    live.update(render(app_state, console.size.height, ai_enabled), refresh=True)

                last_tick = time.monotonic()
                while True:
                    redraw()
                    remaining = TICK_SECONDS - (time.monotonic() - last_tick)
                    key = read_key(stdin_fd, timeout_ms=max(0, int(remaining * 1000)))
                    if key and handle_key(app_state, key, git_client, generator, ai_enabled, redraw):
                        break
                    if time.monotonic() - last_tick >= TICK_SECONDS:
                        last_tick = time.monotonic()
    except (termios.error, OSError) as exc:
        logger.error("Terminal failure: %s", exc)
        raise TerminalError(str(exc)) from exc

    logger.info("Interface closed; %d of %d group(s) committed", app_state.committed_count(), len(app_state.groups))
