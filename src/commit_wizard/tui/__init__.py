"""
Interactive terminal interface for commit_wizard.

The interface shows the change groups, lets the user edit, inspect,
regenerate and commit them, and is started with
:func:`commit_wizard.tui.app.run`.
"""

from .state import AppState, Overlay, Panel  # noqa: F401
from .terminal import TerminalError  # noqa: F401
