"""
Top-level package for commit_wizard.

This package exposes the main CLI entry point via the
``commit_wizard.cli`` module and the interactive interface via
``commit_wizard.tui.app.run``.
"""

__all__ = ["__version__"]

__version__ = "0.3.0"
