#!/usr/bin/env python
"""
Thin wrapper script to invoke the commit_wizard CLI.

Running ``python wizard.py`` is equivalent to running the
``commit-wizard`` console script installed via ``pyproject.toml``.
"""

from commit_wizard.cli import main


if __name__ == "__main__":
    main(prog_name="commit-wizard")
