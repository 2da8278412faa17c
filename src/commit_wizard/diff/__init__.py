"""
Utilities for extracting diffs from the repository.

The :mod:`commit_wizard.diff.diff_extractor` module defines functions for
retrieving unified diffs for changed files.
"""

from .diff_extractor import extract_diffs, join_diffs  # noqa: F401
