"""
Diff extraction utilities.

The callers provide a VCS client that implements ``get_file_diff`` on
individual files and a list of changed files. The extractor returns a
mapping of file paths to their diff text; files whose diff cannot be read
map to an empty string.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from commit_wizard.grouping.group_model import ChangedFile
from commit_wizard.vcs.git_client import GitError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


def extract_diffs(vcs_client: Any, changes: Iterable[ChangedFile]) -> Dict[str, str]:
    """Extract unified diffs for a list of file changes.

    Parameters
    ----------
    vcs_client : object
        The VCS client instance. Must implement ``get_file_diff(file_path)``.
    changes : Iterable[ChangedFile]
        Files to read diffs for.

    Returns
    -------
    Dict[str, str]
        Mapping from file path to the diff text.
    """
    diffs: Dict[str, str] = {}
    for change in changes:
        try:
            diff = vcs_client.get_file_diff(change.path)
        except GitError as exc:
            # Untracked or deleted files may not produce a diff; the
            # heuristics still work from the file name.
            logger.debug("No diff for %s: %s", change.path, exc)
            diff = ""
        diffs[change.path] = diff
    return diffs


def join_diffs(diffs: Dict[str, str]) -> Optional[str]:
    """Concatenate non-empty diffs, or return None when there are none."""
    combined = "".join(diff for diff in diffs.values() if diff)
    return combined or None
