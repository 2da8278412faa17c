"""
Integrity checks for commit group lists.

Every changed file must belong to exactly one commit group. Producers of
group lists (the heuristic grouper and the AI grouper) run
:func:`validate_no_duplicate_files` before handing groups over, and the
interactive application checks again when it takes ownership.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Set, Tuple

from commit_wizard.grouping.group_model import ChangeGroup


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class DuplicateFileError(ValueError):
    """Raised when a file path appears more than once across commit groups.

    Attributes
    ----------
    duplicates : List[Tuple[str, int]]
        ``(path, group_index)`` pairs, where ``group_index`` is the group in
        which the repeated path was found.
    """

    def __init__(self, duplicates: List[Tuple[str, int]]) -> None:
        self.duplicates = duplicates
        details = "\n  - ".join(
            f"File '{path}' appears in multiple groups (at least in group {idx})"
            for path, idx in duplicates
        )
        super().__init__(f"Duplicate files detected in commit groups:\n  - {details}")


def validate_no_duplicate_files(groups: Iterable[ChangeGroup]) -> None:
    """Ensure no file path is listed in more than one group.

    Groups and their files are walked in order; a path seen before is
    reported together with the index of the group where it repeats. This
    also catches a path listed twice inside the same group.

    Raises
    ------
    DuplicateFileError
        If at least one duplicate path is found.
    """
    seen: Set[str] = set()
    duplicates: List[Tuple[str, int]] = []
    for group_idx, group in enumerate(groups):
        for changed in group.files:
            if changed.path in seen:
                duplicates.append((changed.path, group_idx))
            else:
                seen.add(changed.path)
    if duplicates:
        logger.error("Found %d duplicate file(s) across commit groups", len(duplicates))
        raise DuplicateFileError(duplicates)
