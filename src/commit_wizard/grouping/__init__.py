"""
Commit group model and grouping logic.

This package provides the change model (:mod:`commit_wizard.grouping.group_model`),
the heuristic grouper (:mod:`commit_wizard.grouping.change_classifier`) and the
duplicate-file check (:mod:`commit_wizard.grouping.validation`).
"""

from .group_model import ChangedFile, ChangeGroup, CommitType, FileStatus, parse_commit_type  # noqa: F401
from .validation import DuplicateFileError, validate_no_duplicate_files  # noqa: F401
from .change_classifier import build_groups  # noqa: F401
