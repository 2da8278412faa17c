"""
Version control system (VCS) integration.

This package contains the :class:`GitClient` used by the commit wizard to
detect the repository root, list local changes, read staged diffs, and
commit change groups.
"""

from .git_client import GitClient, GitError, extract_ticket_from_branch  # noqa: F401
