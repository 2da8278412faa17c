"""
Git client implementation for commit_wizard.

This module wraps the Git operations required by the commit wizard:
listing changed and untracked files, reading staged diffs, and committing
a single change group. All subprocess calls go through
:meth:`GitClient._run` so that unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from commit_wizard.grouping.group_model import ChangedFile, ChangeGroup, FileStatus


logger = logging.getLogger(__name__)
# Attach a null handler so the module stays silent until the CLI
# configures file logging for the package.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


STAGE_TIMEOUT = 10.0
COMMIT_TIMEOUT = 30.0

_TICKET_PATTERN = re.compile(r"([A-Z]+-\d+)")

_INDEX_FLAGS: Dict[str, FileStatus] = {
    "A": FileStatus.INDEX_NEW,
    "C": FileStatus.INDEX_NEW,
    "M": FileStatus.INDEX_MODIFIED,
    "D": FileStatus.INDEX_DELETED,
    "R": FileStatus.INDEX_RENAMED,
    "T": FileStatus.INDEX_TYPECHANGE,
}
_WORKTREE_FLAGS: Dict[str, FileStatus] = {
    "A": FileStatus.WT_NEW,
    "M": FileStatus.WT_MODIFIED,
    "D": FileStatus.WT_DELETED,
    "R": FileStatus.WT_RENAMED,
    "T": FileStatus.WT_TYPECHANGE,
}


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


def extract_ticket_from_branch(branch: str) -> Optional[str]:
    """Extract a ticket reference such as ``LU-1234`` from a branch name.

    >>> extract_ticket_from_branch("feature/LU-1234-add-login")
    'LU-1234'
    >>> extract_ticket_from_branch("main") is None
    True
    """
    match = _TICKET_PATTERN.search(branch)
    return match.group(1) if match else None


def is_valid_path(path: str) -> bool:
    """Return True if ``path`` is a safe repository-relative path.

    Absolute paths, parent directory references, NUL bytes and Windows
    drive letters are rejected.
    """
    if not path or path.startswith(("/", "\\")):
        return False
    if ".." in path or "\0" in path:
        return False
    if len(path) >= 2 and path[1] == ":":
        return False
    return True


class GitClient:
    """Client for interacting with a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` entry is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Basic Git commands
    # ------------------------------------------------------------------
    def _run(
        self,
        args: List[str],
        check: bool = True,
        timeout: Optional[float] = None,
    ) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command times out, cannot be started, or exits with a
            non-zero status when ``check`` is True.
        """
        full_cmd = ["git", "-c", "core.quotepath=off"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error("Git command timed out after %ss: %s", timeout, " ".join(full_cmd))
            raise GitError(f"git {args[0]} timed out after {timeout:g}s") from exc
        except OSError as exc:
            logger.error("Failed to execute Git: %s", exc)
            raise GitError(f"Failed to execute git: {exc}") from exc

        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    # ------------------------------------------------------------------
    # Status and change detection
    # ------------------------------------------------------------------
    def _status_entries(self, include_untracked: bool) -> List[ChangedFile]:
        untracked_mode = "--untracked-files=all" if include_untracked else "--untracked-files=no"
        # -z output is NUL separated and never quotes paths. A rename or copy
        # record is followed by one more field holding the source path.
        result = self._run(["status", "--porcelain", "-z", untracked_mode], check=True)
        fields = result.stdout.split("\0")
        entries = []
        idx = 0
        while idx < len(fields):
            record = fields[idx]
            idx += 1
            if len(record) < 4:
                continue
            index_code, worktree_code = record[0], record[1]
            filename = record[3:]
            orig_path = None
            if index_code in "RC" or worktree_code in "RC":
                if idx < len(fields):
                    orig_path = fields[idx] or None
                    idx += 1

            if index_code == "?" and worktree_code == "?":
                status = FileStatus.WT_NEW
            else:
                status = _INDEX_FLAGS.get(index_code, FileStatus.CURRENT)
                status |= _WORKTREE_FLAGS.get(worktree_code, FileStatus.CURRENT)
            if status == FileStatus.CURRENT:
                continue

            if not is_valid_path(filename):
                logger.warning("Skipping file with unsafe path: %r", filename)
                continue
            entries.append(ChangedFile(path=filename, status=status, orig_path=orig_path))
        return entries

    def collect_changed_files(self, include_untracked: bool = False) -> List[ChangedFile]:
        """Get the list of changed files in the repository.

        Staged and unstaged modifications, additions, deletions, renames and
        type changes are reported. Untracked files are only included when
        ``include_untracked`` is True.

        Raises
        ------
        GitError
            If the git status command fails.
        """
        return self._status_entries(include_untracked)

    def collect_untracked_files(self) -> List[ChangedFile]:
        """Return only untracked files that are not ignored."""
        return [
            entry for entry in self._status_entries(include_untracked=True)
            if entry.status == FileStatus.WT_NEW
        ]

    def get_file_diff(self, file_path: str) -> str:
        """Return the staged diff of ``file_path``.

        An empty string means the file has no staged change; it is not an
        error.
        """
        result = self._run(["diff", "--cached", "--", file_path], check=True)
        return result.stdout

    # ------------------------------------------------------------------
    # Branch information
    # ------------------------------------------------------------------
    def get_current_branch(self) -> str:
        """Get the name of the current branch.

        Raises
        ------
        GitError
            If unable to determine the current branch.
        """
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"], check=True)
        return result.stdout.strip()

    # ------------------------------------------------------------------
    # Staging and committing
    # ------------------------------------------------------------------
    def stage_files(self, files: List[str]) -> None:
        """Stage the given files for commit.

        Paths that no longer exist in the working tree are removed from the
        index; every other path is added.
        """
        for file in files:
            if (self.repo_root / file).exists():
                self._run(["add", "--", file], check=True, timeout=STAGE_TIMEOUT)
            else:
                self._run(
                    ["rm", "--cached", "--ignore-unmatch", "--quiet", "--", file],
                    check=True,
                    timeout=STAGE_TIMEOUT,
                )

    def commit(self, message: str, paths: List[str]) -> str:
        """Commit ``paths`` with ``message`` and return git's output.

        The message is passed through a temporary file so that multi-line
        messages survive unchanged.
        """
        fd, msg_path = tempfile.mkstemp(prefix="commit-wizard-", suffix=".txt")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(message)
            result = self._run(
                ["commit", "-F", msg_path, "--"] + paths,
                check=True,
                timeout=COMMIT_TIMEOUT,
            )
        finally:
            os.unlink(msg_path)
        return result.stdout + result.stderr

    def commit_group(self, group: ChangeGroup) -> str:
        """Stage exactly the files of ``group`` and commit them.

        The commit message is ``group.full_message()``. Renamed files also
        commit the removal of their original path.

        Raises
        ------
        GitError
            If a path is unsafe, staging fails, or the commit fails.
        """
        paths: List[str] = []
        for changed in group.files:
            for path in (changed.orig_path, changed.path):
                if path is None:
                    continue
                if not is_valid_path(path):
                    raise GitError(f"Invalid file path: {path}")
                if path not in paths:
                    paths.append(path)
        if not paths:
            raise GitError("Commit group has no files")

        logger.debug("Staging %d file(s) for commit", len(paths))
        self.stage_files(paths)
        output = self.commit(group.full_message(), paths)
        logger.info("Committed group: %s", group.header())
        return output
