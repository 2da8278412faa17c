"""
Data models for commit grouping.

A :class:`ChangeGroup` represents a collection of related file changes
that should be committed together. Each group carries a Conventional
Commit type, an optional scope and ticket, a short description and a
list of bullet lines for the message body. The group knows how to render
itself as a commit message and how to re-read a message the user has
edited by hand.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class CommitType(enum.Enum):
    """Conventional Commit types, in their canonical order."""

    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    CHORE = "chore"
    CI = "ci"
    BUILD = "build"

    @property
    def order(self) -> int:
        """Position of the type in the canonical ordering."""
        return list(CommitType).index(self)


def parse_commit_type(type_str: str) -> CommitType:
    """Map a type tag such as ``"fix"`` to :class:`CommitType`.

    Unknown tags fall back to :attr:`CommitType.FEAT`.
    """
    try:
        return CommitType(type_str.strip().lower())
    except ValueError:
        return CommitType.FEAT


class FileStatus(enum.IntFlag):
    """Status bits of a changed file, split into index and worktree bits."""

    CURRENT = 0
    INDEX_NEW = enum.auto()
    INDEX_MODIFIED = enum.auto()
    INDEX_DELETED = enum.auto()
    INDEX_RENAMED = enum.auto()
    INDEX_TYPECHANGE = enum.auto()
    WT_NEW = enum.auto()
    WT_MODIFIED = enum.auto()
    WT_DELETED = enum.auto()
    WT_RENAMED = enum.auto()
    WT_TYPECHANGE = enum.auto()


@dataclass
class ChangedFile:
    """Representation of a single changed file in the repository.

    Attributes
    ----------
    path : str
        Path relative to the repository root.
    status : FileStatus
        Status flags reported by the version control system.
    orig_path : Optional[str]
        Source path when the file was renamed.
    """

    path: str
    status: FileStatus = FileStatus.CURRENT
    orig_path: Optional[str] = None

    def is_new(self) -> bool:
        return bool(self.status & (FileStatus.INDEX_NEW | FileStatus.WT_NEW))

    def is_modified(self) -> bool:
        return bool(self.status & (FileStatus.INDEX_MODIFIED | FileStatus.WT_MODIFIED))

    def is_deleted(self) -> bool:
        return bool(self.status & (FileStatus.INDEX_DELETED | FileStatus.WT_DELETED))

    def is_renamed(self) -> bool:
        return bool(self.status & (FileStatus.INDEX_RENAMED | FileStatus.WT_RENAMED))


def _truncate_bytes(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` UTF-8 bytes without splitting a character."""
    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text
    return encoded[:limit].decode("utf-8", errors="ignore")


@dataclass
class ChangeGroup:
    """Representation of a grouped commit.

    Attributes
    ----------
    commit_type : CommitType
        The Conventional Commit type (feat, fix, docs, etc.).
    scope : Optional[str]
        Optional scope, usually a top-level directory.
    files : List[ChangedFile]
        Files included in the group.
    ticket : Optional[str]
        Optional issue reference such as ``"LU-1234"``.
    description : str
        Short imperative description.
    body_lines : List[str]
        Bullet contents for the message body, without the ``"- "`` prefix.
    committed : bool
        Set once the group has been committed; never cleared.
    """

    MAX_HEADER_LENGTH = 72

    commit_type: CommitType
    scope: Optional[str] = None
    files: List[ChangedFile] = field(default_factory=list)
    ticket: Optional[str] = None
    description: str = ""
    body_lines: List[str] = field(default_factory=list)
    committed: bool = False

    def header(self) -> str:
        """Build ``<type>[(<scope>)]: [<ticket>: ]<description>``.

        The description is shortened with ``"..."`` so that the header fits
        in :attr:`MAX_HEADER_LENGTH` bytes. The budget is counted in bytes,
        not characters or words.
        """
        scope_part = f"({self.scope})" if self.scope else ""
        ticket_part = f"{self.ticket}: " if self.ticket else ""
        base_prefix = f"{self.commit_type.value}{scope_part}: {ticket_part}"

        available = max(0, self.MAX_HEADER_LENGTH - len(base_prefix.encode("utf-8")))
        description = self.description
        if len(description.encode("utf-8")) > available:
            description = _truncate_bytes(description, max(0, available - 3)) + "..."
        return base_prefix + description

    def full_message(self) -> str:
        """Render the header followed by the bullet body, if any."""
        message = self.header()
        if self.body_lines:
            message += "\n\n"
            for line in self.body_lines:
                message += f"- {line}\n"
        return message

    def set_from_commit_text(self, text: str) -> None:
        """Update ``description`` and ``body_lines`` from edited message text.

        The first line is treated as the header: the description is the
        text after its last ``": "``, or the whole line when there is none.
        Each following non-empty line becomes a body line with any leading
        ``"- "`` removed, so bulleted and plain lines end up the same shape.
        """
        lines = text.splitlines()
        if lines:
            header = lines[0].strip()
            idx = header.rfind(": ")
            if idx != -1:
                self.description = header[idx + 2:].strip()
            else:
                self.description = header

        body: List[str] = []
        for line in lines[1:]:
            trimmed = line.strip()
            if trimmed.startswith("- "):
                body.append(trimmed[2:])
            elif trimmed:
                body.append(trimmed)
        self.body_lines = body

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]
