"""
Heuristics for classifying file changes into Conventional Commit types.

The classifier infers the most appropriate commit type and scope from the
file path (and, optionally, the diff). It is intentionally simple and
deterministic so that it can be unit tested without requiring a language
model. :func:`build_groups` turns a flat list of changed files into commit
groups and is used whenever AI grouping is disabled or fails.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Tuple

from commit_wizard.grouping.group_model import ChangedFile, ChangeGroup, CommitType
from commit_wizard.grouping.validation import validate_no_duplicate_files


MAX_BODY_LINES = 20

_DOC_SUFFIXES = (".md", ".rst", ".txt", ".adoc")
_DOC_NAMES = {"readme", "changelog", "contributing"}
_CI_MARKERS = (".github", ".gitlab", "jenkins", "pipeline", "circleci", "azure-pipelines")
_CI_SUFFIXES = ("ci.yml", "ci.yaml", ".travis.yml")
_BUILD_MARKERS = ("dockerfile", "cmake", "makefile")
_BUILD_SUFFIXES = (
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "composer.json",
    "composer.lock",
    "cargo.toml",
    "cargo.lock",
    "build.gradle",
    "pom.xml",
    "go.mod",
    "go.sum",
    "pyproject.toml",
    "setup.py",
    "setup.cfg",
)
_STYLE_SUFFIXES = (".css", ".scss", ".sass", ".less", ".styl")

_ACTIONS = {
    CommitType.FEAT: "add",
    CommitType.FIX: "fix",
    CommitType.DOCS: "update",
    CommitType.STYLE: "format",
    CommitType.REFACTOR: "refactor",
    CommitType.PERF: "optimize",
    CommitType.TEST: "update tests for",
    CommitType.CHORE: "maintain",
    CommitType.CI: "update CI for",
    CommitType.BUILD: "update build for",
}


def _is_documentation_file(path: str) -> bool:
    if _is_requirements_file(path):
        return False
    return (
        path.endswith(_DOC_SUFFIXES)
        or "/docs/" in path
        or path.startswith("docs/")
        or path in _DOC_NAMES
    )


def _is_ci_file(path: str) -> bool:
    return any(marker in path for marker in _CI_MARKERS) or path.endswith(_CI_SUFFIXES)


def _is_requirements_file(path: str) -> bool:
    name = path.rsplit("/", 1)[-1]
    return name.startswith("requirements") and name.endswith(".txt")


def _is_build_file(path: str) -> bool:
    if any(marker in path for marker in _BUILD_MARKERS):
        return True
    return path.endswith(_BUILD_SUFFIXES) or _is_requirements_file(path)


def _is_style_file(path: str) -> bool:
    return path.endswith(_STYLE_SUFFIXES) or "/styles/" in path or "/css/" in path


def _is_whitespace_only(diff: str) -> bool:
    """Return True when every changed line of ``diff`` only touches whitespace."""
    changed_lines = [
        line for line in diff.splitlines()
        if line.startswith(("+", "-")) and not line.startswith(("+++", "---"))
    ]
    if not changed_lines:
        return False
    minus = "".join(re.sub(r"\s", "", line[1:]) for line in changed_lines if line.startswith("-"))
    plus = "".join(re.sub(r"\s", "", line[1:]) for line in changed_lines if line.startswith("+"))
    return minus == plus


def infer_commit_type(file_path: str, diff: str = "") -> CommitType:
    """Classify a change into a Conventional Commit type.

    Parameters
    ----------
    file_path : str
        Path to the changed file relative to the repository root.
    diff : str, optional
        Unified diff of the file. Only used to detect formatting-only
        changes.

    Returns
    -------
    CommitType
        Test, docs, CI, build and style files are recognised by their
        path; everything else is a feature.
    """
    lower = file_path.lower()
    if "test" in lower or "spec" in lower:
        return CommitType.TEST
    if _is_documentation_file(lower):
        return CommitType.DOCS
    if _is_ci_file(lower):
        return CommitType.CI
    if _is_build_file(lower):
        return CommitType.BUILD
    if _is_style_file(lower):
        return CommitType.STYLE
    if diff and _is_whitespace_only(diff):
        return CommitType.STYLE
    return CommitType.FEAT


def infer_scope(file_path: str) -> Optional[str]:
    """Use the first directory of ``file_path`` as the commit scope.

    Returns ``None`` for top-level files and for hidden or otherwise
    meaningless first segments.
    """
    segments = file_path.split("/")
    first = segments[0]
    if len(segments) < 2:
        return None
    if not first or first == "." or first.startswith(".") or first.lower().endswith(".md"):
        return None
    return first


def infer_description(
    files: List[ChangedFile],
    commit_type: CommitType,
    scope: Optional[str],
) -> str:
    """Generate a short imperative description for a group."""
    action = _ACTIONS[commit_type]
    if scope:
        return f"{action} {scope}"
    if len(files) == 1:
        return f"{action} {files[0].path.rsplit('/', 1)[-1]}"
    return f"{action} {len(files)} files"


def infer_body_lines(files: List[ChangedFile]) -> List[str]:
    """Describe each file of a group as one body line."""
    lines = []
    for changed in files[:MAX_BODY_LINES]:
        if changed.is_new():
            action = "add"
        elif changed.is_deleted():
            action = "remove"
        elif changed.is_modified():
            action = "modify"
        elif changed.is_renamed():
            action = "rename"
        else:
            action = "update"
        lines.append(f"{action} {changed.path}")
    if len(files) > MAX_BODY_LINES:
        lines.append(f"... and {len(files) - MAX_BODY_LINES} more files")
    return lines


def build_groups(
    files: List[ChangedFile],
    ticket: Optional[str] = None,
    diffs: Optional[Dict[str, str]] = None,
) -> List[ChangeGroup]:
    """Group changed files by inferred type and scope.

    Groups are ordered by commit type, then by scope (groups without a
    scope first). The ticket, if any, is attached to every group.
    """
    diffs = diffs or {}
    buckets: Dict[Tuple[CommitType, Optional[str]], List[ChangedFile]] = {}
    for changed in files:
        key = (infer_commit_type(changed.path, diffs.get(changed.path, "")), infer_scope(changed.path))
        buckets.setdefault(key, []).append(changed)

    ordered = sorted(buckets.items(), key=lambda item: (item[0][0].order, item[0][1] or ""))
    groups = [
        ChangeGroup(
            commit_type=commit_type,
            scope=scope,
            files=group_files,
            ticket=ticket,
            description=infer_description(group_files, commit_type, scope),
            body_lines=infer_body_lines(group_files),
        )
        for (commit_type, scope), group_files in ordered
    ]
    validate_no_duplicate_files(groups)
    return groups
