"""
Commit message and grouping generation using a language model.

This module provides the :class:`CommitMessageGenerator` class, which
asks a chat model (via :class:`ChatClient`) for two things:

- a description and optional body for a single change group, used by the
  interactive "AI generate" action;
- an initial partition of the changed files into commit groups, used by
  the CLI before the interface starts.

Model output is treated as untrusted text. Descriptions are cleaned of
code fences and quotes, and grouping answers are checked so that every
changed file ends up in exactly one group. When grouping fails, the
deterministic heuristics of :mod:`commit_wizard.grouping` are used.
"""

from __future__ import annotations

import json
import logging
from textwrap import dedent
from typing import Dict, List, Optional, Tuple

from commit_wizard.grouping.change_classifier import build_groups, infer_body_lines
from commit_wizard.grouping.group_model import ChangedFile, ChangeGroup, parse_commit_type
from commit_wizard.grouping.validation import validate_no_duplicate_files
from commit_wizard.llm.ai_client import ChatClient, LLMError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


MAX_DIFF_CHARS = 1000

SYSTEM_PROMPT = (
    "You are a commit message generator. Follow these rules: "
    "- Use imperative mood: 'add feature' NOT 'added feature' "
    "- Keep description concise and factual "
    "- Do NOT include type/scope prefix (feat:, fix:, etc.) "
    "- Start with a lowercase verb "
    "- No period at the end of description "
    "- If providing a body, separate it with a blank line "
    "- Body should use bullet points starting with '-' "
    "- Mention breaking changes if applicable"
)

GROUPING_SYSTEM_PROMPT = (
    "You split version control changes into logical conventional commits "
    "and answer with a JSON array only."
)


def _truncate(text: str, limit: int = MAX_DIFF_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "\n... (truncated)"


def _strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    while cleaned.startswith("```"):
        cleaned = cleaned[3:]
    while cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _status_word(changed: ChangedFile) -> str:
    if changed.is_new():
        return "new"
    if changed.is_modified():
        return "modified"
    if changed.is_deleted():
        return "deleted"
    if changed.is_renamed():
        return "renamed"
    return "changed"


def parse_commit_message(response: str) -> Tuple[str, Optional[str]]:
    """Split a model answer into ``(description, body)``.

    The first line is the description, with surrounding quotes and
    backticks removed. Any further lines of the first paragraph and the
    remaining paragraphs form the body, or ``None`` when there are none.
    Markdown code fences around the answer are ignored and ``"--"``
    bullets are collapsed to ``"-"``.

    >>> parse_commit_message('"add login form"\\n\\n- validate input')
    ('add login form', '- validate input')
    """
    cleaned = _strip_code_fences(response)
    parts = cleaned.split("\n\n")
    first_lines = parts[0].strip().splitlines() or [""]
    description = first_lines[0].strip().strip('"').strip("`")

    # The subject is one line; the rest of its paragraph joins the body.
    rest = [line for line in first_lines[1:] if line.strip()]
    if rest:
        parts = [parts[0], "\n".join(rest)] + parts[1:]

    body: Optional[str] = None
    if len(parts) > 1:
        body_text = "\n\n".join(parts[1:]).strip()
        if body_text:
            body = body_text.replace("--", "-")
    return description, body


class CommitMessageGenerator:
    """Generate commit messages and commit groups with a chat model."""

    def __init__(self, client: ChatClient) -> None:
        self.client = client

    # ------------------------------------------------------------------
    # Single group messages
    # ------------------------------------------------------------------
    def build_prompt(
        self,
        group: ChangeGroup,
        files: List[ChangedFile],
        diff: Optional[str] = None,
    ) -> str:
        """Construct the user prompt for one change group.

        The prompt lists the commit type, scope, ticket and files of the
        group. The diff, if given, is cut to the first 1000 characters.
        """
        lines = ["Generate a conventional commit message for these changes:", ""]
        lines.append(f"Type: {group.commit_type.value}")
        if group.scope:
            lines.append(f"Scope: {group.scope}")
        if group.ticket:
            lines.append(f"Ticket: {group.ticket}")
        lines.append("")
        lines.append("Changed files:")
        lines.extend(f"  - {changed.path}" for changed in files)
        prompt = "\n".join(lines) + "\n"
        if diff:
            prompt += f"\nDiff (first {MAX_DIFF_CHARS} chars):\n" + _truncate(diff)
        prompt += (
            "\n\nProvide ONLY the commit description (imperative mood, no type/scope prefix). "
            "If needed, add a body after a blank line."
        )
        return prompt

    def generate_commit_message(
        self,
        group: ChangeGroup,
        files: List[ChangedFile],
        diff: Optional[str] = None,
    ) -> Tuple[str, Optional[str]]:
        """Ask the model for a description and optional body.

        Raises
        ------
        LLMError
            If the request fails or the model returns an empty description.
        """
        prompt = self.build_prompt(group, files, diff)
        response = self.client.complete(SYSTEM_PROMPT, prompt)
        description, body = parse_commit_message(response)
        if not description:
            raise LLMError("AI returned an empty commit description")
        logger.info("AI generated description for %s group: %s", group.commit_type.value, description)
        return description, body

    # ------------------------------------------------------------------
    # Initial grouping
    # ------------------------------------------------------------------
    def build_grouping_prompt(
        self,
        files: List[ChangedFile],
        ticket: Optional[str] = None,
        diffs: Optional[Dict[str, str]] = None,
    ) -> str:
        """Construct the prompt asking the model to partition ``files``."""
        file_lines = "\n".join(f"  {_status_word(changed)} - {changed.path}" for changed in files)
        prompt = dedent(
            """
            Analyze these changed files and group them into logical commits.

            REQUIREMENTS:
            - Group files that belong to the same logical change
            - Be sure to include all related files in the same group
            - Be sure that a file is only in one group
            - Assign appropriate conventional commit type (feat, fix, docs, style, refactor, perf, test, chore, ci, build)
            - Determine scope from file paths (e.g., 'api', 'ui', 'auth')
            - Generate concise, imperative descriptions
            - Keep descriptions under 72 characters
            """
        ).strip()
        prompt += "\n\n"
        if ticket:
            prompt += f"Ticket/Issue: {ticket}\n\n"
        prompt += "CHANGED FILES:\n" + file_lines + "\n"

        previews = [(path, diff) for path, diff in (diffs or {}).items() if diff]
        if previews:
            prompt += "\nDIFF PREVIEW:\n"
            for path, diff in previews:
                prompt += f"\n{path}:\n{_truncate(diff)}\n"

        prompt += dedent(
            """

            Respond with a JSON array only, in this shape:
            [
              {
                "type": "feat",
                "scope": "api",
                "description": "add user endpoint",
                "files": ["src/api/users.py"],
                "body_lines": ["implement GET /users", "add user model"]
              }
            ]
            body_lines must not start with '- ', it is added automatically.
            """
        )
        return prompt

    def parse_groups_from_response(
        self,
        response: str,
        files: List[ChangedFile],
        ticket: Optional[str] = None,
    ) -> List[ChangeGroup]:
        """Turn a JSON grouping answer into validated change groups.

        Files named by the model that are not among ``files`` are ignored,
        and a file already claimed by an earlier group is not added again.
        Changed files the model left out are grouped heuristically and
        appended.

        Raises
        ------
        LLMError
            If the answer contains no JSON array of groups.
        DuplicateFileError
            If the resulting groups share a file.
        """
        cleaned = _strip_code_fences(response)
        start, end = cleaned.find("["), cleaned.rfind("]")
        if start == -1 or end < start:
            raise LLMError("AI response does not contain a JSON array")
        try:
            raw_groups = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError as exc:
            raise LLMError(f"Failed to parse AI grouping response: {exc}") from exc
        if not isinstance(raw_groups, list):
            raise LLMError("AI grouping response is not a list")

        by_path = {changed.path: changed for changed in files}
        claimed = set()
        groups: List[ChangeGroup] = []
        for raw in raw_groups:
            if not isinstance(raw, dict):
                continue
            group_files = []
            for path in raw.get("files") or []:
                if isinstance(path, str) and path in by_path and path not in claimed:
                    claimed.add(path)
                    group_files.append(by_path[path])
            if not group_files:
                continue

            scope = raw.get("scope")
            body_lines = [
                line[2:] if line.startswith("- ") else line
                for line in raw.get("body_lines") or []
                if isinstance(line, str) and line.strip()
            ]
            groups.append(
                ChangeGroup(
                    commit_type=parse_commit_type(str(raw.get("type") or "feat")),
                    scope=scope if isinstance(scope, str) and scope else None,
                    files=group_files,
                    ticket=ticket,
                    description=str(raw.get("description") or "update files"),
                    body_lines=body_lines or infer_body_lines(group_files),
                )
            )

        if not groups:
            raise LLMError("AI grouping response contained no usable groups")

        leftovers = [changed for changed in files if changed.path not in claimed]
        if leftovers:
            logger.warning("AI grouping left %d file(s) ungrouped; grouping them heuristically", len(leftovers))
            groups.extend(build_groups(leftovers, ticket=ticket))

        validate_no_duplicate_files(groups)
        return groups

    def generate_groups(
        self,
        files: List[ChangedFile],
        ticket: Optional[str] = None,
        diffs: Optional[Dict[str, str]] = None,
    ) -> List[ChangeGroup]:
        """Group ``files`` with the model, falling back to the heuristics."""
        prompt = self.build_grouping_prompt(files, ticket, diffs)
        try:
            response = self.client.complete(GROUPING_SYSTEM_PROMPT, prompt)
            return self.parse_groups_from_response(response, files, ticket)
        except LLMError as exc:
            logger.warning("AI grouping failed: %s; using heuristic grouping.", exc)
            return build_groups(files, ticket=ticket, diffs=diffs)
