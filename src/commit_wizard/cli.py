"""
Command line interface for the commit_wizard tool.

This module defines the ``main`` function which is used as the entry
point when executing the ``commit-wizard`` command. It finds the
repository, loads the AI configuration, collects the changed files,
builds the initial commit groups and hands them to the interactive
interface. Each failure class maps to its own exit code.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional

import click

from commit_wizard import __version__
from commit_wizard.config.loader import ConfigError, load_config
from commit_wizard.diff.diff_extractor import extract_diffs
from commit_wizard.grouping.change_classifier import build_groups
from commit_wizard.grouping.group_model import ChangedFile, ChangeGroup
from commit_wizard.grouping.validation import DuplicateFileError
from commit_wizard.llm.ai_client import ChatClient
from commit_wizard.llm.commit_message_generator import CommitMessageGenerator
from commit_wizard.log import init_logging
from commit_wizard.tui.app import run
from commit_wizard.tui.state import AppState
from commit_wizard.tui.terminal import TerminalError
from commit_wizard.vcs.git_client import GitClient, GitError, extract_ticket_from_branch


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_NO_REPO = 3
EXIT_NO_CHANGES = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_TERMINAL_ERROR = 9

TOTAL_STEPS = 5
PREVIEW_FILES = 5


# ---------------------------------------------------------------------------
# Progress and status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Spinner line shown while a blocking step runs."""

    SPINNER_CHARS = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

    def __init__(self, message: str):
        self.message = message
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"{self.SPINNER_CHARS[0]} {self.message}...", nl=False)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - self.start_time
        mark = "✗" if exc_type else "✓"
        click.echo(f"\r{mark} {self.message} (took {elapsed:.1f}s)")
        return False


def print_step(step_num: int, message: str):
    """Print a step indicator."""
    click.echo(f"\n{'=' * 60}")
    click.echo(f"Step {step_num}/{TOTAL_STEPS}: {message}")
    click.echo(f"{'=' * 60}")


def print_info(message: str, indent: int = 0):
    click.echo(f"{'  ' * indent}ℹ {message}")


def print_success(message: str, indent: int = 0):
    click.echo(f"{'  ' * indent}✓ {message}")


def print_warning(message: str, indent: int = 0):
    click.echo(f"{'  ' * indent}⚠ {message}")


def print_error(message: str, indent: int = 0):
    click.echo(f"{'  ' * indent}✗ {message}", err=True)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def detect_repository(start_dir: Path) -> Path:
    """Return the root of the Git repository containing ``start_dir``.

    Raises
    ------
    click.exceptions.Exit
        With code EXIT_NO_REPO if no repository is found.
    """
    with ProgressIndicator("Looking for a Git repository"):
        repo_root = GitClient.find_repo_root(start_dir)
    if repo_root is None:
        print_error(f"Not a git repository: {start_dir}")
        print_info("Run this command from inside a git repository or use --repo <path>", indent=1)
        raise click.exceptions.Exit(EXIT_NO_REPO)
    print_success(f"Found Git repository at: {repo_root}")
    return repo_root


def select_untracked_files(untracked: List[ChangedFile], mode: str) -> List[ChangedFile]:
    """Decide which untracked files take part in the commit groups.

    Parameters
    ----------
    untracked : List[ChangedFile]
        Untracked files that are not ignored.
    mode : str
        ``"all"``, ``"none"`` or ``"ask"``. In ask mode the user picks
        ``a`` (all, the default), ``n`` (none) or ``s`` (a comma-separated
        list of numbers). Unrecognised answers include all files.
    """
    if not untracked or mode == "none":
        return []
    if mode == "all":
        return list(untracked)

    click.echo(f"\n📝 Found {_plural(len(untracked), 'untracked file')} not in .gitignore:")
    for idx, changed in enumerate(untracked, start=1):
        click.echo(f"  {idx}. {changed.path}")
    click.echo("\nOptions:")
    click.echo("  [a] Include all untracked files (default)")
    click.echo("  [n] Include none")
    click.echo("  [s] Select specific files")
    choice = click.prompt("Your choice [a/n/s]", default="a", show_default=False).strip().lower()

    if choice in ("", "a", "all"):
        print_success(f"Including all {_plural(len(untracked), 'untracked file')}")
        return list(untracked)
    if choice in ("n", "none"):
        print_success("Excluding all untracked files")
        return []
    if choice in ("s", "select"):
        raw = click.prompt("Enter file numbers to include (comma-separated, e.g. 1,3,5)", default="", show_default=False)
        selected: List[ChangedFile] = []
        for part in raw.split(","):
            part = part.strip()
            if part.isdigit() and 1 <= int(part) <= len(untracked):
                changed = untracked[int(part) - 1]
                if changed not in selected:
                    selected.append(changed)
        if not selected:
            print_warning("No valid selections, including all files")
            return list(untracked)
        print_success(f"Including {_plural(len(selected), 'selected file')}")
        for changed in selected:
            print_info(changed.path, indent=1)
        return selected

    print_warning("Invalid choice, defaulting to include all")
    return list(untracked)


def create_generator(config: dict) -> Optional[CommitMessageGenerator]:
    """Build the AI generator, or return None when no token is configured."""
    if not config.get("token"):
        return None
    return CommitMessageGenerator(ChatClient.from_config(config))


def build_commit_groups(
    client: GitClient,
    files: List[ChangedFile],
    ticket: Optional[str],
    generator: Optional[CommitMessageGenerator],
) -> List[ChangeGroup]:
    """Group ``files`` with the AI generator if available, else heuristically."""
    diffs = extract_diffs(client, files)
    if generator is not None:
        with ProgressIndicator("Asking AI to group the changes"):
            return generator.generate_groups(files, ticket, diffs)
    with ProgressIndicator("Grouping changes heuristically"):
        return build_groups(files, ticket=ticket, diffs=diffs)


def print_summary(groups: List[ChangeGroup]) -> None:
    committed = [group for group in groups if group.committed]
    click.echo(f"\n{'=' * 60}")
    click.echo("✨ Summary")
    click.echo(f"{'=' * 60}\n")
    for group in committed:
        click.echo(f"  ✓ {group.header()}")
    pending = len(groups) - len(committed)
    click.echo(f"\n  Committed: {len(committed)}/{len(groups)} group{'s' if len(groups) != 1 else ''}")
    if pending:
        click.echo(f"  ⚠ Left uncommitted: {_plural(pending, 'group')}")


@click.command()
@click.option(
    "--repo",
    "repo",
    type=click.Path(file_okay=False, path_type=Path),
    help="Path to the git repository (defaults to the current directory).",
)
@click.option("--no-ai", "no_ai", is_flag=True, help="Disable AI and use heuristic grouping.")
@click.option(
    "--untracked",
    type=click.Choice(["ask", "all", "none"]),
    default="ask",
    show_default=True,
    help="How to handle untracked files.",
)
@click.option("--log", "log_enabled", is_flag=True, help="Enable logging to a file.")
@click.option("--log-local", is_flag=True, help="Write the log to ./commit-wizard.log.")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output (also DEBUG log level).")
@click.version_option(version=__version__, prog_name="commit-wizard")
def main(
    repo: Optional[Path],
    no_ai: bool,
    untracked: str,
    log_enabled: bool,
    log_local: bool,
    verbose: bool,
) -> None:
    """🧙 Interactive tool for creating conventional commits.

    Groups your changes into Conventional Commits, lets you review, edit
    and regenerate each message, and commits the groups one by one.
    """
    ctx = click.get_current_context(silent=True)

    try:
        log_path = init_logging(log_enabled or log_local, log_local, verbose)
    except OSError as exc:
        print_warning(f"Could not open log file: {exc}")
        log_path = None
    if log_path is not None:
        logger.info("Commit Wizard v%s", __version__)
        if verbose:
            print_info(f"Logging to: {log_path}")

    try:
        # Step 1: Detect repository
        print_step(1, "Detecting Repository")
        repo_root = detect_repository(repo or Path.cwd())
        client = GitClient(repo_root)

        # Step 2: Load configuration
        print_step(2, "Loading Configuration")
        try:
            config = load_config()
        except ConfigError as exc:
            print_error(f"Configuration error: {exc}")
            raise click.exceptions.Exit(EXIT_CONFIG_ERROR)

        generator = None if no_ai else create_generator(config)
        if generator is not None:
            print_success(f"AI mode enabled ({config['provider']}, model {config['model']})")
        elif no_ai:
            print_info("AI mode disabled by --no-ai; using heuristic grouping")
        else:
            print_info("No API token found (GITHUB_TOKEN, GH_TOKEN or OPENAI_API_KEY); using heuristic grouping")
        logger.info("AI mode: enabled=%s no_ai_flag=%s", generator is not None, no_ai)

        # Step 3: Branch and ticket
        print_step(3, "Reading Branch")
        ticket = None
        try:
            branch = client.get_current_branch()
            ticket = extract_ticket_from_branch(branch)
            print_info(f"Current branch: {click.style(branch, fg='cyan', bold=True)}")
            if ticket:
                print_success(f"Detected ticket: {ticket}")
        except GitError as exc:
            print_warning(f"Could not determine current branch: {exc}")

        # Step 4: Collect changes
        print_step(4, "Analyzing Changes")
        try:
            with ProgressIndicator("Scanning for changed files"):
                files = client.collect_changed_files(include_untracked=False)
                untracked_files = client.collect_untracked_files()
        except GitError as exc:
            print_error(f"VCS error: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)

        files.extend(select_untracked_files(untracked_files, untracked))
        if not files:
            print_warning("No changes found in repository.")
            print_info("Modify some files or create new ones to get started.", indent=1)
            raise click.exceptions.Exit(EXIT_NO_CHANGES)

        print_success(f"Found {_plural(len(files), 'changed file')}")
        for changed in files[:PREVIEW_FILES]:
            print_info(changed.path, indent=1)
        if len(files) > PREVIEW_FILES:
            print_info(f"... and {len(files) - PREVIEW_FILES} more", indent=1)

        # Step 5: Build groups and start the interface
        print_step(5, "Creating Commit Groups")
        try:
            groups = build_commit_groups(client, files, ticket, generator)
            app_state = AppState(groups)
        except DuplicateFileError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_GENERIC_ERROR)
        print_success(f"Created {_plural(len(groups), 'commit group')}")
        logger.info("Final result: %d commit groups", len(groups))

        try:
            run(app_state, repo_root, generator is not None, git_client=client, generator=generator)
        except TerminalError as exc:
            print_error(f"Terminal error: {exc}")
            raise click.exceptions.Exit(EXIT_TERMINAL_ERROR)

        print_summary(app_state.groups)
        raise click.exceptions.Exit(EXIT_SUCCESS)

    except (click.exceptions.Exit, click.exceptions.Abort):
        raise
    except Exception as exc:
        logger.exception("Unhandled error: %s", exc)
        print_error(f"Unexpected error: {exc}")
        ctx.exit(EXIT_GENERIC_ERROR)
