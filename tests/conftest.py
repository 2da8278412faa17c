import shutil
from pathlib import Path
import tempfile
import pytest


TOKEN_VARIABLES = (
    "GITHUB_TOKEN",
    "GH_TOKEN",
    "OPENAI_API_KEY",
    "GITHUB_COPILOT_MODEL",
    "OPENAI_MODEL",
)


@pytest.fixture(scope="session", autouse=True)
def isolate_home_config():
    """Temporarily move any existing user-level commit_wizard config out of the way.

    Tests expect no user-level config to exist. This fixture moves the file
    aside for the duration of the test session and restores it afterwards.
    """
    config_path = Path.home() / ".commit_wizard" / "config.json"
    backup_dir = None
    moved = False
    if config_path.exists():
        backup_dir = Path(tempfile.mkdtemp(prefix="commit_wizard_backup_"))
        shutil.move(str(config_path), str(backup_dir / "config.json"))
        moved = True

    try:
        yield
    finally:
        if moved and backup_dir is not None:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(backup_dir / "config.json"), str(config_path))
            shutil.rmtree(str(backup_dir), ignore_errors=True)


@pytest.fixture(autouse=True)
def clear_provider_tokens(monkeypatch):
    """Make sure API tokens from the developer's shell never reach a test."""
    for name in TOKEN_VARIABLES:
        monkeypatch.delenv(name, raising=False)
