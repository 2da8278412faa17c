"""
Configuration loader for commit_wizard.

AI settings come from two places. An optional JSON file named
``config.json`` in the ``~/.commit_wizard/`` directory can choose the
provider, the model and request limits. API tokens are only read from the
environment:

- ``GITHUB_TOKEN`` or ``GH_TOKEN`` for the GitHub Models API
  (model from ``GITHUB_COPILOT_MODEL``),
- ``OPENAI_API_KEY`` for the OpenAI API (model from ``OPENAI_MODEL``).

If the configuration file is malformed or has fields of the wrong type, a
:class:`ConfigError` is raised. A missing file is not an error.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


GITHUB_MODELS_API_URL = "https://models.github.com/chat/completions"
OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"

DEFAULT_GITHUB_MODEL = "gpt-4"
DEFAULT_OPENAI_MODEL = "gpt-4.1-2025-04-14"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_MAX_TOKENS = 200
DEFAULT_TEMPERATURE = 0.3

PROVIDERS = ("github", "openai")


class ConfigError(Exception):
    """Raised when the configuration file is invalid."""

    pass


def _get_config_directory() -> Path:
    """Return the per-user configuration directory, ``~/.commit_wizard/``."""
    return Path.home() / ".commit_wizard"


def _env_token(*names: str) -> Optional[str]:
    for name in names:
        value = os.environ.get(name, "")
        if value.strip():
            return value.strip()
    return None


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        logger.debug("No configuration file at %s; using defaults", config_path)
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    if "provider" in data and data["provider"] not in PROVIDERS:
        raise ConfigError(f"'provider' must be one of: {', '.join(PROVIDERS)}")
    if "model" in data and not isinstance(data["model"], str):
        raise ConfigError("'model' must be a string")
    for key in ("request_timeout", "temperature"):
        if key in data and (isinstance(data[key], bool) or not isinstance(data[key], (int, float))):
            raise ConfigError(f"'{key}' must be a number")
    if "max_tokens" in data and (isinstance(data["max_tokens"], bool) or not isinstance(data["max_tokens"], int)):
        raise ConfigError("'max_tokens' must be an integer")
    return data


def load_config() -> Dict[str, Any]:
    """Load AI settings from the config file and the environment.

    Returns
    -------
    Dict[str, Any]
        A dictionary with the keys:

        - provider (str|None): ``"github"``, ``"openai"`` or None
        - api_url (str|None): chat-completions endpoint of the provider
        - token (str|None): API token; None disables AI mode
        - model (str|None): model name
        - request_timeout (float): request timeout in seconds
        - max_tokens (int): completion token limit
        - temperature (float): sampling temperature

    Raises
    ------
    ConfigError
        If the configuration file is malformed or invalid.
    """
    config_path = _get_config_directory() / "config.json"
    data = _read_config_file(config_path)

    github_token = _env_token("GITHUB_TOKEN", "GH_TOKEN")
    openai_token = _env_token("OPENAI_API_KEY")

    provider = data.get("provider")
    if provider is None:
        provider = "github" if github_token else "openai" if openai_token else None

    token: Optional[str] = None
    api_url: Optional[str] = None
    model: Optional[str] = None
    if provider == "github":
        token = github_token
        api_url = GITHUB_MODELS_API_URL
        model = data.get("model") or os.environ.get("GITHUB_COPILOT_MODEL") or DEFAULT_GITHUB_MODEL
    elif provider == "openai":
        token = openai_token
        api_url = OPENAI_API_URL
        model = data.get("model") or os.environ.get("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL

    if provider and token is None:
        logger.warning("Provider '%s' selected but no API token found in the environment", provider)

    config = {
        "provider": provider,
        "api_url": api_url,
        "token": token,
        "model": model,
        "request_timeout": float(data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)),
        "max_tokens": int(data.get("max_tokens", DEFAULT_MAX_TOKENS)),
        "temperature": float(data.get("temperature", DEFAULT_TEMPERATURE)),
    }
    logger.debug("Loaded configuration: provider=%s model=%s", provider, model)
    return config
