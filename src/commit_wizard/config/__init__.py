"""
Configuration loading for commit_wizard.

Provides a loader for the AI provider settings, combining the optional
``~/.commit_wizard/config.json`` file with API tokens from the
environment. See :mod:`commit_wizard.config.loader` for details.
"""

from .loader import ConfigError, load_config  # noqa: F401
