"""
Language model integration for commit_wizard.

This package contains the :class:`ChatClient` for talking to an
OpenAI-compatible chat-completions API and the
:class:`CommitMessageGenerator`, which uses it to write commit messages
and to propose commit groups.
"""

from .ai_client import ChatClient, LLMError  # noqa: F401
from .commit_message_generator import CommitMessageGenerator, parse_commit_message  # noqa: F401
