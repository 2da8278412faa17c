"""
Client for OpenAI-compatible chat-completion APIs.

This client wraps HTTP requests to the GitHub Models API or the OpenAI
API. Both accept a list of chat messages and answer with a list of
choices. On error conditions (HTTP errors, timeouts, malformed
responses), a :class:`LLMError` is raised.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List

import requests


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class LLMError(Exception):
    """Raised when communication with the language model fails."""

    pass


def strip_thinking_tags(text: str) -> str:
    """Remove reasoning tags from model responses.

    Reasoning models may wrap their thinking process in tags such as
    ``<think>`` or ``<reasoning>``. The tags and their contents are
    removed, leaving only the actual output.

    Examples
    --------
    >>> strip_thinking_tags("<think>reasoning...</think>add login form")
    'add login form'
    >>> strip_thinking_tags("<Thinking>x</Thinking>\\n\\nfix crash")
    'fix crash'
    """
    result = text
    for tag in ("think", "thinking", "thought", "reasoning"):
        result = re.sub(rf"<{tag}>.*?</{tag}>", "", result, flags=re.DOTALL | re.IGNORECASE)
    return result.strip()


@dataclass
class ChatClient:
    """Client for a chat-completions endpoint.

    Parameters
    ----------
    api_url : str
        Full URL of the chat-completions endpoint.
    token : str
        Bearer token sent in the ``Authorization`` header.
    model : str
        Name of the model to use, e.g. ``"gpt-4"``.
    request_timeout : float, optional
        Timeout in seconds for HTTP requests. Defaults to 30 seconds.
    max_tokens : int, optional
        Completion token limit. Defaults to 200.
    temperature : float, optional
        Sampling temperature. Defaults to 0.3.
    token_field : str, optional
        Name of the payload field carrying the token limit. The OpenAI API
        expects ``"max_completion_tokens"``.
    """

    api_url: str
    token: str
    model: str
    request_timeout: float = 30.0
    max_tokens: int = 200
    temperature: float = 0.3
    token_field: str = "max_tokens"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ChatClient":
        """Build a client from the dictionary returned by ``load_config``."""
        token_field = "max_completion_tokens" if config.get("provider") == "openai" else "max_tokens"
        return cls(
            api_url=config["api_url"],
            token=config["token"],
            model=config["model"],
            request_timeout=config.get("request_timeout", 30.0),
            max_tokens=config.get("max_tokens", 200),
            temperature=config.get("temperature", 0.3),
            token_field=token_field,
        )

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one system and one user message and return the answer.

        Raises
        ------
        LLMError
            If the request fails, the server returns an error, or the
            response has no usable content.
        """
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            self.token_field: self.max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
        }
        logger.debug("Sending request to %s (model=%s, prompt length=%d)", self.api_url, self.model, len(user_prompt))
        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers=headers,
                timeout=self.request_timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to connect to AI API: %s", exc)
            raise LLMError(str(exc)) from exc
        if response.status_code != 200:
            logger.error("AI API returned status %s: %s", response.status_code, response.text)
            raise LLMError(f"API request failed with status {response.status_code}: {response.text}")
        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as exc:
            logger.error("Failed to parse AI API response: %s", exc)
            raise LLMError("Failed to parse API response") from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise LLMError("No response from AI")
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise LLMError("Unexpected response structure from AI API")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise LLMError("Unexpected response structure from AI API")
        content = message.get("content")
        if not isinstance(content, str):
            raise LLMError("Unexpected response structure from AI API")
        logger.debug("Received response of %d characters", len(content))
        return strip_thinking_tags(content)
