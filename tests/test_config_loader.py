import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from commit_wizard.config.loader import (
    DEFAULT_GITHUB_MODEL,
    DEFAULT_OPENAI_MODEL,
    GITHUB_MODELS_API_URL,
    OPENAI_API_URL,
    ConfigError,
    load_config,
)


class TestConfigLoader(unittest.TestCase):
    """Tests for the configuration loader."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_dir = Path(self._tmp.name)
        patcher = patch("commit_wizard.config.loader._get_config_directory", return_value=self.config_dir)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def write_config(self, content) -> None:
        text = content if isinstance(content, str) else json.dumps(content)
        (self.config_dir / "config.json").write_text(text)

    def test_no_tokens_disables_ai(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            result = load_config()
        self.assertIsNone(result["provider"])
        self.assertIsNone(result["token"])
        self.assertEqual(result["request_timeout"], 30.0)
        self.assertEqual(result["max_tokens"], 200)
        self.assertEqual(result["temperature"], 0.3)

    def test_github_token_selects_github(self) -> None:
        with patch.dict(os.environ, {"GITHUB_TOKEN": "gh-secret"}):
            result = load_config()
        self.assertEqual(result["provider"], "github")
        self.assertEqual(result["token"], "gh-secret")
        self.assertEqual(result["api_url"], GITHUB_MODELS_API_URL)
        self.assertEqual(result["model"], DEFAULT_GITHUB_MODEL)

    def test_gh_token_is_accepted(self) -> None:
        with patch.dict(os.environ, {"GH_TOKEN": "  gh-alt  "}):
            result = load_config()
        self.assertEqual(result["token"], "gh-alt")

    def test_github_is_preferred_over_openai(self) -> None:
        with patch.dict(os.environ, {"GITHUB_TOKEN": "gh", "OPENAI_API_KEY": "sk"}):
            result = load_config()
        self.assertEqual(result["provider"], "github")

    def test_openai_token_selects_openai(self) -> None:
        with patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test", "OPENAI_MODEL": "gpt-4o"}):
            result = load_config()
        self.assertEqual(result["provider"], "openai")
        self.assertEqual(result["api_url"], OPENAI_API_URL)
        self.assertEqual(result["model"], "gpt-4o")

    def test_model_environment_variable_for_github(self) -> None:
        with patch.dict(os.environ, {"GITHUB_TOKEN": "gh", "GITHUB_COPILOT_MODEL": "gpt-4o-mini"}):
            result = load_config()
        self.assertEqual(result["model"], "gpt-4o-mini")

    def test_config_file_overrides(self) -> None:
        self.write_config(
            {"provider": "openai", "model": "o3-mini", "request_timeout": 10, "max_tokens": 300, "temperature": 0}
        )
        with patch.dict(os.environ, {"GITHUB_TOKEN": "gh", "OPENAI_API_KEY": "sk"}):
            result = load_config()
        self.assertEqual(result["provider"], "openai")
        self.assertEqual(result["token"], "sk")
        self.assertEqual(result["model"], "o3-mini")
        self.assertEqual(result["request_timeout"], 10.0)
        self.assertEqual(result["max_tokens"], 300)
        self.assertEqual(result["temperature"], 0.0)

    def test_configured_provider_without_token(self) -> None:
        self.write_config({"provider": "openai"})
        result = load_config()
        self.assertEqual(result["provider"], "openai")
        self.assertIsNone(result["token"])
        self.assertEqual(result["model"], DEFAULT_OPENAI_MODEL)

    def test_invalid_json(self) -> None:
        self.write_config("{invalid}")
        with self.assertRaises(ConfigError):
            load_config()

    def test_config_must_be_an_object(self) -> None:
        self.write_config([1, 2])
        with self.assertRaises(ConfigError):
            load_config()

    def test_invalid_field_types(self) -> None:
        bad_values = [
            {"provider": "ollama"},
            {"model": 4},
            {"request_timeout": "slow"},
            {"temperature": True},
            {"max_tokens": 1.5},
        ]
        for data in bad_values:
            with self.subTest(data=data):
                self.write_config(data)
                with self.assertRaises(ConfigError):
                    load_config()


if __name__ == "__main__":
    unittest.main()
