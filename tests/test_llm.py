"""
Tests for the LLM layer: model routing, chat completions, prompt logging.

The OpenAI client is always mocked.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from recipe_intake.llm import LLMNotConfigured, call_llm_chat
from recipe_intake.llm import client as llm_client
from recipe_intake.llm import prompt_logger


def _run(coro):
    """Helper to run async code in tests."""
    return asyncio.run(coro)


def _fake_openai(content: str | None = "  {\"quantity\": 1}  ") -> MagicMock:
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


class TestModelRouter:
    """Tests for model routing based on complexity."""

    def test_low_complexity_uses_mini(self):
        from recipe_intake.llm.model_router import MODEL_CONFIGS

        assert MODEL_CONFIGS["low"]["model"] == "gpt-4.1-mini"

    def test_unknown_complexity_uses_default(self):
        from recipe_intake.llm.model_router import get_model

        assert get_model("extreme") == "gpt-4.1-mini"
        assert get_model("high") == "gpt-4.1"

    def test_stage_temperatures(self):
        """Extraction stages should be deterministic."""
        from recipe_intake.llm.model_router import get_stage_config

        assert get_stage_config("parser", "medium")["temperature"] == 0.0
        assert get_stage_config("recovery", "low")["temperature"] == 0.1
        assert get_stage_config("ocr", "high")["model"] == "gpt-4.1"

    def test_stage_config_does_not_mutate_defaults(self):
        from recipe_intake.llm.model_router import MODEL_CONFIGS, get_stage_config

        get_stage_config("parser", "high")
        assert MODEL_CONFIGS["high"]["temperature"] == 0.3


class TestChatCompletion:
    def test_returns_stripped_text(self):
        fake = _fake_openai()
        with (
            patch("recipe_intake.llm.client.get_raw_async_client", return_value=fake),
            patch("recipe_intake.llm.client.log_prompt") as log_prompt,
        ):
            text = _run(call_llm_chat([{"role": "user", "content": "hi"}]))

        assert text == '{"quantity": 1}'
        kwargs = fake.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 800
        assert log_prompt.call_args.kwargs["stage"] == "recovery"

    def test_explicit_model_and_stage(self):
        fake = _fake_openai(content=None)
        with (
            patch("recipe_intake.llm.client.get_raw_async_client", return_value=fake),
            patch("recipe_intake.llm.client.log_prompt"),
        ):
            text = _run(call_llm_chat([], stage="ocr", model="gpt-4o", max_tokens=2000))

        assert text == ""
        kwargs = fake.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["temperature"] == 0.0
        assert kwargs["max_tokens"] == 2000

    def test_errors_are_logged_and_raised(self):
        fake = MagicMock()
        fake.chat.completions.create = AsyncMock(side_effect=RuntimeError("rate limited"))
        with (
            patch("recipe_intake.llm.client.get_raw_async_client", return_value=fake),
            patch("recipe_intake.llm.client.log_prompt") as log_prompt,
        ):
            with pytest.raises(RuntimeError):
                _run(call_llm_chat([{"role": "user", "content": "hi"}]))

        assert log_prompt.call_args.kwargs["error"] == "rate limited"

    def test_no_key_raises(self, monkeypatch):
        monkeypatch.setattr(llm_client, "_raw_client", None)
        with pytest.raises(LLMNotConfigured):
            llm_client.get_raw_async_client()


class TestPromptLogger:
    def test_disabled_by_default(self):
        assert prompt_logger.log_prompt(stage="parser", model="m", messages=[]) is None

    def test_writes_markdown(self, tmp_path, monkeypatch):
        monkeypatch.setattr(prompt_logger, "LOG_DIR", tmp_path / "logs")
        monkeypatch.setattr(prompt_logger, "LOG_PROMPTS", False)
        prompt_logger.reset_session()
        prompt_logger.enable_prompt_logging(True)

        messages = [
            {"role": "system", "content": "Be exact."},
            {"role": "user", "content": [{"type": "image_url", "image_url": {"url": "data:image/png;base64,AAA"}}]},
        ]
        path = prompt_logger.log_prompt(stage="ocr", model="gpt-4.1-mini", messages=messages, response="2 eggs")

        assert path.name == "01_ocr.md"
        content = path.read_text(encoding="utf-8")
        assert "Be exact." in content
        assert "(multimodal content omitted)" in content
        assert "base64" not in content
        assert "2 eggs" in content
        assert prompt_logger.get_session_log_dir() == path.parent

        prompt_logger.reset_session()
