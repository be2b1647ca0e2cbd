"""
Recipe Intake - LLM Client.

Wraps OpenAI for two kinds of calls:
- call_llm: structured outputs via Instructor (recipe parsing)
- call_llm_chat: plain text completions (the `complete(messages)` capability
  used by quantity inference and vision OCR)

All LLM calls go through here for consistency and prompt logging.
"""

from typing import Any, TypeVar

import instructor
from openai import AsyncOpenAI
from pydantic import BaseModel

from recipe_intake.config import settings
from recipe_intake.llm.model_router import get_stage_config
from recipe_intake.llm.prompt_logger import log_prompt

T = TypeVar("T", bound=BaseModel)

_client: instructor.AsyncInstructor | None = None
_raw_client: AsyncOpenAI | None = None


class LLMNotConfigured(RuntimeError):
    """Raised when an LLM call is attempted without OPENAI_API_KEY."""


def get_raw_async_client() -> AsyncOpenAI:
    """Get the plain AsyncOpenAI client (singleton)."""
    global _raw_client

    if _raw_client is None:
        if not settings.openai_api_key:
            raise LLMNotConfigured("OPENAI_API_KEY is not set")
        _raw_client = AsyncOpenAI(api_key=settings.openai_api_key)

    return _raw_client


def get_client() -> instructor.AsyncInstructor:
    """Get the Instructor-wrapped async OpenAI client (singleton)."""
    global _client

    if _client is None:
        _client = instructor.from_openai(get_raw_async_client())

    return _client


async def call_llm(
    *,
    response_model: type[T],
    system_prompt: str,
    user_prompt: str,
    stage: str = "parser",
    complexity: str = "medium",
    max_retries: int = 2,
) -> T:
    """
    Make a structured LLM call with guaranteed schema compliance.

    Args:
        response_model: Pydantic model class for the response
        system_prompt: System message setting context
        user_prompt: User message with the actual request
        stage: Pipeline stage, used for temperature and prompt logs
        complexity: Task complexity for model selection
        max_retries: Number of retries if response doesn't match schema

    Returns:
        Instance of response_model with validated data
    """
    client = get_client()
    config = get_stage_config(stage, complexity)
    model = config.get("model", "gpt-4.1-mini")

    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]

    try:
        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            response_model=response_model,
            max_retries=max_retries,
            temperature=config.get("temperature", 0.2),
        )
        log_prompt(stage=stage, model=model, messages=messages, response=response)
        return response

    except Exception as e:
        log_prompt(stage=stage, model=model, messages=messages, error=str(e))
        raise


async def call_llm_chat(
    messages: list[dict[str, Any]],
    *,
    stage: str = "recovery",
    complexity: str = "low",
    model: str | None = None,
    max_tokens: int = 800,
) -> str:
    """
    Plain chat completion returning the response text.

    This is the default `complete(messages) -> str` capability injected
    into ingredient recovery.
    """
    client = get_raw_async_client()
    config = get_stage_config(stage, complexity)
    model = model or config.get("model", "gpt-4.1-mini")

    try:
        response = await client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=config.get("temperature", 0.2),
            max_tokens=max_tokens,
        )
        content = (response.choices[0].message.content or "").strip()
        log_prompt(stage=stage, model=model, messages=messages, response=content)
        return content

    except Exception as e:
        log_prompt(stage=stage, model=model, messages=messages, error=str(e))
        raise
