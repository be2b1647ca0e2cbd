"""
Recipe Intake - LLM Client.

Provides structured LLM calls via Instructor and plain chat completions.
"""

from recipe_intake.llm.client import LLMNotConfigured, call_llm, call_llm_chat, get_client
from recipe_intake.llm.model_router import get_model

__all__ = [
    "LLMNotConfigured",
    "get_client",
    "call_llm",
    "call_llm_chat",
    "get_model",
]
