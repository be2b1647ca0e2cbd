"""
Recipe Intake - Configuration and settings.

All settings are read from the environment (or a local .env file).
Nothing here is required: without an OpenAI key the pipeline runs with
heuristic parsing and on-device OCR only.
"""

import logging
import sys
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Recipe intake settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI (optional - enables LLM parsing, vision OCR, AI quantity inference)
    openai_api_key: str | None = None
    vision_model: str = "gpt-4.1-mini"

    # Application
    intake_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Prompt logging
    # INTAKE_LOG_PROMPTS=1 - log to local files (dev only)
    intake_log_prompts: bool = False

    # Extraction
    http_timeout_seconds: float = 15.0
    http_retries: int = 1  # One retry on transient errors
    reader_proxy_url: str = "https://r.jina.ai/"

    # OCR
    ocr_language: str = "eng"
    ocr_timeout_seconds: float = 30.0
    tesseract_cmd: str | None = None

    # Parsing
    use_llm_parser: bool = True

    @property
    def is_development(self) -> bool:
        return self.intake_env == "development"

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging from settings.log_level (DEBUG when verbose)."""
    level = logging.DEBUG if verbose else getattr(logging, get_settings().log_level)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
