"""
Recipe Intake - Model Router.

Selects the OpenAI model and temperature for each pipeline stage.

Complexity levels:
- low: quantity guesses, short JSON answers -> gpt-4.1-mini
- medium: full recipe parsing -> gpt-4.1-mini
- high: reserved for reconciliation of noisy sources -> gpt-4.1
"""

from typing import Literal, TypedDict


class ModelConfig(TypedDict, total=False):
    """Configuration for model calls."""

    model: str
    temperature: float


MODEL_CONFIGS: dict[str, ModelConfig] = {
    "low": {
        "model": "gpt-4.1-mini",
        "temperature": 0.1,
    },
    "medium": {
        "model": "gpt-4.1-mini",
        "temperature": 0.2,
    },
    "high": {
        "model": "gpt-4.1",
        "temperature": 0.3,
    },
}

DEFAULT_CONFIG: ModelConfig = {
    "model": "gpt-4.1-mini",
    "temperature": 0.2,
}

# Stage-specific temperature overrides
# Extraction work should be as deterministic as possible
STAGE_TEMPERATURE: dict[str, float] = {
    "parser": 0.0,
    "recovery": 0.1,
    "ocr": 0.0,
}


def get_model(complexity: Literal["low", "medium", "high"] | str) -> str:
    """Get the model name for a complexity level."""
    return MODEL_CONFIGS.get(complexity, DEFAULT_CONFIG)["model"]


def get_stage_config(
    stage: str,
    complexity: Literal["low", "medium", "high"] | str,
) -> ModelConfig:
    """
    Get model configuration for a pipeline stage.

    Args:
        stage: Stage name ("parser", "recovery", "ocr")
        complexity: Task complexity level

    Returns:
        Model configuration with the stage's temperature applied
    """
    config = MODEL_CONFIGS.get(complexity, DEFAULT_CONFIG).copy()
    if stage in STAGE_TEMPERATURE:
        config["temperature"] = STAGE_TEMPERATURE[stage]
    return config
