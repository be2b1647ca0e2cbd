"""Post-parse ingredient recovery and consistency checks."""

from .matching import IngredientMatcher
from .models import (
    Inconsistency,
    InconsistencyType,
    InferredQuantity,
    MissingIngredient,
    QuantitySource,
    RecoveryOptions,
    RecoveryResult,
    Severity,
)
from .recovery import IngredientRecovery

__all__ = [
    "IngredientMatcher",
    "IngredientRecovery",
    "Inconsistency",
    "InconsistencyType",
    "InferredQuantity",
    "MissingIngredient",
    "QuantitySource",
    "RecoveryOptions",
    "RecoveryResult",
    "Severity",
]
