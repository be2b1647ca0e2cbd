"""Data models for ingredient recovery."""

from dataclasses import dataclass, field
from enum import Enum

from recipe_intake.recipe_import.models import Ingredient


class InconsistencyType(str, Enum):
    MISSING_IN_STEPS = "missing_in_steps"
    DUPLICATE_INGREDIENT = "duplicate_ingredient"
    UNUSED_INGREDIENT = "unused_ingredient"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class QuantitySource(str, Enum):
    """Where an inferred quantity came from, most to least grounded."""

    INSTRUCTIONS = "instructions"
    CONTEXT = "context"
    COMMON = "common"
    AI = "ai"


@dataclass
class RecoveryOptions:
    """Each stage can be switched off independently."""

    enable_missing_detection: bool = True
    enable_quantity_inference: bool = True
    enable_consistency_check: bool = True
    enable_optionality_inference: bool = True
    max_inferred_ingredients: int = 5
    min_candidate_confidence: float = 0.4
    use_ai_for_inference: bool = True


@dataclass
class MissingIngredient:
    """An ingredient the instructions use but the list omits."""

    name: str
    mentioned_in: list[str] = field(default_factory=list)
    suggested_quantity: float | None = None
    suggested_unit: str | None = None
    confidence: float = 0.0
    context: str = ""


@dataclass
class InferredQuantity:
    ingredient_name: str
    inferred_unit: str | None
    confidence: float
    reasoning: str
    source: QuantitySource
    original_quantity: float | None = None
    original_unit: str | None = None
    inferred_quantity: float | None = None


@dataclass
class Inconsistency:
    type: InconsistencyType
    ingredient_name: str
    detail: str
    severity: Severity = Severity.MEDIUM


@dataclass
class RecoveryResult:
    """
    Outcome of ingredient recovery.

    recovered_ingredients is always a superset of original_ingredients
    (same order, then inferred additions).
    """

    original_ingredients: list[Ingredient]
    recovered_ingredients: list[Ingredient]
    missing_ingredients: list[MissingIngredient] = field(default_factory=list)
    inferred_quantities: list[InferredQuantity] = field(default_factory=list)
    inconsistencies: list[Inconsistency] = field(default_factory=list)
    confidence: float = 0.5
    recovery_notes: list[str] = field(default_factory=list)
