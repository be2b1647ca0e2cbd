"""
Ingredient recovery.

Runs after parsing. Cross-checks the ingredient list against the
instructions to catch what extraction lost:

1. Missing ingredients: foods the steps use but the list omits
2. Quantities: fills in amounts for listed ingredients that have none
3. Consistency: duplicates, listed-but-unused, used-but-unlisted
4. Optionality: "if desired" / "optional" / "to taste" in a step

Recovery never raises. Anything unexpected degrades to the original list
with a neutral confidence and a note saying why.
"""

import json
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace

from recipe_intake.recipe_import.models import Ingredient
from recipe_intake.tools.normalize import QUANTITY_PATTERN, UNIT_PATTERN, clean_unit, parse_quantity

from .lexicon import (
    COMMON_QUANTITIES,
    CONTEXTUAL_AMOUNTS,
    OPTIONAL_QUALIFIER_RE,
    PANTRY_STAPLES,
    QUALIFIER_CONTEXT_RE,
)
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

logger = logging.getLogger(__name__)

CompleteFn = Callable[[list[dict]], Awaitable[str]]

INFERRED_NOTE = "Inferred from instructions"
DEGRADED_CONFIDENCE = 0.5
AI_CONFIDENCE_CAP = 0.8
INSTRUCTION_AMOUNT_CONFIDENCE = 0.75
AMOUNT_WINDOW_WORDS = 4

_AMOUNT_RE = re.compile(rf"({QUANTITY_PATTERN})\s*({UNIT_PATTERN})\.?(?=\s|$)", re.IGNORECASE)
# Clause boundaries; a decimal point is not one
_CLAUSE_BREAK_RE = re.compile(r"[,;:!?()]|\.(?!\d)")
_CONJUNCTION_RE = re.compile(r"\b(?:and|or|with|then|plus)\b", re.IGNORECASE)
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

QUANTITY_SYSTEM_PROMPT = """You are a cooking expert specializing in ingredient quantities. Given an ingredient name and recipe context, infer the most likely quantity and unit.

RULES:
- Return only realistic cooking quantities
- Use standard units: tsp, tbsp, cup, oz, g, ml, lb, kg, clove, bunch, pinch
- Consider the recipe context and serving size
- If uncertain, use common cooking quantities
- Return JSON: {"quantity": number, "unit": "string", "confidence": 0.0-1.0, "reasoning": "explanation"}"""


@dataclass
class _Candidate:
    name: str
    lines: list[str] = field(default_factory=list)
    count: int = 0


class IngredientRecovery:
    """
    Recovers ingredients the extraction dropped or left vague.

    Usage:
        recovery = IngredientRecovery(complete=call_llm_chat)
        result = await recovery.recover(draft.ingredients, draft.instructions, raw_text)
    """

    def __init__(self, complete: CompleteFn | None = None, matcher: IngredientMatcher | None = None):
        self._complete = complete
        self.matcher = matcher or IngredientMatcher()
        self._common = {self.matcher.key(name): value for name, value in COMMON_QUANTITIES.items()}

    async def recover(
        self,
        ingredients: list[Ingredient],
        instruction_lines: list[str],
        raw_text: str = "",
        options: RecoveryOptions | None = None,
    ) -> RecoveryResult:
        options = options or RecoveryOptions()
        originals = [replace(ingredient) for ingredient in ingredients]

        try:
            return await self._recover(originals, instruction_lines, raw_text or "", options)
        except Exception as e:
            logger.warning(f"Ingredient recovery failed, returning original list: {e}")
            return RecoveryResult(
                original_ingredients=originals,
                recovered_ingredients=[replace(ingredient) for ingredient in originals],
                confidence=DEGRADED_CONFIDENCE,
                recovery_notes=[f"Recovery failed: {e}"],
            )

    async def _recover(
        self,
        originals: list[Ingredient],
        instruction_lines: list[str],
        raw_text: str,
        options: RecoveryOptions,
    ) -> RecoveryResult:
        instructions = [line.strip() for line in instruction_lines if line and line.strip()]
        working = [replace(ingredient) for ingredient in originals]
        listed = working[: len(originals)]

        missing: list[MissingIngredient] = []
        inferred: list[InferredQuantity] = []
        inconsistencies: list[Inconsistency] = []
        notes: list[str] = []

        candidates = self._uncovered_mentions(listed, instructions)

        # 1. Missing ingredients
        suggested: list[InferredQuantity] = []
        if options.enable_missing_detection and candidates:
            missing, suggested = self._detect_missing(candidates, instructions, raw_text, options)
            for item in missing:
                working.append(
                    Ingredient(
                        name=item.name,
                        quantity=item.suggested_quantity,
                        unit=item.suggested_unit,
                        notes=INFERRED_NOTE,
                        optional=any(OPTIONAL_QUALIFIER_RE.search(line) for line in item.mentioned_in),
                        confidence=item.confidence,
                        inferred=True,
                    )
                )
            if missing:
                names = ", ".join(item.name for item in missing)
                notes.append(f"Added {len(missing)} ingredient(s) mentioned in the instructions: {names}")

        # 2. Quantities for listed ingredients
        if options.enable_quantity_inference:
            for ingredient in listed:
                if not self._needs_quantity(ingredient):
                    continue
                inference = await self._infer_quantity(ingredient, instructions, raw_text, options, notes)
                if inference is None:
                    continue
                inferred.append(inference)
                if inference.inferred_quantity is not None:
                    ingredient.quantity = inference.inferred_quantity
                ingredient.unit = inference.inferred_unit or ingredient.unit
                ingredient.inferred = True
                ingredient.confidence = min(ingredient.confidence, inference.confidence)
            if inferred:
                notes.append(f"Inferred quantities for {len(inferred)} ingredient(s)")

        # Amounts given to added ingredients are inferences too
        inferred.extend(suggested)

        # 3. Consistency
        if options.enable_consistency_check:
            added = {item.name for item in missing}
            inconsistencies = self._check_consistency(working, listed, instructions, candidates, added)

        # 4. Optionality
        if options.enable_optionality_inference:
            marked = self._infer_optionality(working, instructions)
            if marked:
                notes.append(f"Marked optional from instructions: {', '.join(marked)}")

        return RecoveryResult(
            original_ingredients=originals,
            recovered_ingredients=working,
            missing_ingredients=missing,
            inferred_quantities=inferred,
            inconsistencies=inconsistencies,
            confidence=self._score(originals, listed, instructions, inconsistencies),
            recovery_notes=notes,
        )

    # -------------------------------------------------------------------------
    # Missing ingredients
    # -------------------------------------------------------------------------

    def _uncovered_mentions(self, listed: list[Ingredient], instructions: list[str]) -> list[_Candidate]:
        """Food mentions in the instructions that no listed ingredient accounts for."""
        candidates: list[_Candidate] = []

        for line in instructions:
            for mention in self.matcher.find_mentions(line):
                if any(self.matcher.covers(ingredient.name, mention) for ingredient in listed):
                    continue

                candidate = next((c for c in candidates if self.matcher.covers(c.name, mention)), None)
                if candidate is None:
                    candidate = _Candidate(name=mention)
                    candidates.append(candidate)
                candidate.count += 1
                if line not in candidate.lines:
                    candidate.lines.append(line)

        return candidates

    def _detect_missing(
        self,
        candidates: list[_Candidate],
        instructions: list[str],
        raw_text: str,
        options: RecoveryOptions,
    ) -> tuple[list[MissingIngredient], list[InferredQuantity]]:
        # Raw text outside the steps, e.g. a garbled ingredient block
        elsewhere = raw_text
        for line in instructions:
            elsewhere = elsewhere.replace(line, " ")

        scored = []
        for candidate in candidates:
            confidence = self._candidate_confidence(candidate, elsewhere)
            if confidence < options.min_candidate_confidence:
                logger.debug(f"Dropping missing-ingredient candidate {candidate.name} ({confidence})")
                continue
            scored.append((confidence, candidate))

        scored.sort(key=lambda pair: (pair[0], pair[1].count), reverse=True)

        missing = []
        suggested = []
        for confidence, candidate in scored[: max(options.max_inferred_ingredients, 0)]:
            suggestion = (
                self._from_instructions(candidate.name, candidate.lines)
                or self._from_context(candidate.name, candidate.lines)
                or self._from_common(candidate.name)
            )
            missing.append(
                MissingIngredient(
                    name=candidate.name,
                    mentioned_in=list(candidate.lines),
                    suggested_quantity=suggestion.inferred_quantity if suggestion else None,
                    suggested_unit=suggestion.inferred_unit if suggestion else None,
                    confidence=confidence,
                    context=candidate.lines[0],
                )
            )
            if suggestion is not None:
                suggested.append(suggestion)
        return missing, suggested

    def _candidate_confidence(self, candidate: _Candidate, elsewhere: str) -> float:
        score = 0.45

        common = self._common_entry(candidate.name)
        if common is not None:
            score += 0.2 * common[2]
        if any(QUALIFIER_CONTEXT_RE.search(line) for line in candidate.lines):
            score += 0.1
        score += min(0.15, 0.05 * (candidate.count - 1))
        if elsewhere.strip() and self.matcher.is_mentioned(candidate.name, elsewhere):
            score += 0.1

        return round(min(score, 0.9), 2)

    # -------------------------------------------------------------------------
    # Quantities
    # -------------------------------------------------------------------------

    @staticmethod
    def _needs_quantity(ingredient: Ingredient) -> bool:
        if ingredient.quantity not in (None, 0):
            return False
        # "to taste" is a deliberate non-amount
        if ingredient.unit == "to taste" or "to taste" in (ingredient.notes or "").lower():
            return False
        return True

    async def _infer_quantity(
        self,
        ingredient: Ingredient,
        instructions: list[str],
        raw_text: str,
        options: RecoveryOptions,
        notes: list[str],
    ) -> InferredQuantity | None:
        mentioned = [line for line in instructions if self.matcher.is_mentioned(ingredient.name, line)]

        inference = (
            self._from_instructions(ingredient.name, mentioned)
            or self._from_context(ingredient.name, mentioned)
            or self._from_common(ingredient.name)
        )
        if inference is None and options.use_ai_for_inference and self._complete is not None:
            inference = await self._from_ai(ingredient.name, instructions, raw_text)
            if inference is None:
                notes.append(f"AI quantity inference failed for {ingredient.name}")

        if inference is not None:
            inference.original_quantity = ingredient.quantity
            inference.original_unit = ingredient.unit
        return inference

    def _from_instructions(self, name: str, lines: list[str]) -> InferredQuantity | None:
        """An amount written just before the ingredient, e.g. "add 2 tbsp olive oil"."""
        for line in lines:
            offset = self.matcher.locate(name, line)
            if offset is None:
                continue

            clause = _CLAUSE_BREAK_RE.split(line[:offset])[-1]
            window = " ".join(clause.split()[-AMOUNT_WINDOW_WORDS:])
            matches = list(_AMOUNT_RE.finditer(window))
            if not matches:
                continue

            match = matches[-1]
            between = window[match.end() :]
            # "2 cups flour and salt" gives the flour's amount, not the salt's
            if _CONJUNCTION_RE.search(between) or self.matcher.find_mentions(between):
                continue

            quantity = parse_quantity(match.group(1))
            if not quantity:
                continue
            return InferredQuantity(
                ingredient_name=name,
                inferred_quantity=quantity,
                inferred_unit=clean_unit(match.group(2)),
                confidence=INSTRUCTION_AMOUNT_CONFIDENCE,
                reasoning=f'Amount given in the instructions: "{line}"',
                source=QuantitySource.INSTRUCTIONS,
            )
        return None

    def _from_context(self, name: str, lines: list[str]) -> InferredQuantity | None:
        for line in lines:
            for pattern, quantity, unit, confidence in CONTEXTUAL_AMOUNTS:
                match = pattern.search(line)
                if match:
                    return InferredQuantity(
                        ingredient_name=name,
                        inferred_quantity=quantity,
                        inferred_unit=unit,
                        confidence=confidence,
                        reasoning=f'"{match.group(0)}" in the instructions',
                        source=QuantitySource.CONTEXT,
                    )
        return None

    def _common_entry(self, name: str) -> tuple[float, str, float] | None:
        words = self.matcher.key(name).split()
        # "extra virgin olive oil" falls back to "olive oil", then "oil"
        for start in range(len(words)):
            entry = self._common.get(" ".join(words[start:]))
            if entry is not None:
                return entry
        return None

    def _from_common(self, name: str) -> InferredQuantity | None:
        entry = self._common_entry(name)
        if entry is None:
            return None
        quantity, unit, confidence = entry
        return InferredQuantity(
            ingredient_name=name,
            inferred_quantity=quantity,
            inferred_unit=unit,
            confidence=confidence,
            reasoning="Typical amount for this ingredient",
            source=QuantitySource.COMMON,
        )

    async def _from_ai(self, name: str, instructions: list[str], raw_text: str) -> InferredQuantity | None:
        instructions_text = "\n".join(instructions)
        user_prompt = (
            f"Ingredient: {name}\n\n"
            f"Instructions:\n{instructions_text}\n\n"
            f"Original content context:\n{raw_text[:1000]}\n\n"
            "Infer the most appropriate quantity and unit for this ingredient."
        )
        messages = [
            {"role": "system", "content": QUANTITY_SYSTEM_PROMPT},
            {"role": "user", "content": user_prompt},
        ]

        try:
            response = await self._complete(messages)
            data = json.loads(_CODE_FENCE_RE.sub("", response.strip()))

            quantity = data.get("quantity")
            if isinstance(quantity, bool) or not isinstance(quantity, (int, float)) or quantity <= 0:
                raise ValueError(f"unusable quantity {quantity!r}")

            unit = data.get("unit")
            confidence = data.get("confidence")
            if confidence is None:
                confidence = 0.6
            elif isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
                raise ValueError(f"unusable confidence {confidence!r}")
        except Exception as e:
            logger.warning(f"AI quantity inference failed for {name}: {e}")
            return None

        return InferredQuantity(
            ingredient_name=name,
            inferred_quantity=float(quantity),
            inferred_unit=clean_unit(unit) if isinstance(unit, str) and unit.strip() else None,
            confidence=min(AI_CONFIDENCE_CAP, max(float(confidence), 0.0)),
            reasoning=str(data.get("reasoning") or "AI inference"),
            source=QuantitySource.AI,
        )

    # -------------------------------------------------------------------------
    # Consistency, optionality, confidence
    # -------------------------------------------------------------------------

    def _check_consistency(
        self,
        working: list[Ingredient],
        listed: list[Ingredient],
        instructions: list[str],
        candidates: list[_Candidate],
        added: set[str],
    ) -> list[Inconsistency]:
        issues = []

        counts: dict[str, int] = {}
        first_name: dict[str, str] = {}
        for ingredient in working:
            key = self.matcher.key(ingredient.name)
            if not key:
                continue
            counts[key] = counts.get(key, 0) + 1
            first_name.setdefault(key, ingredient.name)
        for key, count in counts.items():
            if count > 1:
                issues.append(
                    Inconsistency(
                        type=InconsistencyType.DUPLICATE_INGREDIENT,
                        ingredient_name=first_name[key],
                        detail=f"Listed {count} times",
                        severity=Severity.MEDIUM,
                    )
                )

        if instructions:
            steps_text = "\n".join(instructions)
            for ingredient in listed:
                if ingredient.optional or self.matcher.is_mentioned(ingredient.name, steps_text):
                    continue
                staple = self.matcher.key(ingredient.name) in PANTRY_STAPLES
                issues.append(
                    Inconsistency(
                        type=InconsistencyType.MISSING_IN_STEPS,
                        ingredient_name=ingredient.name,
                        detail="Listed but never used in the instructions",
                        severity=Severity.LOW if staple else Severity.MEDIUM,
                    )
                )

        for candidate in candidates:
            if candidate.name in added:
                continue
            issues.append(
                Inconsistency(
                    type=InconsistencyType.UNUSED_INGREDIENT,
                    ingredient_name=candidate.name,
                    detail="Used in the instructions but not in the ingredient list",
                    severity=Severity.HIGH,
                )
            )

        return issues

    def _infer_optionality(self, working: list[Ingredient], instructions: list[str]) -> list[str]:
        marked = []
        for line in instructions:
            if not OPTIONAL_QUALIFIER_RE.search(line):
                continue
            for ingredient in working:
                if not ingredient.optional and self.matcher.is_mentioned(ingredient.name, line):
                    ingredient.optional = True
                    marked.append(ingredient.name)
        return marked

    def _score(
        self,
        originals: list[Ingredient],
        listed: list[Ingredient],
        instructions: list[str],
        inconsistencies: list[Inconsistency],
    ) -> float:
        if originals:
            base = sum(ingredient.confidence for ingredient in originals) / len(originals)
        else:
            base = 0.3

        required = [ingredient for ingredient in listed if not ingredient.optional]
        if required and instructions:
            steps_text = "\n".join(instructions)
            validated = sum(1 for ingredient in required if self.matcher.is_mentioned(ingredient.name, steps_text))
            ratio = validated / len(required)
        else:
            ratio = 0.0

        penalty = sum(0.05 if issue.severity == Severity.LOW else 0.1 for issue in inconsistencies)
        score = 0.6 * base + 0.4 * ratio - penalty
        return round(min(max(score, 0.01), 0.99), 2)
