"""
Ingredient name matching.

Decides whether an ingredient "covers" a food mention found in instruction
text, and finds lexicon mentions in free text. Everything compares
canonical word sequences (lowercase, punctuation stripped, singularized), so
"Tomatoes" and "tomato" are the same thing.
"""

import re

from recipe_intake.tools.normalize import canonical_words

from .lexicon import FOOD_PHRASES, FOOD_WORDS, SYNONYM_GROUPS


def _contains(haystack: tuple[str, ...], needle: tuple[str, ...]) -> bool:
    """True when needle appears as a contiguous run inside haystack."""
    if not needle or len(needle) > len(haystack):
        return False
    size = len(needle)
    return any(haystack[i : i + size] == needle for i in range(len(haystack) - size + 1))


class IngredientMatcher:
    """
    Pluggable matching rules for ingredient recovery.

    Subclass and override `covers` / `is_mentioned` to change how loosely
    ingredient names match instruction text.
    """

    def __init__(
        self,
        lexicon: list[str] | None = None,
        synonym_groups: list[list[str]] | None = None,
    ):
        entries = lexicon if lexicon is not None else FOOD_PHRASES + FOOD_WORDS
        phrases = {tuple(canonical_words(entry)) for entry in entries}
        # Longest first so "olive oil" is consumed before "oil"
        self._phrases = sorted((p for p in phrases if p), key=len, reverse=True)
        self._max_len = max((len(p) for p in self._phrases), default=0)
        self._phrase_set = set(self._phrases)
        self._food_words = {p[0] for p in self._phrases if len(p) == 1}

        self._groups: dict[tuple[str, ...], int] = {}
        for index, group in enumerate(synonym_groups if synonym_groups is not None else SYNONYM_GROUPS):
            for name in group:
                self._groups[tuple(canonical_words(name))] = index

    @staticmethod
    def key(name: str) -> str:
        """Canonical comparison key for a name."""
        return " ".join(canonical_words(name))

    def _synonyms(self, words: tuple[str, ...]) -> list[tuple[str, ...]]:
        group = self._groups.get(words)
        if group is None and words:
            group = self._groups.get(words[-1:])
        if group is None:
            return []
        return [phrase for phrase, index in self._groups.items() if index == group]

    def covers(self, ingredient_name: str, mention: str) -> bool:
        """True when an ingredient with this name accounts for the mention."""
        ingredient = tuple(canonical_words(ingredient_name))
        found = tuple(canonical_words(mention))
        if not ingredient or not found:
            return False

        if ingredient == found or ingredient[-1] == found[-1]:
            return True
        # "chicken breast" covers "chicken", "chicken stock" is a different food
        if _contains(ingredient, found) and ingredient[-1] not in self._food_words:
            return True
        if _contains(found, ingredient) and found[-1] not in self._food_words:
            return True
        return found in self._synonyms(ingredient) or ingredient in self._synonyms(found)

    def find_mentions(self, text: str) -> list[str]:
        """
        Lexicon food mentions in text, in order, repeats included.

        Multi-word phrases win over the single words inside them.
        """
        tokens = canonical_words(text)
        mentions = []
        i = 0
        while i < len(tokens):
            for size in range(min(self._max_len, len(tokens) - i), 0, -1):
                candidate = tuple(tokens[i : i + size])
                if candidate in self._phrase_set:
                    mentions.append(" ".join(candidate))
                    i += size
                    break
            else:
                i += 1
        return mentions

    def is_mentioned(self, ingredient_name: str, text: str) -> bool:
        """True when the text refers to the ingredient by name, head noun, or synonym."""
        ingredient = tuple(canonical_words(ingredient_name))
        if not ingredient:
            return False

        tokens = tuple(canonical_words(text))
        if _contains(tokens, ingredient) or ingredient[-1] in tokens:
            return True
        return any(_contains(tokens, synonym) for synonym in self._synonyms(ingredient))

    def locate(self, ingredient_name: str, line: str) -> int | None:
        """Character offset of the ingredient's first mention in a line, by full name then head noun."""
        words = canonical_words(ingredient_name)
        if not words:
            return None

        for phrase in (words, words[-1:]):
            # Plural-insensitive: match the singular stem plus an optional suffix
            pattern = r"\b" + r"\s+".join(re.escape(w) + r"(?:e?s)?" for w in phrase) + r"\b"
            match = re.search(pattern, line, re.IGNORECASE)
            if match:
                return match.start()
        return None
