"""Exceptions raised by the import pipeline."""

from .models import ExtractionAttempt

# Shown to users whenever nothing readable came out of their input
UNREADABLE_INPUT_MESSAGE = "Couldn't read this input. Try another format, or paste the recipe text."


class RecipeImportError(Exception):
    """Base class for import failures."""


class InputRejected(RecipeImportError):
    """Input failed validation before extraction started."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("; ".join(errors) or "Input rejected")


class ExtractionFailed(RecipeImportError):
    """Every extraction method was exhausted without producing text."""

    def __init__(self, message: str, attempts: list[ExtractionAttempt] | None = None):
        self.attempts = attempts or []
        super().__init__(message)

    @property
    def user_message(self) -> str:
        return UNREADABLE_INPUT_MESSAGE


class OcrFailed(ExtractionFailed):
    """Every OCR provider failed or returned empty text."""
