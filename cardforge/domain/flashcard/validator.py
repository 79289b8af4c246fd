from typing import Any, List, Mapping, Optional

from .config import MAX_SIDE_LENGTH
from .models import FlashcardSuggestion


class SuggestionValidator:
    """Turns untrusted model output into deduplicated flashcard suggestions."""

    def __init__(self, max_length: int = MAX_SIDE_LENGTH):
        self.max_length = max_length

    def clean_side(self, value: Any) -> Optional[str]:
        """
        Return the trimmed side text, or None when it is unusable.

        Args:
            value (Any): Raw ``front`` or ``back`` value from the model

        Returns:
            Optional[str]: Trimmed text of 1..max_length characters, else None
        """
        if not isinstance(value, str):
            return None
        text = value.strip()
        if not 1 <= len(text) <= self.max_length:
            return None
        return text

    def filter_suggestions(self, candidates: Any) -> List[FlashcardSuggestion]:
        """
        Validate, trim and deduplicate candidates. Never raises.

        Invalid candidates are dropped silently; duplicates are detected on the
        lower-cased trimmed front and the first occurrence wins. Output order
        follows input order.
        """
        if not isinstance(candidates, list):
            return []

        suggestions: List[FlashcardSuggestion] = []
        seen = set()

        for candidate in candidates:
            if not isinstance(candidate, Mapping):
                continue

            front = self.clean_side(candidate.get("front"))
            if front is None:
                continue
            back = self.clean_side(candidate.get("back"))
            if back is None:
                continue

            key = front.lower()
            if key in seen:
                continue
            seen.add(key)
            suggestions.append(FlashcardSuggestion(front=front, back=back))

        return suggestions
