import json

from cardforge.domain.chatbot.models import ChatCompletionResult


def make_text(length: int) -> str:
    """Deterministic prose of exactly ``length`` characters."""
    base = "Mitochondria are membrane-bound organelles that generate most of the cell's chemical energy. "
    return (base * (length // len(base) + 1))[:length]


def completion(flashcards) -> ChatCompletionResult:
    """A successful structured completion carrying ``{"flashcards": flashcards}``."""
    payload = {"flashcards": flashcards}
    return ChatCompletionResult.ok(payload, json.dumps(payload))
