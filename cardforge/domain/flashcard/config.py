from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from cardforge.core.config import Settings
from cardforge.domain.chatbot.models import JsonSchemaResponseFormat

MIN_TEXT_LENGTH = 1000
MAX_TEXT_LENGTH = 10000
MAX_SIDE_LENGTH = 1000
MAX_BATCH_SIZE = 50


class SortField(Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class GenerationConfig:
    """Configuration for flashcard generation, injected into the generation service."""

    default_model: Optional[str] = None
    timeout_seconds: float = 30.0
    temperature: float = 0.7
    max_tokens: int = 4000
    min_cards: int = 5
    max_cards: int = 15

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationConfig":
        return cls(
            default_model=settings.default_model,
            timeout_seconds=settings.generation_timeout,
            temperature=settings.generation_temperature,
            max_tokens=settings.generation_max_tokens,
        )

    def resolve_model(self, model: Optional[str]) -> Optional[str]:
        return model or self.default_model

    def parameters(self) -> Dict[str, Any]:
        return {"temperature": self.temperature, "max_tokens": self.max_tokens}

    def get_system_prompt(self) -> str:
        return f"""You are a flashcard generation assistant. Your task is to generate educational flashcards from the provided text.

Instructions:
1. Analyze the text and identify key concepts, facts, definitions, and important information.
2. Create flashcards that help users learn and remember the material.
3. Generate {self.min_cards}-{self.max_cards} flashcards covering the most important points.
4. Each flashcard must have a "front" (question/prompt) and "back" (answer/explanation).
5. Keep each field between 1 and {MAX_SIDE_LENGTH} characters.
6. Make questions clear and specific.
7. Provide concise but complete answers.
8. Return your response as a JSON object with a "flashcards" array.

Output format (JSON):
{{
  "flashcards": [
    {{
      "front": "Question or prompt here",
      "back": "Answer or explanation here"
    }}
  ]
}}

Important: Return ONLY valid JSON. Do not include any additional text or explanations."""

    def get_user_message(self, text: str) -> str:
        return f"Generate flashcards from the following text:\n\n{text}"

    def get_response_format(self) -> JsonSchemaResponseFormat:
        side = {"type": "string", "minLength": 1, "maxLength": MAX_SIDE_LENGTH}
        return JsonSchemaResponseFormat(
            name="flashcards",
            schema={
                "type": "object",
                "properties": {
                    "flashcards": {
                        "type": "array",
                        "minItems": self.min_cards,
                        "maxItems": self.max_cards,
                        "items": {
                            "type": "object",
                            "properties": {"front": side, "back": side},
                            "required": ["front", "back"],
                            "additionalProperties": False,
                        },
                    }
                },
                "required": ["flashcards"],
                "additionalProperties": False,
            },
        )
