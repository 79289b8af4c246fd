from typing import Dict, Type

from cardforge.core.config import Settings

from .base import ChatBot
from .exceptions import ChatBotNotFoundError
from .providers.groq import GroqChatBot
from .providers.mistral import MistralChatBot
from .providers.openrouter import OpenRouterChatBot


class ChatBotFactory:
    """Factory class for creating chatbot instances."""

    _chatbots: Dict[str, Type[ChatBot]] = {
        'openrouter': OpenRouterChatBot,
        'groq': GroqChatBot,
        'mistral': MistralChatBot,
    }

    @classmethod
    def create(cls, chatbot_type: str, settings: Settings, **kwargs) -> ChatBot:
        """
        Create a chatbot instance wired to the credential configured for it.

        The instance is not initialized here; a missing credential is only
        reported when a completion is requested.

        Args:
            chatbot_type: The type of chatbot to create
            settings: Application settings holding the provider credentials
            **kwargs: Extra constructor arguments for the provider

        Returns:
            A chatbot instance

        Raises:
            ChatBotNotFoundError: If the chatbot type is not registered
        """
        chatbot_class = cls._chatbots.get((chatbot_type or "").lower())
        if not chatbot_class:
            raise ChatBotNotFoundError(
                f"Unsupported chatbot type: {chatbot_type}. Available types: {cls.get_available_chatbots()}"
            )

        if chatbot_class is OpenRouterChatBot:
            kwargs.setdefault("endpoint", settings.openrouter_base_url)
        return chatbot_class(api_key=settings.api_key_for(chatbot_type.lower()), **kwargs)

    @classmethod
    def register_chatbot(cls, name: str, chatbot_class: Type[ChatBot]) -> None:
        """
        Register a new chatbot type.

        Raises:
            ValueError: If the name is empty or already registered
        """
        if not name:
            raise ValueError("Chatbot name must be specified")

        if name.lower() in cls._chatbots:
            raise ValueError(f"Chatbot type {name} is already registered")

        cls._chatbots[name.lower()] = chatbot_class

    @classmethod
    def get_available_chatbots(cls) -> list[str]:
        """Get a list of all available chatbot types."""
        return list(cls._chatbots.keys())
