import secrets
from typing import List, Literal, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    llm_provider: Literal["openrouter", "groq", "mistral"] = Field(
        "openrouter", description="Chat-completion provider used for flashcard generation"
    )
    openrouter_api_key: Optional[str] = Field(None, description="API Key for OpenRouter")
    openrouter_base_url: str = Field(
        "https://openrouter.ai/api/v1/chat/completions", description="OpenRouter chat completions endpoint"
    )
    groq_api_key: Optional[str] = Field(None, description="API Key for Groq chatbot service")
    mistral_api_key: Optional[str] = Field(None, description="API Key for Mistral chatbot service")
    default_model: Optional[str] = Field(None, description="Model used when a request names none, the provider default when unset")
    generation_timeout: float = Field(30.0, gt=0, description="Upper bound in seconds for one generation call")
    generation_temperature: float = Field(0.7, ge=0, le=2)
    generation_max_tokens: int = Field(4000, gt=0)
    rate_limit_calls: int = Field(5, description="Rate limit - maximum calls allowed in the specified period")
    rate_limit_period: int = Field(60, description="Rate limit time period in seconds")
    environment: str = Field("development", description="Deployment environment")
    log_level: str = Field("INFO", description="Root log level")
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32), description="Secret key for session management"
    )
    storage_type: Literal["memory", "redis"] = Field("memory", description="Flashcard storage backend")
    redis_cluster_nodes: List[Tuple[str, int]] = Field(
        [("localhost", 7001), ("localhost", 7002), ("localhost", 7003)], description="Redis cluster node addresses"
    )
    redis_host: str = Field("localhost", description="Redis host")
    redis_port: int = Field(6379, description="Redis port")
    redis_max_connections: int = Field(10, description="Redis max connections")

    @field_validator('openrouter_api_key', 'groq_api_key', 'mistral_api_key')
    def blank_keys_are_missing(cls, v: Optional[str]) -> Optional[str]:
        """
        Treat empty or whitespace-only API keys as not configured.
        """
        if v is None or not v.strip():
            return None
        return v.strip()

    def api_key_for(self, provider: str) -> Optional[str]:
        """Return the credential configured for a chatbot provider, if any."""
        return {
            "openrouter": self.openrouter_api_key,
            "groq": self.groq_api_key,
            "mistral": self.mistral_api_key,
        }.get(provider)


# Create a settings instance
settings = Settings()

# Export settings instance
__all__ = ['settings', 'Settings']
