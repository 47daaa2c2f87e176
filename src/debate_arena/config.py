"""Runtime configuration for Debate Arena."""

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful mentor and you should give concise and clear responses. "
    "Never output markdown and only in plain text"
)


class ConfigurationError(RuntimeError):
    """Raised at startup when required provider configuration is missing."""


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(
        env_prefix="DEBATE_ARENA_", env_file=".env", extra="ignore", populate_by_name=True
    )

    app_name: str = "debate-arena"
    log_level: str = "INFO"

    groq_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("DEBATE_ARENA_GROQ_API_KEY", "GROQ_API_KEY"),
    )
    groq_base_url: str = "https://api.groq.com/openai/v1"
    chat_model: str = "llama-3.1-8b-instant"
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    chat_timeout_seconds: float = 30.0

    fal_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("DEBATE_ARENA_FAL_API_KEY", "FAL_KEY", "FAL_API_KEY"),
    )
    fal_base_url: str = "https://fal.run"
    voice_model: str = Field(
        default="fal-ai/kokoro/american-english",
        description="fal.ai text-to-speech application id.",
    )
    speech_timeout_seconds: float = 60.0

    server_host: str = "127.0.0.1"
    server_port: int = 8000
    server_url: str | None = Field(
        default=None,
        description="Base URL of a running turn server; voice-chat runs turns in-process when unset.",
    )

    def require_provider_keys(self) -> None:
        """Fail fast when either provider API key is absent or blank."""
        missing = [
            name
            for name, secret in (("GROQ_API_KEY", self.groq_api_key), ("FAL_KEY", self.fal_api_key))
            if secret is None or not secret.get_secret_value().strip()
        ]
        if missing:
            raise ConfigurationError(f"Missing required provider configuration: {', '.join(missing)}")


settings = Settings()
