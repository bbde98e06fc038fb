"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Companion configuration. All values come from environment variables."""

    # Anthropic (reply generation)
    anthropic_api_key: str = Field(default="")
    chat_model: str = Field(default="claude-sonnet-4-5-20250929")
    reply_max_tokens: int = Field(default=512)

    # Gemini (embeddings)
    gemini_api_key: str = Field(default="")
    embedding_model: str = Field(default="text-embedding-004")
    embedding_dimensions: int = Field(default=768)

    # Database
    database_path: Path = Field(default=Path("data/companion.db"))

    # Turso (hosted libSQL), overrides local database_path when set
    turso_database_url: str = Field(default="")
    turso_auth_token: str = Field(default="")

    # Persona
    companion_name: str = Field(default="Serenity")

    # Conversation
    conversation_window_size: int = Field(default=50)
    prompt_history_turns: int = Field(default=3)

    # Memory
    memory_enabled: bool = Field(default=True)
    memory_query_timeout: float = Field(default=5.0)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)


settings = Settings()
