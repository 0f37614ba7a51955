"""Application settings loaded from environment variables."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Dreamflow configuration. All values come from environment variables."""

    # Anthropic
    anthropic_api_key: str = Field(default="")
    chat_model: str = Field(default="claude-sonnet-4-5-20250929")
    fallback_model: str = Field(default="claude-haiku-4-5-20251001")
    max_tokens: int = Field(default=2000)

    # Mem0: when set, semantic memory uses the hosted store
    mem0_api_key: str = Field(default="")

    # Context assembly
    context_max_recent_messages: int = Field(default=5)
    context_max_semantic_memories: int = Field(default=5)
    context_similarity_threshold: float = Field(default=0.5)
    context_include_system_messages: bool = Field(default=False)
    context_include_sensor_data: bool = Field(default=True)
    context_timeout_seconds: float = Field(default=10.0)

    # Digest
    digest_use_llm: bool = Field(default=True)
    digest_window_days: int = Field(default=7)

    # Nightly reflection
    dreamflow_enabled: bool = Field(default=True)
    dreamflow_hour: int = Field(default=3)
    dreamflow_thread_id: str = Field(default="default")
    dreamflow_query: str = Field(default="What happened today?")
    scheduler_timezone: str = Field(default="America/Chicago")

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

    def get_models(self) -> list[str]:
        """Models to try in order: the chat model, then the fallback if distinct."""
        models = [self.chat_model]
        if self.fallback_model and self.fallback_model != self.chat_model:
            models.append(self.fallback_model)
        return models


settings = Settings()
