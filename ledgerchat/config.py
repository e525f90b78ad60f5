"""Application settings loaded from environment variables."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """ledgerchat configuration. All values come from environment variables."""

    # Completion endpoint
    llm_provider: str = Field(default="openai")
    max_tokens: int = Field(default=1024)
    request_timeout: float = Field(default=60.0)

    # OpenAI
    openai_api_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4o")

    # Anthropic
    anthropic_api_key: str = Field(default="")
    anthropic_model: str = Field(default="claude-sonnet-4-20250514")

    # Conversation
    max_tool_rounds: int = Field(default=5)
    history_window: int = Field(default=10)
    max_message_length: int = Field(default=1000)
    recent_expenses_limit: int = Field(default=20)

    # Rate limiting
    rate_limit_max_requests: int = Field(default=10)
    rate_limit_window_seconds: float = Field(default=60.0)

    # HTTP server
    server_host: str = Field(default="0.0.0.0")
    server_port: int = Field(default=8080)

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

    def get_provider_name(self) -> str:
        """Normalized LLM_PROVIDER value ("openai" or "anthropic")."""
        return self.llm_provider.strip().lower()


settings = Settings()
