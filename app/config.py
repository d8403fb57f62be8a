import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field, model_validator
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite:///./data/app.db"
DEFAULT_TEST_DATABASE_URL = "sqlite:///:memory:"

# Project root (parent of app/) - used so .env is found regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Explicitly load .env into os.environ so it works in tests and subprocesses
load_dotenv(_PROJECT_ROOT / ".env")


class Settings(BaseSettings):
    app_name: str = "wa-autoreply-api"
    database_url: Optional[str] = None  # Will be set dynamically
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENV", "ENVIRONMENT"),
    )
    log_level: str = Field(default="INFO", json_schema_extra={"env": "LOG_LEVEL"})
    port: int = Field(default=8000, json_schema_extra={"env": "PORT"})

    # wacli (read-only message store + send CLI)
    wacli_db_path: str = Field(
        default="./data/wacli.db", json_schema_extra={"env": "WACLI_DB_PATH"}
    )
    wacli_store_dir: str = Field(
        default="./data/wacli-store", json_schema_extra={"env": "WACLI_STORE_DIR"}
    )
    wacli_binary_path: str = Field(
        default="wacli", json_schema_extra={"env": "WACLI_BINARY_PATH"}
    )
    supervisorctl_config: str = Field(
        default="/etc/supervisor/conf.d/supervisord.conf",
        json_schema_extra={"env": "SUPERVISORCTL_CONFIG"},
    )
    wacli_sync_program: str = Field(
        default="wacli-sync", json_schema_extra={"env": "WACLI_SYNC_PROGRAM"}
    )
    send_timeout_seconds: float = Field(
        default=30.0, gt=0, json_schema_extra={"env": "SEND_TIMEOUT_SECONDS"}
    )
    send_rate_limit_per_minute: Optional[int] = Field(
        default=30, json_schema_extra={"env": "SEND_RATE_LIMIT_PER_MINUTE"}
    )
    send_rate_limit_storage_uri: str = Field(
        default="memory://",
        json_schema_extra={"env": "SEND_RATE_LIMIT_STORAGE_URI"},
    )

    # Auto-response poller
    auto_response_poller_enabled: bool = Field(
        default=False, json_schema_extra={"env": "AUTO_RESPONSE_POLLER_ENABLED"}
    )
    auto_response_poll_interval_seconds: float = Field(
        default=10.0,
        gt=0,
        json_schema_extra={"env": "AUTO_RESPONSE_POLL_INTERVAL_SECONDS"},
    )
    auto_response_default_enabled: bool = Field(
        default=True, json_schema_extra={"env": "AUTO_RESPONSE_DEFAULT_ENABLED"}
    )

    # LLM / LiteLLM
    llm_model: str = Field(
        default="gpt-4o-mini", json_schema_extra={"env": "LLM_MODEL"}
    )
    llm_style_model: Optional[str] = Field(
        default=None, json_schema_extra={"env": "LLM_STYLE_MODEL"}
    )
    litellm_api_key: Optional[str] = Field(
        default=None, json_schema_extra={"env": "LITELLM_API_KEY"}
    )
    litellm_api_base: Optional[str] = Field(
        default=None, json_schema_extra={"env": "LITELLM_API_BASE"}
    )
    llm_cost_per_million_tokens: float = Field(
        default=1.25, ge=0, json_schema_extra={"env": "LLM_COST_PER_MILLION_TOKENS"}
    )

    @model_validator(mode="before")
    def set_database_url(cls, values):
        """Set the database_url dynamically based on the environment field."""
        environment = values.get("environment", os.getenv("ENV", "development"))
        if environment.lower() == "test":
            values["database_url"] = os.getenv(
                "TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL
            )
        else:
            values["database_url"] = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

        return values

    @property
    def style_model(self) -> str:
        """Model used for style analysis; falls back to the reply model."""
        return self.llm_style_model or self.llm_model

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="allow",  # Allow extra environment variables
    )


def get_settings() -> Settings:
    """Get application settings with required environment variables."""
    return Settings()
