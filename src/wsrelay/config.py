"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with WSRELAY_ prefix.
The display timezone also honours the plain TZ variable, so the relay
picks up the same zone the container runs in.
"""

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

from wsrelay import __version__


class Settings(BaseSettings):
    """All relay configuration. Set via WSRELAY_* env vars."""

    # Server
    environment: str = "development"
    host: str = "0.0.0.0"
    http_port: int = 3000
    ws_port: int = 9999

    # Display timezone for timestamps (IANA name)
    timezone: str = Field(
        "Asia/Shanghai",
        validation_alias=AliasChoices("WSRELAY_TIMEZONE", "TZ"),
    )

    # CORS
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Realtime
    outbox_size: int = 256  # frames queued per subscriber before drops
    welcome_message: str = "connected"

    service_version: str = __version__

    model_config = {"env_prefix": "WSRELAY_", "populate_by_name": True}

    @field_validator("http_port", "ws_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {v}")
        return v

    @field_validator("outbox_size")
    @classmethod
    def validate_outbox_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError("outbox_size must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


# Singleton — import this everywhere
settings = Settings()
