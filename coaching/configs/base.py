"""
Base configuration settings.

Shared fields for every settings class of the scheduling service: the
deployment environment, debug mode and the root log level. Values are read
from the process environment or a local .env file and validated up front,
so a misspelt level or environment fails at startup instead of being
silently replaced by a default.

Dependencies: pydantic, pydantic_settings
System role: Foundation for all configuration classes
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

Environment = Literal["development", "test", "staging", "production"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class BaseSettings(PydanticBaseSettings):
    """Settings shared by the database, scheduling and application configs."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Environment = Field(
        default="development",
        description="Deployment the scheduling service runs in",
    )
    debug: bool = Field(
        default=False,
        description="Serve FastAPI tracebacks on unhandled errors",
    )
    log_level: LogLevel = Field(
        default="INFO",
        description="Root log level passed to configure_logging",
    )

    @field_validator("environment", "log_level", mode="before")
    @classmethod
    def _normalize_case(cls, value, info):
        if not isinstance(value, str):
            return value
        value = value.strip()
        return value.upper() if info.field_name == "log_level" else value.lower()
