"""
Scheduling engine configuration.

Tunables for the class scheduling engine: status transition policy,
recurrence horizon and listing page sizes.

Dependencies: pydantic, pydantic_settings
System role: Business-rule configuration for class sessions
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from coaching.configs.base import BaseSettings


class SchedulingSettings(BaseSettings):
    """Class scheduling configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SCHEDULING_",
        case_sensitive=False,
        extra="ignore",
    )

    strict_transitions: bool = Field(
        default=False,
        description="Reject status changes outside the strict transition table",
    )
    max_recurring_occurrences: int = Field(
        default=52,
        ge=1,
        description="Series length when a recurrence has neither end date nor max occurrences",
    )
    default_page_size: int = Field(default=10, ge=1, description="Default class list page size")
    max_page_size: int = Field(default=100, ge=1, description="Upper bound for class list page size")
    default_upcoming_limit: int = Field(default=5, ge=1, description="Default size of the upcoming view")
