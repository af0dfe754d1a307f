"""Configuration module.

Usage:
    from posthog_temporal.core.config import settings, PostHogSettings

    # Worker tunables
    settings.TEMPORAL_TASK_QUEUE

    # Credentials, read fresh from the environment
    PostHogSettings().api_key
"""

from posthog_temporal.core.config.enums import LogLevel, PostHogOperation
from posthog_temporal.core.config.settings import (
    DEFAULT_POSTHOG_HOST,
    PostHogSettings,
    Settings,
)

__all__ = [
    "DEFAULT_POSTHOG_HOST",
    "LogLevel",
    "PostHogOperation",
    "PostHogSettings",
    "Settings",
    "settings",
]

# Singleton settings instance
settings = Settings()
