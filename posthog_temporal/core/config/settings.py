"""Settings loaded from the environment.

Two settings classes live here:

- ``Settings`` holds process-wide worker tunables and is instantiated once
  as the ``settings`` singleton.
- ``PostHogSettings`` holds the PostHog credentials. The front client reads
  it when it is constructed, so explicit arguments always win and the
  environment is consulted exactly once per client.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from posthog_temporal.core.config.enums import LogLevel

DEFAULT_POSTHOG_HOST = "https://us.i.posthog.com"


class PostHogSettings(BaseSettings):
    """PostHog credentials.

    Env vars:
        POSTHOG_API_KEY
        POSTHOG_HOST
    """

    model_config = SettingsConfigDict(env_prefix="POSTHOG_", extra="ignore")

    api_key: str = Field("", description="PostHog project API key")
    host: str = Field(DEFAULT_POSTHOG_HOST, description="PostHog ingestion host")


class Settings(BaseSettings):
    """Worker and Temporal settings."""

    model_config = SettingsConfigDict(extra="ignore")

    LOG_LEVEL: LogLevel = LogLevel.INFO

    TEMPORAL_HOST: str = "localhost"
    TEMPORAL_PORT: int = 7233
    TEMPORAL_NAMESPACE: str = "default"
    TEMPORAL_TASK_QUEUE: str = "posthog"
    TEMPORAL_DISABLE_SANDBOX: bool = False
    TEMPORAL_GRACEFUL_SHUTDOWN_TIMEOUT: int = 30

    @property
    def temporal_address(self) -> str:
        """Temporal frontend address as host:port."""
        return f"{self.TEMPORAL_HOST}:{self.TEMPORAL_PORT}"
