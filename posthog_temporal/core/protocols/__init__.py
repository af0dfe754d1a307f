"""Core protocols for dependency injection."""

from posthog_temporal.core.protocols.connection import (
    PostHogConnection,
    PostHogConnectionFactory,
)
from posthog_temporal.core.protocols.context import ActionCtx, Scheduler, SchedulerCtx

__all__ = [
    "ActionCtx",
    "PostHogConnection",
    "PostHogConnectionFactory",
    "Scheduler",
    "SchedulerCtx",
]
