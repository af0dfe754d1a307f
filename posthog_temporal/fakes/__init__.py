"""In-memory fakes for the protocols in core/protocols/."""

from posthog_temporal.fakes.connection import FakeConnectionFactory, FakePostHogConnection
from posthog_temporal.fakes.context import (
    FakeActionContext,
    FakeScheduler,
    FakeSchedulerContext,
    ScheduledCall,
)

__all__ = [
    "FakeActionContext",
    "FakeConnectionFactory",
    "FakePostHogConnection",
    "FakeScheduler",
    "FakeSchedulerContext",
    "ScheduledCall",
]
