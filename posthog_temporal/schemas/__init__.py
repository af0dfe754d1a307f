"""Schemas shared by the front client and the worker."""

from posthog_temporal.schemas.errors import NormalizedError
from posthog_temporal.schemas.events import (
    ALIAS_EVENT,
    EXCEPTION_EVENT,
    GROUP_IDENTIFY_EVENT,
    IDENTIFY_EVENT,
    Event,
    TransformFn,
    group_distinct_id,
)
from posthog_temporal.schemas.feature_flags import (
    FeatureFlagResult,
    FlagsAndPayloads,
    FlagValue,
)

__all__ = [
    "ALIAS_EVENT",
    "EXCEPTION_EVENT",
    "GROUP_IDENTIFY_EVENT",
    "IDENTIFY_EVENT",
    "Event",
    "FeatureFlagResult",
    "FlagValue",
    "FlagsAndPayloads",
    "NormalizedError",
    "TransformFn",
    "group_distinct_id",
]
