"""PostHog analytics and feature flags for Temporal workflows and activities."""

from posthog_temporal.client import PostHog
from posthog_temporal.core.config import PostHogOperation
from posthog_temporal.core.error_normalization import normalize_error
from posthog_temporal.core.exceptions import (
    BundleSerializationError,
    ContextCapabilityError,
    PostHogTemporalException,
)
from posthog_temporal.schemas import Event, FeatureFlagResult, NormalizedError, TransformFn

__all__ = [
    "BundleSerializationError",
    "ContextCapabilityError",
    "Event",
    "FeatureFlagResult",
    "NormalizedError",
    "PostHog",
    "PostHogOperation",
    "PostHogTemporalException",
    "TransformFn",
    "normalize_error",
]
