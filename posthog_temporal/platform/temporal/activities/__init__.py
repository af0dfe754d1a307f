"""Temporal activity classes for PostHog.

Each activity is a class with:
- Dependencies declared as dataclass fields (the connection factory)
- A @activity.defn decorated ``run`` method named after its PostHogOperation

Activities are instantiated in ``create_posthog_activities`` and registered
by the worker. Workflows refer to them by PostHogOperation value, so they
never import this package inside the sandbox.
"""

from typing import Any, Awaitable, Callable, Dict

from posthog_temporal.adapters.posthog import posthog_connection
from posthog_temporal.core.config import PostHogOperation
from posthog_temporal.core.protocols import PostHogConnectionFactory
from posthog_temporal.platform.temporal.activities.events import (
    AliasActivity,
    CaptureActivity,
    CaptureExceptionActivity,
    GroupIdentifyActivity,
    IdentifyActivity,
)
from posthog_temporal.platform.temporal.activities.feature_flags import (
    GetAllFlagsActivity,
    GetAllFlagsAndPayloadsActivity,
    GetFeatureFlagActivity,
    GetFeatureFlagPayloadActivity,
    GetFeatureFlagResultActivity,
    IsFeatureEnabledActivity,
)

ActivityFn = Callable[[Dict[str, Any]], Awaitable[Any]]

ACTIVITY_CLASSES = {
    PostHogOperation.CAPTURE: CaptureActivity,
    PostHogOperation.IDENTIFY: IdentifyActivity,
    PostHogOperation.GROUP_IDENTIFY: GroupIdentifyActivity,
    PostHogOperation.ALIAS: AliasActivity,
    PostHogOperation.CAPTURE_EXCEPTION: CaptureExceptionActivity,
    PostHogOperation.GET_FEATURE_FLAG: GetFeatureFlagActivity,
    PostHogOperation.IS_FEATURE_ENABLED: IsFeatureEnabledActivity,
    PostHogOperation.GET_FEATURE_FLAG_PAYLOAD: GetFeatureFlagPayloadActivity,
    PostHogOperation.GET_FEATURE_FLAG_RESULT: GetFeatureFlagResultActivity,
    PostHogOperation.GET_ALL_FLAGS: GetAllFlagsActivity,
    PostHogOperation.GET_ALL_FLAGS_AND_PAYLOADS: GetAllFlagsAndPayloadsActivity,
}


def create_posthog_activities(
    connect: PostHogConnectionFactory = posthog_connection,
) -> Dict[PostHogOperation, ActivityFn]:
    """Instantiate every activity with ``connect`` and return their bound ``run`` methods."""
    return {operation: cls(connect=connect).run for operation, cls in ACTIVITY_CLASSES.items()}


__all__ = [
    "ACTIVITY_CLASSES",
    "ActivityFn",
    "create_posthog_activities",
    # Activity classes
    "AliasActivity",
    "CaptureActivity",
    "CaptureExceptionActivity",
    "GetAllFlagsActivity",
    "GetAllFlagsAndPayloadsActivity",
    "GetFeatureFlagActivity",
    "GetFeatureFlagPayloadActivity",
    "GetFeatureFlagResultActivity",
    "GroupIdentifyActivity",
    "IdentifyActivity",
    "IsFeatureEnabledActivity",
]
