"""Temporal activities for fire-and-forget PostHog calls.

Activity classes with explicit dependency injection. Each class declares
the connection factory it uses, so tests can swap in a fake.

Every activity opens a connection scoped to the bundle's API key and host,
makes exactly one backend call and closes the connection. Backend errors
propagate; Temporal's retry policy decides what happens next.
"""

from dataclasses import dataclass
from typing import Any, Dict, List

from temporalio import activity

from posthog_temporal.adapters.posthog import posthog_connection
from posthog_temporal.core.config import PostHogOperation
from posthog_temporal.core.protocols import PostHogConnectionFactory
from posthog_temporal.platform.temporal.activities._common import (
    activity_logger,
    call_sdk,
    from_epoch_millis,
    sdk_kwargs,
)
from posthog_temporal.schemas import EXCEPTION_EVENT, IDENTIFY_EVENT, group_distinct_id

# =============================================================================
# Capture
# =============================================================================


@dataclass
class CaptureActivity:
    """Send one event.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.CAPTURE.value)
    async def run(self, bundle: Dict[str, Any]) -> None:
        """Capture ``bundle["event"]`` for ``bundle["distinct_id"]``."""
        log = activity_logger(PostHogOperation.CAPTURE.value, bundle)
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            await call_sdk(
                client.capture,
                event=bundle["event"],
                **sdk_kwargs(
                    distinct_id=bundle["distinct_id"],
                    properties=bundle.get("properties"),
                    groups=bundle.get("groups"),
                    timestamp=from_epoch_millis(bundle.get("timestamp")),
                    uuid=bundle.get("uuid"),
                    send_feature_flags=bundle.get("send_feature_flags"),
                    disable_geoip=bundle.get("disable_geoip"),
                ),
            )
        log.debug(f"Captured '{bundle['event']}'")


# =============================================================================
# Identify
# =============================================================================


@dataclass
class IdentifyActivity:
    """Set person properties.

    The bundle's properties are the full ``$identify`` event properties
    (person properties under ``$set``), sent as-is.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.IDENTIFY.value)
    async def run(self, bundle: Dict[str, Any]) -> None:
        """Send a ``$identify`` event."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            await call_sdk(
                client.capture,
                event=IDENTIFY_EVENT,
                **sdk_kwargs(
                    distinct_id=bundle["distinct_id"],
                    properties=bundle.get("properties") or {},
                    disable_geoip=bundle.get("disable_geoip"),
                ),
            )
        activity_logger(PostHogOperation.IDENTIFY.value, bundle).debug("Identified")


# =============================================================================
# Group identify
# =============================================================================


@dataclass
class GroupIdentifyActivity:
    """Set group properties.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.GROUP_IDENTIFY.value)
    async def run(self, bundle: Dict[str, Any]) -> None:
        """Identify ``bundle["group_type"]``/``bundle["group_key"]``.

        Without a ``distinct_id`` the event is attributed to ``$<group_type>_<group_key>``.
        """
        distinct_id = bundle.get("distinct_id") or group_distinct_id(
            bundle["group_type"], bundle["group_key"]
        )
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            await call_sdk(
                client.group_identify,
                bundle["group_type"],
                bundle["group_key"],
                **sdk_kwargs(
                    properties=bundle.get("properties"),
                    disable_geoip=bundle.get("disable_geoip"),
                ),
                distinct_id=distinct_id,
            )


# =============================================================================
# Alias
# =============================================================================


@dataclass
class AliasActivity:
    """Link an alias to a distinct id.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.ALIAS.value)
    async def run(self, bundle: Dict[str, Any]) -> None:
        """Send a ``$create_alias`` event."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            # The SDK's previous_id is the id being aliased, distinct_id the alias.
            await call_sdk(
                client.alias,
                previous_id=bundle["distinct_id"],
                distinct_id=bundle["alias"],
                **sdk_kwargs(disable_geoip=bundle.get("disable_geoip")),
            )


# =============================================================================
# Capture exception
# =============================================================================


def exception_properties(bundle: Dict[str, Any]) -> Dict[str, Any]:
    """Build ``$exception`` properties from a normalized error bundle."""
    message = bundle.get("error_message") or ""
    error_type = bundle.get("error_name") or "Error"
    stack = bundle.get("error_stack")

    exception: Dict[str, Any] = {
        "type": error_type,
        "value": message,
        "mechanism": {"handled": True, "synthetic": False},
    }
    exception_list: List[Dict[str, Any]] = [exception]

    properties = {
        **(bundle.get("additional_properties") or {}),
        "$exception_list": exception_list,
        "$exception_type": error_type,
        "$exception_message": message,
    }
    if stack is not None:
        properties["$exception_stack_trace_raw"] = stack
    return properties


@dataclass
class CaptureExceptionActivity:
    """Send an ``$exception`` event built from a normalized error.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.CAPTURE_EXCEPTION.value)
    async def run(self, bundle: Dict[str, Any]) -> None:
        """Capture the exception described by ``bundle``."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            await call_sdk(
                client.capture,
                event=EXCEPTION_EVENT,
                **sdk_kwargs(
                    distinct_id=bundle.get("distinct_id"),
                    properties=exception_properties(bundle),
                ),
            )
        activity_logger(PostHogOperation.CAPTURE_EXCEPTION.value, bundle).debug(
            f"Captured exception {bundle.get('error_name') or 'Error'}"
        )
