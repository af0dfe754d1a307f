"""Temporal activities for PostHog feature flag reads.

Each activity evaluates flags over a connection scoped to one call and
returns a plain, serializable result. Missing results are coerced to
``None`` (single flag) or empty mappings (all flags).
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from temporalio import activity

from posthog_temporal.adapters.posthog import posthog_connection
from posthog_temporal.core.config import PostHogOperation
from posthog_temporal.core.protocols import PostHogConnectionFactory
from posthog_temporal.platform.temporal.activities._common import (
    activity_logger,
    call_sdk,
    sdk_kwargs,
)


def flag_options(bundle: Dict[str, Any]) -> Dict[str, Any]:
    """SDK options shared by single-flag reads."""
    return sdk_kwargs(
        groups=bundle.get("groups"),
        person_properties=bundle.get("person_properties"),
        group_properties=bundle.get("group_properties"),
        send_feature_flag_events=bundle.get("send_feature_flag_events"),
        disable_geoip=bundle.get("disable_geoip"),
    )


def all_flags_options(bundle: Dict[str, Any]) -> Dict[str, Any]:
    """SDK options for all-flags reads. ``flag_keys`` limits what the server evaluates."""
    return sdk_kwargs(
        groups=bundle.get("groups"),
        person_properties=bundle.get("person_properties"),
        group_properties=bundle.get("group_properties"),
        disable_geoip=bundle.get("disable_geoip"),
        flag_keys_to_evaluate=bundle.get("flag_keys"),
    )


@dataclass
class GetFeatureFlagActivity:
    """Evaluate one flag.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.GET_FEATURE_FLAG.value)
    async def run(self, bundle: Dict[str, Any]) -> Any:
        """Return the flag value, or None."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            result = await call_sdk(
                client.get_feature_flag,
                bundle["key"],
                bundle["distinct_id"],
                **flag_options(bundle),
            )
        return result


@dataclass
class IsFeatureEnabledActivity:
    """Check whether one flag is enabled.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.IS_FEATURE_ENABLED.value)
    async def run(self, bundle: Dict[str, Any]) -> Optional[bool]:
        """Return True/False, or None if the flag is unknown."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            result = await call_sdk(
                client.feature_enabled,
                bundle["key"],
                bundle["distinct_id"],
                **flag_options(bundle),
            )
        return result


@dataclass
class GetFeatureFlagPayloadActivity:
    """Fetch a flag's payload.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.GET_FEATURE_FLAG_PAYLOAD.value)
    async def run(self, bundle: Dict[str, Any]) -> Any:
        """Return the payload, or None."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            result = await call_sdk(
                client.get_feature_flag_payload,
                bundle["key"],
                bundle["distinct_id"],
                **sdk_kwargs(match_value=bundle.get("match_value")),
                **flag_options(bundle),
            )
        return result


def _flag_result_dict(result: Any) -> Optional[Dict[str, Any]]:
    if result is None:
        return None
    return {
        "key": result.key,
        "enabled": bool(result.enabled),
        "variant": result.variant,
        "payload": result.payload,
    }


@dataclass
class GetFeatureFlagResultActivity:
    """Evaluate one flag with its variant and payload.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.GET_FEATURE_FLAG_RESULT.value)
    async def run(self, bundle: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Return ``{key, enabled, variant, payload}``, or None if the flag is unknown."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            result = _flag_result_dict(
                await call_sdk(
                    client.get_feature_flag_result,
                    bundle["key"],
                    bundle["distinct_id"],
                    **flag_options(bundle),
                )
            )
        if result is None:
            activity_logger(PostHogOperation.GET_FEATURE_FLAG_RESULT.value, bundle).debug(
                f"Flag '{bundle['key']}' not found"
            )
        return result


@dataclass
class GetAllFlagsActivity:
    """Evaluate every flag.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.GET_ALL_FLAGS.value)
    async def run(self, bundle: Dict[str, Any]) -> Dict[str, Any]:
        """Return ``{flag_key: value}``, restricted to ``flag_keys`` when given."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            result = await call_sdk(
                client.get_all_flags, bundle["distinct_id"], **all_flags_options(bundle)
            )
        return result or {}


@dataclass
class GetAllFlagsAndPayloadsActivity:
    """Evaluate every flag along with payloads.

    Dependencies:
        connect: Opens the scoped PostHog connection
    """

    connect: PostHogConnectionFactory = posthog_connection

    @activity.defn(name=PostHogOperation.GET_ALL_FLAGS_AND_PAYLOADS.value)
    async def run(self, bundle: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        """Return ``{"featureFlags": ..., "featureFlagPayloads": ...}``."""
        async with self.connect(bundle["api_key"], bundle["host"]) as client:
            result = await call_sdk(
                client.get_all_flags_and_payloads,
                bundle["distinct_id"],
                **all_flags_options(bundle),
            )
        result = result or {}
        return {
            "featureFlags": result.get("featureFlags") or {},
            "featureFlagPayloads": result.get("featureFlagPayloads") or {},
        }
