"""PostHog front client.

One instance per process. Fire-and-forget methods (``capture``,
``identify``, ``group_identify``, ``alias``, ``capture_exception``) accept
any context with a scheduler, so they are safe to call from a Temporal
workflow: they build an event, run ``before_send`` and schedule the PostHog
activity instead of calling PostHog.

Feature-flag methods need a context that can run an action and wait for
its result, which only activity contexts provide.

Example:
    >>> posthog = PostHog(before_send=redact_emails)
    >>> await posthog.capture(ctx, distinct_id="user-1", event="signed_up")
    >>> await posthog.is_feature_enabled(activity_ctx, key="beta", distinct_id="user-1")
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from posthog_temporal.core.config import PostHogOperation, PostHogSettings
from posthog_temporal.core.error_normalization import normalize_error
from posthog_temporal.core.exceptions import ContextCapabilityError
from posthog_temporal.core.logging import logger
from posthog_temporal.core.protocols import ActionCtx, SchedulerCtx
from posthog_temporal.dispatch import compact, dispatch, ensure_serializable
from posthog_temporal.pipeline import BeforeSend, apply_before_send, normalize_transforms
from posthog_temporal.schemas import (
    ALIAS_EVENT,
    EXCEPTION_EVENT,
    GROUP_IDENTIFY_EVENT,
    IDENTIFY_EVENT,
    Event,
    FeatureFlagResult,
    FlagsAndPayloads,
    FlagValue,
    group_distinct_id,
)

# Keys of a $exception event's properties that carry the normalized error.
ERROR_PROPERTY_KEYS = ("error_message", "error_name", "error_stack")


def to_epoch_millis(timestamp: Optional[datetime]) -> Optional[int]:
    """Convert a datetime to integer epoch milliseconds. Naive values are UTC."""
    if timestamp is None:
        return None
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return int(timestamp.timestamp() * 1000)


class PostHog:
    """Front client for PostHog analytics and feature flags."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        host: Optional[str] = None,
        *,
        before_send: BeforeSend = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: PostHog project key. Defaults to ``POSTHOG_API_KEY``.
            host: PostHog host. Defaults to ``POSTHOG_HOST`` or the US cloud.
            before_send: One transform or an ordered sequence of them. Each
                receives an ``Event`` and returns a replacement, or ``None``
                to drop the event.
        """
        env = PostHogSettings()
        self._api_key = api_key if api_key is not None else env.api_key
        self._host = host if host is not None else env.host
        self._before_send = normalize_transforms(before_send)

        if not self._api_key:
            logger.warning("PostHog API key is empty; backend calls will be rejected")

    @property
    def host(self) -> str:
        """PostHog host every call is sent to."""
        return self._host

    @property
    def before_send(self) -> tuple:
        """Configured transforms, in order."""
        return self._before_send

    def _credentials(self) -> Dict[str, str]:
        return {"api_key": self._api_key, "host": self._host}

    # ------------------------------------------------------------------
    # Capability checks
    # ------------------------------------------------------------------

    @staticmethod
    def _require_scheduler(ctx: Any, operation: str) -> None:
        if not isinstance(ctx, SchedulerCtx):
            raise ContextCapabilityError(operation, "a scheduler", ctx)

    @staticmethod
    def _require_action(ctx: Any, operation: str) -> None:
        if not isinstance(ctx, ActionCtx) or not callable(ctx.run_action):
            raise ContextCapabilityError(operation, "run_action (activity context)", ctx)

    # ------------------------------------------------------------------
    # Fire-and-forget
    # ------------------------------------------------------------------

    async def _send(
        self,
        ctx: SchedulerCtx,
        operation: PostHogOperation,
        event: Event,
        to_bundle: Any,
    ) -> None:
        transformed = apply_before_send(event, self._before_send)
        if transformed is None:
            return
        bundle = compact({**self._credentials(), **to_bundle(transformed)})
        await dispatch(ctx, operation, bundle)

    async def capture(
        self,
        ctx: SchedulerCtx,
        *,
        distinct_id: str,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
        groups: Optional[Dict[str, Union[str, int]]] = None,
        send_feature_flags: Optional[bool] = None,
        timestamp: Optional[datetime] = None,
        uuid: Optional[str] = None,
        disable_geoip: Optional[bool] = None,
    ) -> None:
        """Capture an event."""
        self._require_scheduler(ctx, "capture")
        await self._send(
            ctx,
            PostHogOperation.CAPTURE,
            Event(
                event=event,
                distinct_id=distinct_id,
                properties=properties or {},
                groups=groups,
                send_feature_flags=send_feature_flags,
                timestamp=timestamp,
                uuid=uuid,
                disable_geoip=disable_geoip,
            ),
            lambda e: {
                "distinct_id": e.distinct_id,
                "event": e.event,
                "properties": e.properties,
                "groups": e.groups,
                "send_feature_flags": e.send_feature_flags,
                "timestamp": to_epoch_millis(e.timestamp),
                "uuid": e.uuid,
                "disable_geoip": e.disable_geoip,
            },
        )

    async def identify(
        self,
        ctx: SchedulerCtx,
        *,
        distinct_id: str,
        properties: Optional[Dict[str, Any]] = None,
        disable_geoip: Optional[bool] = None,
    ) -> None:
        """Set person properties for ``distinct_id``.

        Transforms see a ``$identify`` event whose properties hold the person
        properties under ``$set``.
        """
        self._require_scheduler(ctx, "identify")
        await self._send(
            ctx,
            PostHogOperation.IDENTIFY,
            Event(
                event=IDENTIFY_EVENT,
                distinct_id=distinct_id,
                properties={"$set": properties or {}},
                disable_geoip=disable_geoip,
            ),
            lambda e: {
                "distinct_id": e.distinct_id,
                "properties": e.properties,
                "disable_geoip": e.disable_geoip,
            },
        )

    async def group_identify(
        self,
        ctx: SchedulerCtx,
        *,
        group_type: str,
        group_key: str,
        properties: Optional[Dict[str, Any]] = None,
        distinct_id: Optional[str] = None,
        disable_geoip: Optional[bool] = None,
    ) -> None:
        """Set properties on a group.

        Transforms see a ``$groupidentify`` event with ``$group_type``,
        ``$group_key`` and ``$group_set`` properties. Without a
        ``distinct_id`` the event is attributed to ``$<group_type>_<group_key>``.
        """
        self._require_scheduler(ctx, "group_identify")
        synthesized_id = group_distinct_id(group_type, group_key)

        def to_bundle(e: Event) -> Dict[str, Any]:
            return {
                "group_type": e.properties.get("$group_type"),
                "group_key": e.properties.get("$group_key"),
                "properties": e.properties.get("$group_set"),
                "distinct_id": e.distinct_id if e.distinct_id != synthesized_id else None,
                "disable_geoip": e.disable_geoip,
            }

        await self._send(
            ctx,
            PostHogOperation.GROUP_IDENTIFY,
            Event(
                event=GROUP_IDENTIFY_EVENT,
                distinct_id=distinct_id or synthesized_id,
                properties={
                    "$group_type": group_type,
                    "$group_key": group_key,
                    "$group_set": properties or {},
                },
                disable_geoip=disable_geoip,
            ),
            to_bundle,
        )

    async def alias(
        self,
        ctx: SchedulerCtx,
        *,
        distinct_id: str,
        alias: str,
        disable_geoip: Optional[bool] = None,
    ) -> None:
        """Link ``alias`` to ``distinct_id``."""
        self._require_scheduler(ctx, "alias")
        await self._send(
            ctx,
            PostHogOperation.ALIAS,
            Event(
                event=ALIAS_EVENT,
                distinct_id=distinct_id,
                properties={"distinct_id": distinct_id, "alias": alias},
                disable_geoip=disable_geoip,
            ),
            lambda e: {
                "distinct_id": e.properties.get("distinct_id"),
                "alias": e.properties.get("alias"),
                "disable_geoip": e.disable_geoip,
            },
        )

    async def capture_exception(
        self,
        ctx: SchedulerCtx,
        *,
        error: Any,
        distinct_id: str,
        additional_properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Capture an ``$exception`` event for any raised or caught value.

        ``error`` is normalized first, so exceptions, strings and arbitrary
        objects are all accepted. Transforms see ``error_message``,
        ``error_name`` and ``error_stack`` merged into the properties.

        Those three keys are reserved: if ``additional_properties`` carries
        any of them, the normalized error wins and the caller's value is
        dropped with a warning.
        """
        self._require_scheduler(ctx, "capture_exception")
        normalized = normalize_error(error)
        extra = dict(additional_properties or {})
        shadowed = [k for k in ERROR_PROPERTY_KEYS if k in extra]
        for key in shadowed:
            del extra[key]
        if shadowed:
            logger.warning(
                f"capture_exception: additional_properties {shadowed} are reserved "
                "for the normalized error and were dropped"
            )

        def to_bundle(e: Event) -> Dict[str, Any]:
            rest = {k: v for k, v in e.properties.items() if k not in ERROR_PROPERTY_KEYS}
            return {
                "distinct_id": e.distinct_id,
                "error_message": e.properties.get("error_message"),
                "error_name": e.properties.get("error_name"),
                "error_stack": e.properties.get("error_stack"),
                "additional_properties": rest or None,
            }

        error_properties = {f"error_{k}": v for k, v in normalized.to_dict().items()}
        await self._send(
            ctx,
            PostHogOperation.CAPTURE_EXCEPTION,
            Event(
                event=EXCEPTION_EVENT,
                distinct_id=distinct_id,
                properties={**extra, **error_properties},
            ),
            to_bundle,
        )

    # ------------------------------------------------------------------
    # Feature flags
    # ------------------------------------------------------------------

    async def _invoke(
        self,
        ctx: ActionCtx,
        method: str,
        operation: PostHogOperation,
        args: Dict[str, Any],
    ) -> Any:
        self._require_action(ctx, method)
        bundle = compact({**self._credentials(), **args})
        ensure_serializable(bundle)
        return await ctx.run_action(operation, bundle)

    async def get_feature_flag(
        self,
        ctx: ActionCtx,
        *,
        key: str,
        distinct_id: str,
        groups: Optional[Dict[str, str]] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[FlagValue]:
        """Return the flag's value: a variant key, a boolean, or None if unknown."""
        return await self._invoke(
            ctx,
            "get_feature_flag",
            PostHogOperation.GET_FEATURE_FLAG,
            {
                "key": key,
                "distinct_id": distinct_id,
                "groups": groups,
                "person_properties": person_properties,
                "group_properties": group_properties,
                "send_feature_flag_events": send_feature_flag_events,
                "disable_geoip": disable_geoip,
            },
        )

    async def is_feature_enabled(
        self,
        ctx: ActionCtx,
        *,
        key: str,
        distinct_id: str,
        groups: Optional[Dict[str, str]] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[bool]:
        """Return whether the flag is enabled, or None if unknown."""
        return await self._invoke(
            ctx,
            "is_feature_enabled",
            PostHogOperation.IS_FEATURE_ENABLED,
            {
                "key": key,
                "distinct_id": distinct_id,
                "groups": groups,
                "person_properties": person_properties,
                "group_properties": group_properties,
                "send_feature_flag_events": send_feature_flag_events,
                "disable_geoip": disable_geoip,
            },
        )

    async def get_feature_flag_payload(
        self,
        ctx: ActionCtx,
        *,
        key: str,
        distinct_id: str,
        match_value: Optional[FlagValue] = None,
        groups: Optional[Dict[str, str]] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Any:
        """Return the payload attached to the flag's value for this user."""
        return await self._invoke(
            ctx,
            "get_feature_flag_payload",
            PostHogOperation.GET_FEATURE_FLAG_PAYLOAD,
            {
                "key": key,
                "distinct_id": distinct_id,
                "match_value": match_value,
                "groups": groups,
                "person_properties": person_properties,
                "group_properties": group_properties,
                "send_feature_flag_events": send_feature_flag_events,
                "disable_geoip": disable_geoip,
            },
        )

    async def get_feature_flag_result(
        self,
        ctx: ActionCtx,
        *,
        key: str,
        distinct_id: str,
        groups: Optional[Dict[str, str]] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[FeatureFlagResult]:
        """Return value, variant and payload of a flag in one call."""
        result = await self._invoke(
            ctx,
            "get_feature_flag_result",
            PostHogOperation.GET_FEATURE_FLAG_RESULT,
            {
                "key": key,
                "distinct_id": distinct_id,
                "groups": groups,
                "person_properties": person_properties,
                "group_properties": group_properties,
                "send_feature_flag_events": send_feature_flag_events,
                "disable_geoip": disable_geoip,
            },
        )
        if result is None:
            return None
        return FeatureFlagResult.model_validate(result)

    async def get_all_flags(
        self,
        ctx: ActionCtx,
        *,
        distinct_id: str,
        groups: Optional[Dict[str, str]] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        disable_geoip: Optional[bool] = None,
        flag_keys: Optional[List[str]] = None,
    ) -> Dict[str, FlagValue]:
        """Evaluate every flag, or only ``flag_keys`` when given."""
        result = await self._invoke(
            ctx,
            "get_all_flags",
            PostHogOperation.GET_ALL_FLAGS,
            {
                "distinct_id": distinct_id,
                "groups": groups,
                "person_properties": person_properties,
                "group_properties": group_properties,
                "disable_geoip": disable_geoip,
                "flag_keys": flag_keys,
            },
        )
        return result or {}

    async def get_all_flags_and_payloads(
        self,
        ctx: ActionCtx,
        *,
        distinct_id: str,
        groups: Optional[Dict[str, str]] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        disable_geoip: Optional[bool] = None,
        flag_keys: Optional[List[str]] = None,
    ) -> FlagsAndPayloads:
        """Evaluate every flag along with its payload."""
        result = await self._invoke(
            ctx,
            "get_all_flags_and_payloads",
            PostHogOperation.GET_ALL_FLAGS_AND_PAYLOADS,
            {
                "distinct_id": distinct_id,
                "groups": groups,
                "person_properties": person_properties,
                "group_properties": group_properties,
                "disable_geoip": disable_geoip,
                "flag_keys": flag_keys,
            },
        )
        result = result or {}
        return {
            "featureFlags": result.get("featureFlags") or {},
            "featureFlagPayloads": result.get("featureFlagPayloads") or {},
        }
