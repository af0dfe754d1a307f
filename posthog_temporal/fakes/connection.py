"""Fake PostHog connection for testing."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from posthog.types import FeatureFlagResult as SdkFeatureFlagResult

from posthog_temporal.core.protocols import PostHogConnection
from posthog_temporal.core.protocols.connection import GroupMap


class FakePostHogConnection(PostHogConnection):
    """In-memory test double for PostHogConnection.

    Records every SDK call and answers flag queries from canned values.
    Method signatures match ``posthog.Posthog``, so an option the SDK does
    not accept fails here too. Only arguments that were actually passed are
    recorded.

    Usage:
        conn = FakePostHogConnection(flags={"beta": "variant-a"})
        activities = create_posthog_activities(FakeConnectionFactory(conn))
    """

    def __init__(
        self,
        flags: Optional[Dict[str, Any]] = None,
        payloads: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize with canned flag values and payloads."""
        self.flags: Dict[str, Any] = dict(flags or {})
        self.payloads: Dict[str, Any] = dict(payloads or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.shutdown_count = 0
        self._should_raise: Optional[Exception] = None

    def set_error(self, error: Exception) -> None:
        """Make all subsequent SDK calls raise this error."""
        self._should_raise = error

    def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append((method, {k: v for k, v in kwargs.items() if v is not None}))
        if self._should_raise:
            raise self._should_raise

    def get(self, method: str) -> Dict[str, Any]:
        """Return kwargs of the first call to ``method``, or raise AssertionError."""
        for name, kwargs in self.calls:
            if name == method:
                return kwargs
        raise AssertionError(
            f"No call to '{method}'. Calls: {[name for name, _ in self.calls]}"
        )

    def _select(self, mapping: Dict[str, Any], keys: Optional[List[str]]) -> Dict[str, Any]:
        if keys is None:
            return dict(mapping)
        return {k: v for k, v in mapping.items() if k in keys}

    # Events

    def capture(
        self,
        event: str,
        *,
        distinct_id: Optional[str] = None,
        properties: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
        uuid: Optional[str] = None,
        groups: Optional[GroupMap] = None,
        send_feature_flags: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[str]:
        """Record a capture."""
        self._record(
            "capture",
            event=event,
            distinct_id=distinct_id,
            properties=properties,
            timestamp=timestamp,
            uuid=uuid,
            groups=groups,
            send_feature_flags=send_feature_flags,
            disable_geoip=disable_geoip,
        )
        return None

    def group_identify(
        self,
        group_type: str,
        group_key: str,
        properties: Optional[Dict[str, Any]] = None,
        timestamp: Optional[datetime] = None,
        uuid: Optional[str] = None,
        disable_geoip: Optional[bool] = None,
        distinct_id: Optional[str] = None,
    ) -> Optional[str]:
        """Record a group identify."""
        self._record(
            "group_identify",
            group_type=group_type,
            group_key=group_key,
            properties=properties,
            timestamp=timestamp,
            uuid=uuid,
            disable_geoip=disable_geoip,
            distinct_id=distinct_id,
        )
        return None

    def alias(
        self,
        previous_id: str,
        distinct_id: Optional[str],
        timestamp: Optional[datetime] = None,
        uuid: Optional[str] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[str]:
        """Record an alias."""
        self._record(
            "alias",
            previous_id=previous_id,
            distinct_id=distinct_id,
            timestamp=timestamp,
            uuid=uuid,
            disable_geoip=disable_geoip,
        )
        return None

    # Feature flags

    def get_feature_flag(
        self,
        key: str,
        distinct_id: str,
        *,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Any:
        """Return the canned flag value."""
        self._record(
            "get_feature_flag",
            key=key,
            distinct_id=distinct_id,
            groups=groups,
            person_properties=person_properties,
            group_properties=group_properties,
            send_feature_flag_events=send_feature_flag_events,
            disable_geoip=disable_geoip,
        )
        return self.flags.get(key)

    def feature_enabled(
        self,
        key: str,
        distinct_id: str,
        *,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[bool]:
        """Return whether the canned flag value is truthy, None if unknown."""
        self._record(
            "feature_enabled",
            key=key,
            distinct_id=distinct_id,
            groups=groups,
            person_properties=person_properties,
            group_properties=group_properties,
            send_feature_flag_events=send_feature_flag_events,
            disable_geoip=disable_geoip,
        )
        if key not in self.flags:
            return None
        return bool(self.flags[key])

    def get_feature_flag_payload(
        self,
        key: str,
        distinct_id: str,
        *,
        match_value: Any = None,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Any:
        """Return the canned payload."""
        self._record(
            "get_feature_flag_payload",
            key=key,
            distinct_id=distinct_id,
            match_value=match_value,
            groups=groups,
            person_properties=person_properties,
            group_properties=group_properties,
            send_feature_flag_events=send_feature_flag_events,
            disable_geoip=disable_geoip,
        )
        return self.payloads.get(key)

    def get_feature_flag_result(
        self,
        key: str,
        distinct_id: str,
        *,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: Optional[bool] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[SdkFeatureFlagResult]:
        """Return the SDK's result object built from the canned value and payload."""
        self._record(
            "get_feature_flag_result",
            key=key,
            distinct_id=distinct_id,
            groups=groups,
            person_properties=person_properties,
            group_properties=group_properties,
            send_feature_flag_events=send_feature_flag_events,
            disable_geoip=disable_geoip,
        )
        return SdkFeatureFlagResult.from_value_and_payload(
            key, self.flags.get(key), self.payloads.get(key)
        )

    def get_all_flags(
        self,
        distinct_id: str,
        *,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        disable_geoip: Optional[bool] = None,
        flag_keys_to_evaluate: Optional[List[str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Return the canned flags, restricted to ``flag_keys_to_evaluate``."""
        self._record(
            "get_all_flags",
            distinct_id=distinct_id,
            groups=groups,
            person_properties=person_properties,
            group_properties=group_properties,
            disable_geoip=disable_geoip,
            flag_keys_to_evaluate=flag_keys_to_evaluate,
        )
        return self._select(self.flags, flag_keys_to_evaluate)

    def get_all_flags_and_payloads(
        self,
        distinct_id: str,
        *,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        disable_geoip: Optional[bool] = None,
        flag_keys_to_evaluate: Optional[List[str]] = None,
    ) -> Optional[Dict[str, Optional[Dict[str, Any]]]]:
        """Return the canned flags and payloads, restricted to ``flag_keys_to_evaluate``."""
        self._record(
            "get_all_flags_and_payloads",
            distinct_id=distinct_id,
            groups=groups,
            person_properties=person_properties,
            group_properties=group_properties,
            disable_geoip=disable_geoip,
            flag_keys_to_evaluate=flag_keys_to_evaluate,
        )
        return {
            "featureFlags": self._select(self.flags, flag_keys_to_evaluate),
            "featureFlagPayloads": self._select(self.payloads, flag_keys_to_evaluate),
        }

    def shutdown(self) -> None:
        """Count shutdowns."""
        self.shutdown_count += 1


class FakeConnectionFactory:
    """PostHogConnectionFactory handing out one shared fake connection.

    Records the credentials of every opened connection and how many are
    still open.
    """

    def __init__(self, connection: Optional[FakePostHogConnection] = None) -> None:
        """Wrap ``connection`` (a fresh fake by default)."""
        self.connection = connection or FakePostHogConnection()
        self.opened: List[Tuple[str, str]] = []
        self.open_count = 0

    @asynccontextmanager
    async def __call__(self, api_key: str, host: str) -> AsyncIterator[FakePostHogConnection]:
        """Open a scoped connection, closing it on exit."""
        self.opened.append((api_key, host))
        self.open_count += 1
        try:
            yield self.connection
        finally:
            self.connection.shutdown()
            self.open_count -= 1
