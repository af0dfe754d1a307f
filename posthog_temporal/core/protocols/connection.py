"""Protocol for the scoped PostHog backend connection."""

from datetime import datetime
from typing import Any, AsyncContextManager, Dict, List, Optional, Protocol, Union

GroupMap = Dict[str, Union[str, int]]


class PostHogConnection(Protocol):
    """Subset of the PostHog SDK client used by the worker.

    Signatures follow ``posthog.Posthog``. Every method is blocking; callers
    run them off the event loop.
    """

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
        """Send a single event."""
        ...

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
        """Set properties on a group."""
        ...

    def alias(
        self,
        previous_id: str,
        distinct_id: Optional[str],
        timestamp: Optional[datetime] = None,
        uuid: Optional[str] = None,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[str]:
        """Merge ``previous_id`` into ``distinct_id``."""
        ...

    def get_feature_flag(
        self,
        key: str,
        distinct_id: str,
        *,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: bool = True,
        disable_geoip: Optional[bool] = None,
    ) -> Any:
        """Evaluate a single flag."""
        ...

    def feature_enabled(
        self,
        key: str,
        distinct_id: str,
        *,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: bool = True,
        disable_geoip: Optional[bool] = None,
    ) -> Optional[bool]:
        """Return whether a flag is enabled."""
        ...

    def get_feature_flag_payload(
        self,
        key: str,
        distinct_id: str,
        *,
        match_value: Any = None,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: bool = False,
        disable_geoip: Optional[bool] = None,
    ) -> Any:
        """Return the payload attached to a flag value."""
        ...

    def get_feature_flag_result(
        self,
        key: str,
        distinct_id: str,
        *,
        groups: Optional[GroupMap] = None,
        person_properties: Optional[Dict[str, Any]] = None,
        group_properties: Optional[Dict[str, Dict[str, Any]]] = None,
        send_feature_flag_events: bool = True,
        disable_geoip: Optional[bool] = None,
    ) -> Any:
        """Evaluate a flag once; the result has ``key``, ``enabled``, ``variant``, ``payload``."""
        ...

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
        """Evaluate every flag, or only ``flag_keys_to_evaluate``."""
        ...

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
        """Evaluate every flag with payloads."""
        ...

    def shutdown(self) -> None:
        """Flush and stop the client."""
        ...


class PostHogConnectionFactory(Protocol):
    """Opens a connection scoped to one call."""

    def __call__(self, api_key: str, host: str) -> AsyncContextManager[PostHogConnection]:
        """Return an async context manager yielding a live connection."""
        ...
