"""Feature flag schemas."""

from typing import Any, Dict, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict

FlagValue = Union[bool, str]


class FeatureFlagResult(BaseModel):
    """Backend-computed evaluation of one flag. Not cached."""

    model_config = ConfigDict(frozen=True)

    key: str
    enabled: bool
    variant: Optional[str] = None
    payload: Any = None


class FlagsAndPayloads(TypedDict):
    """Return shape of ``get_all_flags_and_payloads``, as the PostHog SDK returns it."""

    featureFlags: Dict[str, FlagValue]
    featureFlagPayloads: Dict[str, Any]
