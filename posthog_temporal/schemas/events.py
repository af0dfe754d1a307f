"""Event schema seen by ``before_send`` transforms."""

import copy
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

IDENTIFY_EVENT = "$identify"
GROUP_IDENTIFY_EVENT = "$groupidentify"
ALIAS_EVENT = "$create_alias"
EXCEPTION_EVENT = "$exception"


def group_distinct_id(group_type: str, group_key: str) -> str:
    """Distinct id a group event is attributed to when the caller gives none."""
    return f"${group_type}_{group_key}"


class Event(BaseModel):
    """A single analytics event on its way out of the process.

    Frozen: a transform that wants to change an event returns a new one,
    typically via ``event.model_copy(update={...})``.
    """

    model_config = ConfigDict(frozen=True)

    event: str
    distinct_id: str
    properties: Dict[str, Any] = Field(default_factory=dict)
    timestamp: Optional[datetime] = None
    groups: Optional[Dict[str, Union[str, int]]] = None
    uuid: Optional[str] = None
    send_feature_flags: Optional[bool] = None
    disable_geoip: Optional[bool] = None

    @field_validator("properties", "groups", mode="before")
    @classmethod
    def _detach(cls, value: Any) -> Any:
        # Transforms must never see (or mutate) the caller's own mappings.
        if value is None:
            return value
        return copy.deepcopy(value)

    def with_properties(self, **properties: Any) -> "Event":
        """Return a copy with ``properties`` merged over the current ones."""
        return self.model_copy(update={"properties": {**self.properties, **properties}})


TransformFn = Callable[[Event], Optional[Event]]
