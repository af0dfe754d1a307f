"""Convert arbitrary raised values into ``NormalizedError``."""

import traceback
from collections.abc import Mapping
from typing import Any, Optional

from posthog_temporal.schemas.errors import NormalizedError


def _string_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _field(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    return getattr(value, name, None)


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        pass
    try:
        return repr(value)
    except Exception:
        return f"<{type(value).__name__}>"


def normalize_error(value: Any) -> NormalizedError:
    """Normalize ``value`` for transport across the dispatch boundary.

    Never raises.

    1. Exceptions keep their message, class name and formatted traceback.
       Other objects or mappings with a string ``message`` keep it, plus
       ``name``/``stack`` when those are strings too.
    2. Strings become the message.
    3. Anything else is stringified (``None`` -> ``"None"``).
    """
    if isinstance(value, BaseException):
        try:
            stack = "".join(
                traceback.format_exception(type(value), value, value.__traceback__)
            )
        except Exception:
            stack = None
        return NormalizedError(
            message=_safe_str(value),
            name=type(value).__name__,
            stack=stack,
        )

    try:
        message = _field(value, "message")
    except Exception:
        message = None
    if isinstance(message, str):
        try:
            name = _string_or_none(_field(value, "name"))
            stack = _string_or_none(_field(value, "stack"))
        except Exception:
            name = stack = None
        return NormalizedError(message=message, name=name, stack=stack)

    if isinstance(value, str):
        return NormalizedError(message=value)

    return NormalizedError(message=_safe_str(value))
