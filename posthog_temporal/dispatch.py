"""Dispatch boundary: hand a fire-and-forget call to the host for later execution.

Bundles must be plain data. Nothing that reaches ``run_after`` may hold a
live object, a callable or a value the host's JSON payload converter would
choke on.
"""

import math
from typing import Any, Dict

from posthog_temporal.core.config import PostHogOperation
from posthog_temporal.core.exceptions import BundleSerializationError
from posthog_temporal.core.logging import logger
from posthog_temporal.core.protocols import SchedulerCtx

_SCALARS = (str, int, bool, type(None))


def ensure_serializable(value: Any, path: str = "bundle") -> None:
    """Raise ``BundleSerializationError`` if ``value`` is not plain data."""
    if isinstance(value, _SCALARS):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise BundleSerializationError(
                path, value, f"Non-finite float at {path}: {value!r}"
            )
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise BundleSerializationError(
                    path, key, f"Non-string key at {path}: {key!r}"
                )
            ensure_serializable(item, f"{path}.{key}")
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            ensure_serializable(item, f"{path}[{index}]")
        return
    raise BundleSerializationError(path, value)


def compact(bundle: Dict[str, Any]) -> Dict[str, Any]:
    """Drop top-level keys whose value is ``None``."""
    return {k: v for k, v in bundle.items() if v is not None}


async def dispatch(
    ctx: SchedulerCtx,
    operation: PostHogOperation,
    bundle: Dict[str, Any],
) -> None:
    """Validate ``bundle`` and schedule ``operation`` with zero delay.

    Returns as soon as the host acknowledges the submission. The deferred
    execution's outcome is never observed here and nothing is retried.
    """
    ensure_serializable(bundle)
    await ctx.scheduler.run_after(0, operation, bundle)
    logger.debug(f"Scheduled {operation.value}")
