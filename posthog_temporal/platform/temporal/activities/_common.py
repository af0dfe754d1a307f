"""Helpers shared by the PostHog activities."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from posthog_temporal.core.logging import ContextualLogger, logger


def sdk_kwargs(**kwargs: Any) -> Dict[str, Any]:
    """Drop unset options so the SDK applies its own defaults."""
    return {k: v for k, v in kwargs.items() if v is not None}


def from_epoch_millis(value: Optional[float]) -> Optional[datetime]:
    """Inverse of the front client's timestamp conversion."""
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


async def call_sdk(method: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a blocking SDK method off the event loop."""
    return await asyncio.to_thread(method, *args, **kwargs)


def activity_logger(operation: str, bundle: Dict[str, Any]) -> ContextualLogger:
    """Logger scoped to one activity call. Never carries the API key."""
    return logger.with_context(operation=operation, distinct_id=bundle.get("distinct_id"))
