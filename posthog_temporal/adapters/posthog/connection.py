"""Scoped PostHog SDK connection.

Every worker call opens its own client and shuts it down before returning.
Nothing is pooled: the activity process may be torn down between calls
with no shutdown hook, so a client left behind could lose buffered events.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from posthog import Posthog

from posthog_temporal.core.logging import logger
from posthog_temporal.core.protocols import PostHogConnection


@asynccontextmanager
async def posthog_connection(api_key: str, host: str) -> AsyncIterator[PostHogConnection]:
    """Yield a PostHog client that sends every call immediately.

    ``sync_mode`` disables the background consumer thread, so ``capture``
    returns only after the request was made. ``shutdown`` always runs, also
    when the body raises.
    """
    client = Posthog(api_key, host=host, sync_mode=True)
    logger.debug(f"Opened PostHog connection to {host}")
    try:
        yield client
    finally:
        await asyncio.to_thread(client.shutdown)
        logger.debug(f"Closed PostHog connection to {host}")
