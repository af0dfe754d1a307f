"""Activity and workflow wiring.

This module is the DI wiring point for Temporal.
It connects activities to their PostHog connection factory.
"""

from typing import Optional

from posthog_temporal.core.logging import logger
from posthog_temporal.core.protocols import PostHogConnectionFactory


def create_activities(connect: Optional[PostHogConnectionFactory] = None) -> list:
    """Create activity instances and return their .run methods to register.

    Args:
        connect: Connection factory override. Defaults to the real
            scoped PostHog connection.
    """
    from posthog_temporal.platform.temporal.activities import create_posthog_activities

    logger.debug("Wiring PostHog activities")

    if connect is None:
        return list(create_posthog_activities().values())
    return list(create_posthog_activities(connect).values())


def get_workflows() -> list:
    """Get workflow classes to register."""
    from posthog_temporal.platform.temporal.workflows import PostHogDispatchWorkflow

    return [PostHogDispatchWorkflow]
