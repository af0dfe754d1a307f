"""PostHog backend connection adapters."""

from posthog_temporal.adapters.posthog.connection import posthog_connection

__all__ = ["posthog_connection"]
