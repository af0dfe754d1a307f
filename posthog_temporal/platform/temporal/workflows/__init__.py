"""Temporal workflows for posthog_temporal."""

from posthog_temporal.platform.temporal.workflows.dispatch import PostHogDispatchWorkflow

__all__ = [
    "PostHogDispatchWorkflow",
]
