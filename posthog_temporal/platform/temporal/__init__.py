"""Temporal host: client, dispatch workflow, PostHog activities, worker, contexts."""
