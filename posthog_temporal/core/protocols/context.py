"""Host context capabilities.

The front client never talks to a host directly. It receives a context and
uses one of two capabilities on it:

- ``SchedulerCtx``: defers an operation to run later in isolation. Offered
  by transactional contexts (workflows, request handlers) and by action
  contexts alike.
- ``ActionCtx``: invokes an operation and waits for its result. Only
  offered by isolated action contexts (activities).
"""

from typing import Any, Dict, Protocol, runtime_checkable

from posthog_temporal.core.config import PostHogOperation


@runtime_checkable
class Scheduler(Protocol):
    """Deferred execution of an operation."""

    async def run_after(
        self,
        delay_seconds: float,
        operation: PostHogOperation,
        bundle: Dict[str, Any],
    ) -> None:
        """Submit ``operation`` for execution after ``delay_seconds``.

        Returns once the submission is acknowledged, never waits for the
        operation itself.
        """
        ...


@runtime_checkable
class SchedulerCtx(Protocol):
    """Context offering deferred scheduling."""

    @property
    def scheduler(self) -> Scheduler:
        """Scheduler bound to this context."""
        ...


@runtime_checkable
class ActionCtx(Protocol):
    """Context offering synchronous-to-caller remote invocation."""

    async def run_action(self, operation: PostHogOperation, bundle: Dict[str, Any]) -> Any:
        """Run ``operation`` and return its result."""
        ...
