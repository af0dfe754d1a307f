"""Fake host contexts for testing the front client."""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from posthog_temporal.core.config import PostHogOperation

ActionHandler = Callable[[Dict[str, Any]], Awaitable[Any]]


@dataclass
class ScheduledCall:
    """Single recorded ``run_after`` submission."""

    delay_seconds: float
    operation: PostHogOperation
    bundle: Dict[str, Any]


class FakeScheduler:
    """In-memory Scheduler that records submissions without running them."""

    def __init__(self) -> None:
        """Initialize with an empty submission log."""
        self.calls: List[ScheduledCall] = []
        self._should_raise: Optional[Exception] = None

    def set_error(self, error: Exception) -> None:
        """Make all subsequent submissions raise this error."""
        self._should_raise = error

    async def run_after(
        self,
        delay_seconds: float,
        operation: PostHogOperation,
        bundle: Dict[str, Any],
    ) -> None:
        """Record the submission."""
        if self._should_raise:
            raise self._should_raise
        self.calls.append(ScheduledCall(delay_seconds, operation, bundle))

    def get(self, operation: PostHogOperation) -> ScheduledCall:
        """Return the first submission of ``operation``, or raise AssertionError."""
        for call in self.calls:
            if call.operation == operation:
                return call
        raise AssertionError(
            f"No '{operation.value}' scheduled. "
            f"Scheduled: {[c.operation.value for c in self.calls]}"
        )


class FakeSchedulerContext:
    """Transactional context: scheduling only, no run_action."""

    def __init__(self, scheduler: Optional[FakeScheduler] = None) -> None:
        """Wrap ``scheduler`` (a fresh fake by default)."""
        self.scheduler = scheduler or FakeScheduler()


class FakeActionContext(FakeSchedulerContext):
    """Action context: scheduling plus run_action.

    ``run_action`` forwards to ``handlers[operation]`` when one is
    registered, otherwise returns ``results.get(operation)``.
    """

    def __init__(
        self,
        scheduler: Optional[FakeScheduler] = None,
        results: Optional[Dict[PostHogOperation, Any]] = None,
        handlers: Optional[Dict[PostHogOperation, ActionHandler]] = None,
    ) -> None:
        """Initialize with canned results or real handlers."""
        super().__init__(scheduler)
        self.results: Dict[PostHogOperation, Any] = dict(results or {})
        self.handlers = dict(handlers or {})
        self.actions: List[Tuple[PostHogOperation, Dict[str, Any]]] = []

    async def run_action(self, operation: PostHogOperation, bundle: Dict[str, Any]) -> Any:
        """Record the invocation and return the handler's or canned result."""
        self.actions.append((operation, bundle))
        handler = self.handlers.get(operation)
        if handler is not None:
            return await handler(bundle)
        return self.results.get(operation)
