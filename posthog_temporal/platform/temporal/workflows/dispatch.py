"""Workflow that executes one deferred PostHog call."""

import asyncio
from datetime import timedelta
from typing import Any, Dict

from temporalio import workflow
from temporalio.common import RetryPolicy

ACTIVITY_TIMEOUT = timedelta(seconds=30)
ACTIVITY_RETRY_POLICY = RetryPolicy(
    maximum_attempts=3,
    initial_interval=timedelta(seconds=1),
    maximum_interval=timedelta(seconds=30),
    backoff_coefficient=2.0,
)


@workflow.defn
class PostHogDispatchWorkflow:
    """Runs a scheduled PostHog activity after an optional delay.

    Started by the schedulers in ``platform/temporal/contexts.py``. The
    submitter never waits for this workflow; retries and durability are
    Temporal's.
    """

    @workflow.run
    async def run(
        self,
        operation: str,
        bundle: Dict[str, Any],
        delay_seconds: float = 0,
    ) -> None:
        """Execute ``operation`` with ``bundle``.

        Args:
            operation: PostHogOperation value, which is the activity name
            bundle: Serialized arguments for the activity
            delay_seconds: Wait this long before executing
        """
        if delay_seconds > 0:
            await asyncio.sleep(delay_seconds)

        workflow.logger.debug(f"Dispatching {operation}")
        await workflow.execute_activity(
            operation,
            bundle,
            start_to_close_timeout=ACTIVITY_TIMEOUT,
            retry_policy=ACTIVITY_RETRY_POLICY,
        )
