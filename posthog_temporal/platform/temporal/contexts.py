"""Temporal host contexts for the PostHog front client.

Pick the context that matches where the caller runs:

- ``WorkflowContext``: inside a workflow. Scheduling only; each call starts
  an abandoned child ``PostHogDispatchWorkflow``, so no I/O happens in the
  workflow itself.
- ``ClientContext``: outside Temporal (request handlers, scripts).
  Scheduling only, through the Temporal client.
- ``ActivityContext``: inside an activity. Scheduling plus ``run_action``,
  which runs the operation's activity body in-process and returns its
  result. Feature-flag reads require this context.

Workflow code should import this module through
``workflow.unsafe.imports_passed_through()``.
"""

import uuid
from typing import Any, Dict, Mapping, Optional

from temporalio import workflow
from temporalio.workflow import ParentClosePolicy

from posthog_temporal.core.config import PostHogOperation, settings
from posthog_temporal.core.logging import logger
from posthog_temporal.core.protocols import Scheduler
from posthog_temporal.platform.temporal.activities import ActivityFn, create_posthog_activities
from posthog_temporal.platform.temporal.client import temporal_client
from posthog_temporal.platform.temporal.workflows import PostHogDispatchWorkflow


def _dispatch_workflow_id(operation: PostHogOperation, suffix: str) -> str:
    return f"posthog-{operation.value}-{suffix}"


# =============================================================================
# Schedulers
# =============================================================================


class WorkflowScheduler:
    """Schedules from inside a workflow by starting an abandoned child workflow.

    Returns once Temporal has accepted the child start. The child outlives
    the parent and its failure never reaches the parent.
    """

    async def run_after(
        self,
        delay_seconds: float,
        operation: PostHogOperation,
        bundle: Dict[str, Any],
    ) -> None:
        """Start a child dispatch workflow."""
        await workflow.start_child_workflow(
            PostHogDispatchWorkflow.run,
            args=[operation.value, bundle, delay_seconds],
            id=_dispatch_workflow_id(operation, workflow.uuid4().hex),
            parent_close_policy=ParentClosePolicy.ABANDON,
        )


class TemporalClientScheduler:
    """Schedules from outside a workflow by starting a dispatch workflow via the client."""

    def __init__(self, task_queue: Optional[str] = None) -> None:
        """Initialize with the task queue the worker polls."""
        self._task_queue = task_queue or settings.TEMPORAL_TASK_QUEUE

    async def run_after(
        self,
        delay_seconds: float,
        operation: PostHogOperation,
        bundle: Dict[str, Any],
    ) -> None:
        """Start a dispatch workflow and return once Temporal accepted it."""
        client = await temporal_client.get_client()
        workflow_id = _dispatch_workflow_id(operation, uuid.uuid4().hex)
        await client.start_workflow(
            PostHogDispatchWorkflow.run,
            args=[operation.value, bundle, delay_seconds],
            id=workflow_id,
            task_queue=self._task_queue,
        )
        logger.debug(f"Started dispatch workflow {workflow_id}")


# =============================================================================
# Contexts
# =============================================================================


class WorkflowContext:
    """Transactional context for code running inside a Temporal workflow."""

    def __init__(self, scheduler: Optional[Scheduler] = None) -> None:
        """Use ``scheduler`` or a child-workflow scheduler."""
        self.scheduler: Scheduler = scheduler or WorkflowScheduler()


class ClientContext:
    """Transactional context for code running outside Temporal."""

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        task_queue: Optional[str] = None,
    ) -> None:
        """Use ``scheduler`` or a Temporal client scheduler on ``task_queue``."""
        self.scheduler: Scheduler = scheduler or TemporalClientScheduler(task_queue)


class ActivityContext:
    """Isolated action context for code running inside a Temporal activity."""

    def __init__(
        self,
        activities: Optional[Mapping[PostHogOperation, ActivityFn]] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        """Initialize the context.

        Args:
            activities: Operation to activity body mapping. Defaults to the
                real activities over scoped PostHog connections.
            scheduler: Scheduler for fire-and-forget calls. Defaults to the
                Temporal client scheduler.
        """
        if activities is None:
            activities = create_posthog_activities()
        self._activities = dict(activities)
        self.scheduler: Scheduler = scheduler or TemporalClientScheduler()

    async def run_action(self, operation: PostHogOperation, bundle: Dict[str, Any]) -> Any:
        """Run the activity body for ``operation`` and return its result."""
        activity_fn = self._activities.get(PostHogOperation(operation))
        if activity_fn is None:
            raise KeyError(f"No activity registered for {operation}")
        return await activity_fn(bundle)
