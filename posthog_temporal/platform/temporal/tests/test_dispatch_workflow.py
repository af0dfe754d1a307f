"""Tests for PostHogDispatchWorkflow with the workflow API patched out."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from posthog_temporal.core.config import PostHogOperation
from posthog_temporal.platform.temporal.workflows.dispatch import (
    ACTIVITY_RETRY_POLICY,
    ACTIVITY_TIMEOUT,
    PostHogDispatchWorkflow,
)

MODULE = "posthog_temporal.platform.temporal.workflows.dispatch"


@pytest.fixture
def mock_workflow():
    with patch(f"{MODULE}.workflow") as mock:
        mock.execute_activity = AsyncMock()
        yield mock


@pytest.fixture
def mock_sleep():
    with patch(f"{MODULE}.asyncio") as mock:
        mock.sleep = AsyncMock()
        yield mock.sleep


async def test_executes_activity_by_operation_name(mock_workflow, mock_sleep):
    bundle = {"api_key": "k", "host": "h", "distinct_id": "u", "event": "e"}

    await PostHogDispatchWorkflow().run(PostHogOperation.CAPTURE.value, bundle)

    mock_workflow.execute_activity.assert_awaited_once_with(
        "posthog_capture",
        bundle,
        start_to_close_timeout=ACTIVITY_TIMEOUT,
        retry_policy=ACTIVITY_RETRY_POLICY,
    )
    mock_sleep.assert_not_awaited()


async def test_waits_for_delay_before_executing(mock_workflow, mock_sleep):
    await PostHogDispatchWorkflow().run(PostHogOperation.ALIAS.value, {}, 5)

    mock_sleep.assert_awaited_once_with(5)
    mock_workflow.execute_activity.assert_awaited_once()


async def test_activity_failure_fails_the_dispatch_workflow(mock_workflow, mock_sleep):
    mock_workflow.execute_activity.side_effect = RuntimeError("retries exhausted")

    with pytest.raises(RuntimeError):
        await PostHogDispatchWorkflow().run(PostHogOperation.CAPTURE.value, {})


def test_retry_policy_is_bounded():
    assert ACTIVITY_RETRY_POLICY.maximum_attempts == 3
