"""Tests for the PostHog front client's fire-and-forget operations."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict
from unittest.mock import patch

import pytest

from posthog_temporal import ContextCapabilityError, Event, PostHog, PostHogOperation
from posthog_temporal.fakes import FakeScheduler, FakeSchedulerContext

CREDENTIALS = {"api_key": "phc_test", "host": "https://test.posthog.com"}


def _build(before_send=None) -> tuple[PostHog, FakeScheduler, FakeSchedulerContext]:
    client = PostHog(before_send=before_send, **CREDENTIALS)
    scheduler = FakeScheduler()
    return client, scheduler, FakeSchedulerContext(scheduler)


# ---------------------------------------------------------------------------
# One case per fire-and-forget operation
# ---------------------------------------------------------------------------


@dataclass
class OpCase:
    id: str
    call: Callable[[PostHog, Any], Awaitable[None]]
    operation: PostHogOperation
    event_name: str
    expected_bundle: Dict[str, Any] = field(default_factory=dict)


OP_CASES = [
    OpCase(
        id="capture",
        call=lambda c, ctx: c.capture(
            ctx, distinct_id="user-1", event="signed_up", properties={"plan": "pro"}
        ),
        operation=PostHogOperation.CAPTURE,
        event_name="signed_up",
        expected_bundle={
            "distinct_id": "user-1",
            "event": "signed_up",
            "properties": {"plan": "pro"},
        },
    ),
    OpCase(
        id="identify",
        call=lambda c, ctx: c.identify(ctx, distinct_id="user-1", properties={"name": "Ada"}),
        operation=PostHogOperation.IDENTIFY,
        event_name="$identify",
        expected_bundle={"distinct_id": "user-1", "properties": {"$set": {"name": "Ada"}}},
    ),
    OpCase(
        id="group_identify",
        call=lambda c, ctx: c.group_identify(
            ctx,
            group_type="company",
            group_key="acme",
            properties={"industry": "Technology"},
            distinct_id="user-1",
        ),
        operation=PostHogOperation.GROUP_IDENTIFY,
        event_name="$groupidentify",
        expected_bundle={
            "group_type": "company",
            "group_key": "acme",
            "properties": {"industry": "Technology"},
            "distinct_id": "user-1",
        },
    ),
    OpCase(
        id="alias",
        call=lambda c, ctx: c.alias(ctx, distinct_id="user-1", alias="anon-42"),
        operation=PostHogOperation.ALIAS,
        event_name="$create_alias",
        expected_bundle={"distinct_id": "user-1", "alias": "anon-42"},
    ),
    OpCase(
        id="capture_exception",
        call=lambda c, ctx: c.capture_exception(ctx, error="boom", distinct_id="user-1"),
        operation=PostHogOperation.CAPTURE_EXCEPTION,
        event_name="$exception",
        expected_bundle={"distinct_id": "user-1", "error_message": "boom"},
    ),
]


@pytest.mark.parametrize("case", OP_CASES, ids=[c.id for c in OP_CASES])
async def test_dispatches_once_without_transforms(case: OpCase):
    client, scheduler, ctx = _build()

    await case.call(client, ctx)

    assert len(scheduler.calls) == 1
    call = scheduler.calls[0]
    assert call.delay_seconds == 0
    assert call.operation == case.operation
    assert call.bundle == {**CREDENTIALS, **case.expected_bundle}


@pytest.mark.parametrize("case", OP_CASES, ids=[c.id for c in OP_CASES])
async def test_transform_sees_reserved_event_name(case: OpCase):
    seen: list[str] = []

    def record(event: Event) -> Event:
        seen.append(event.event)
        return event

    client, _, ctx = _build(before_send=record)
    await case.call(client, ctx)

    assert seen == [case.event_name]


@pytest.mark.parametrize("case", OP_CASES, ids=[c.id for c in OP_CASES])
async def test_suppressed_event_is_not_dispatched(case: OpCase):
    client, scheduler, ctx = _build(before_send=lambda event: None)

    result = await case.call(client, ctx)

    assert result is None
    assert scheduler.calls == []


@pytest.mark.parametrize("case", OP_CASES, ids=[c.id for c in OP_CASES])
async def test_identical_calls_dispatch_independently(case: OpCase):
    client, scheduler, ctx = _build()

    await case.call(client, ctx)
    await case.call(client, ctx)

    assert len(scheduler.calls) == 2
    assert scheduler.calls[0].bundle == scheduler.calls[1].bundle
    assert scheduler.calls[0].bundle is not scheduler.calls[1].bundle


@pytest.mark.parametrize("case", OP_CASES, ids=[c.id for c in OP_CASES])
async def test_rejects_context_without_scheduler(case: OpCase):
    client, _, _ = _build()

    with pytest.raises(ContextCapabilityError):
        await case.call(client, object())


# ---------------------------------------------------------------------------
# Per-operation details
# ---------------------------------------------------------------------------


async def test_capture_converts_timestamp_to_epoch_millis():
    client, scheduler, ctx = _build()

    await client.capture(
        ctx,
        distinct_id="user-1",
        event="ordered",
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        groups={"company": "acme"},
        uuid="0190d2b4-0000-7000-8000-000000000000",
        send_feature_flags=True,
        disable_geoip=True,
    )

    bundle = scheduler.get(PostHogOperation.CAPTURE).bundle
    assert bundle["timestamp"] == 1704067200000
    assert bundle["groups"] == {"company": "acme"}
    assert bundle["uuid"] == "0190d2b4-0000-7000-8000-000000000000"
    assert bundle["send_feature_flags"] is True
    assert bundle["disable_geoip"] is True


async def test_capture_treats_naive_timestamp_as_utc():
    client, scheduler, ctx = _build()

    await client.capture(ctx, distinct_id="u", event="e", timestamp=datetime(2024, 1, 1))

    assert scheduler.calls[0].bundle["timestamp"] == 1704067200000


async def test_group_identify_without_distinct_id():
    seen: list[Event] = []

    def record(event: Event) -> Event:
        seen.append(event)
        return event

    client, scheduler, ctx = _build(before_send=record)
    await client.group_identify(ctx, group_type="company", group_key="acme")

    assert seen[0].distinct_id == "$company_acme"
    assert seen[0].properties == {
        "$group_type": "company",
        "$group_key": "acme",
        "$group_set": {},
    }
    assert "distinct_id" not in scheduler.calls[0].bundle


async def test_capture_exception_bundle():
    client, scheduler, ctx = _build()

    try:
        raise TypeError("bad type")
    except TypeError as e:
        await client.capture_exception(
            ctx,
            error=e,
            distinct_id="user-1",
            additional_properties={"context": "signup"},
        )

    bundle = scheduler.get(PostHogOperation.CAPTURE_EXCEPTION).bundle
    assert bundle["error_message"] == "bad type"
    assert bundle["error_name"] == "TypeError"
    assert "TypeError: bad type" in bundle["error_stack"]
    assert bundle["distinct_id"] == "user-1"
    assert bundle["additional_properties"] == {"context": "signup"}


async def test_capture_exception_transform_sees_error_properties():
    seen: list[Event] = []

    def record(event: Event) -> Event:
        seen.append(event)
        return event

    client, _, ctx = _build(before_send=record)
    await client.capture_exception(
        ctx, error=ValueError("nope"), distinct_id="u", additional_properties={"a": 1}
    )

    properties = seen[0].properties
    assert properties["a"] == 1
    assert properties["error_message"] == "nope"
    assert properties["error_name"] == "ValueError"
    assert "error_stack" in properties


async def test_capture_exception_reserved_keys_in_additional_properties():
    client, scheduler, ctx = _build()

    with patch("posthog_temporal.client.logger") as mock_logger:
        await client.capture_exception(
            ctx,
            error="real failure",
            distinct_id="u",
            additional_properties={
                "error_message": "caller message",
                "error_stack": "caller stack",
                "step": "checkout",
            },
        )

    bundle = scheduler.calls[0].bundle
    assert bundle["error_message"] == "real failure"
    assert "error_stack" not in bundle
    assert bundle["additional_properties"] == {"step": "checkout"}
    mock_logger.warning.assert_called_once()
    assert "error_message" in mock_logger.warning.call_args.args[0]
    assert "error_stack" in mock_logger.warning.call_args.args[0]


async def test_capture_exception_without_reserved_keys_does_not_warn():
    client, _, ctx = _build()

    with patch("posthog_temporal.client.logger") as mock_logger:
        await client.capture_exception(
            ctx, error="x", distinct_id="u", additional_properties={"step": "checkout"}
        )

    mock_logger.warning.assert_not_called()


async def test_capture_exception_transform_can_redact_stack():
    def drop_stack(event: Event) -> Event:
        properties = {k: v for k, v in event.properties.items() if k != "error_stack"}
        return event.model_copy(update={"properties": properties})

    client, scheduler, ctx = _build(before_send=drop_stack)
    await client.capture_exception(ctx, error=RuntimeError("x"), distinct_id="u")

    bundle = scheduler.calls[0].bundle
    assert "error_stack" not in bundle
    assert bundle["error_name"] == "RuntimeError"


async def test_caller_properties_are_not_mutated():
    properties = {"plan": "pro"}

    def enrich(event: Event) -> Event:
        event.properties["leaked"] = True
        return event

    client, scheduler, ctx = _build(before_send=enrich)
    await client.capture(ctx, distinct_id="u", event="e", properties=properties)

    assert properties == {"plan": "pro"}
    assert scheduler.calls[0].bundle["properties"] == {"plan": "pro", "leaked": True}


async def test_transform_exception_propagates_without_dispatch():
    def explode(event: Event) -> Event:
        raise RuntimeError("transform failed")

    client, scheduler, ctx = _build(before_send=explode)

    with pytest.raises(RuntimeError, match="transform failed"):
        await client.capture(ctx, distinct_id="u", event="e")
    assert scheduler.calls == []


async def test_scheduler_failure_propagates():
    client, scheduler, ctx = _build()
    scheduler.set_error(ConnectionError("temporal down"))

    with pytest.raises(ConnectionError):
        await client.identify(ctx, distinct_id="u")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


async def test_credentials_default_from_environment(monkeypatch):
    monkeypatch.setenv("POSTHOG_API_KEY", "phc_env")
    monkeypatch.setenv("POSTHOG_HOST", "https://env.posthog.com")
    client = PostHog()
    scheduler = FakeScheduler()

    await client.alias(FakeSchedulerContext(scheduler), distinct_id="a", alias="b")

    assert scheduler.calls[0].bundle["api_key"] == "phc_env"
    assert scheduler.calls[0].bundle["host"] == "https://env.posthog.com"


async def test_explicit_credentials_win_over_environment(monkeypatch):
    monkeypatch.setenv("POSTHOG_API_KEY", "phc_env")
    client, scheduler, ctx = _build()

    await client.identify(ctx, distinct_id="u")

    assert scheduler.calls[0].bundle["api_key"] == "phc_test"


def test_host_defaults_to_us_cloud(monkeypatch):
    monkeypatch.delenv("POSTHOG_HOST", raising=False)

    assert PostHog(api_key="k").host == "https://us.i.posthog.com"


def test_environment_read_once_at_construction(monkeypatch):
    monkeypatch.setenv("POSTHOG_HOST", "https://first.posthog.com")
    client = PostHog(api_key="k")
    monkeypatch.setenv("POSTHOG_HOST", "https://second.posthog.com")

    assert client.host == "https://first.posthog.com"


async def test_empty_api_key_is_allowed(monkeypatch):
    monkeypatch.delenv("POSTHOG_API_KEY", raising=False)
    client = PostHog()
    scheduler = FakeScheduler()

    await client.capture(FakeSchedulerContext(scheduler), distinct_id="u", event="e")

    assert scheduler.calls[0].bundle["api_key"] == ""
