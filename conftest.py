"""Root conftest for pytest configuration and shared fixtures.

Tests are colocated in ``tests/`` directories beside the code they cover;
this conftest makes the fixtures below available to all of them.
"""

import os

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any posthog_temporal import.
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("TEMPORAL_TASK_QUEUE", "posthog-test")


# ---------------------------------------------------------------------------
# Shared fake fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_scheduler():
    """Fake Scheduler that records submissions."""
    from posthog_temporal.fakes import FakeScheduler

    return FakeScheduler()


@pytest.fixture
def scheduler_ctx(fake_scheduler):
    """Transactional context with only a scheduler."""
    from posthog_temporal.fakes import FakeSchedulerContext

    return FakeSchedulerContext(fake_scheduler)


@pytest.fixture
def fake_connection():
    """Fake PostHog SDK connection with no flags."""
    from posthog_temporal.fakes import FakePostHogConnection

    return FakePostHogConnection()


@pytest.fixture
def fake_connect(fake_connection):
    """Connection factory handing out ``fake_connection``."""
    from posthog_temporal.fakes import FakeConnectionFactory

    return FakeConnectionFactory(fake_connection)


@pytest.fixture
def posthog_client(monkeypatch):
    """Front client with explicit credentials and no transforms."""
    from posthog_temporal import PostHog

    monkeypatch.delenv("POSTHOG_API_KEY", raising=False)
    monkeypatch.delenv("POSTHOG_HOST", raising=False)
    return PostHog(api_key="phc_test", host="https://test.posthog.com")
