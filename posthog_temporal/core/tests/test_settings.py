"""Tests for settings loading."""

from posthog_temporal.core.config import DEFAULT_POSTHOG_HOST, PostHogSettings, Settings


def test_posthog_settings_defaults(monkeypatch):
    monkeypatch.delenv("POSTHOG_API_KEY", raising=False)
    monkeypatch.delenv("POSTHOG_HOST", raising=False)

    s = PostHogSettings()

    assert s.api_key == ""
    assert s.host == DEFAULT_POSTHOG_HOST == "https://us.i.posthog.com"


def test_posthog_settings_from_env(monkeypatch):
    monkeypatch.setenv("POSTHOG_API_KEY", "phc_env")
    monkeypatch.setenv("POSTHOG_HOST", "https://eu.i.posthog.com")

    s = PostHogSettings()

    assert s.api_key == "phc_env"
    assert s.host == "https://eu.i.posthog.com"


def test_temporal_address(monkeypatch):
    monkeypatch.setenv("TEMPORAL_HOST", "temporal.internal")
    monkeypatch.setenv("TEMPORAL_PORT", "7234")

    assert Settings().temporal_address == "temporal.internal:7234"
