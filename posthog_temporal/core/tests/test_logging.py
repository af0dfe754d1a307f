"""Tests for ContextualLogger."""

import logging

from posthog_temporal.core.logging import ContextualLogger, logger


def _adapter() -> ContextualLogger:
    return ContextualLogger(logging.getLogger("posthog_temporal.test"))


def test_plain_message_unchanged():
    msg, _ = _adapter().process("hello", {})

    assert msg == "hello"


def test_with_context_appends_dimensions():
    log = _adapter().with_context(operation="posthog_capture").with_context(distinct_id="u")

    msg, _ = log.process("sent", {})

    assert msg == "sent [operation=posthog_capture distinct_id=u]"


def test_with_prefix_and_context():
    log = _adapter().with_prefix("Worker: ").with_context(a=1)

    msg, _ = log.process("started", {})

    assert msg == "Worker: started [a=1]"


def test_children_do_not_mutate_parent():
    parent = _adapter()
    parent.with_context(a=1)

    assert parent.extra == {}


def test_module_logger_level_from_settings():
    assert logger.logger.name == "posthog_temporal"
    assert logger.logger.level == logging.DEBUG
