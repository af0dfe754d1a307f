"""Logging for posthog_temporal.

``logger`` is a ``ContextualLogger``: a ``LoggerAdapter`` whose context
dimensions are appended to every message. Derive scoped loggers with
``with_context`` and ``with_prefix`` instead of building new adapters by
hand::

    log = logger.with_context(operation="posthog_capture")
    log.info("Dispatched")  # -> "Dispatched [operation=posthog_capture]"
"""

import logging
import sys
from typing import Any, MutableMapping, Tuple

from posthog_temporal.core.config import settings

_LOGGER_NAME = "posthog_temporal"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter carrying a prefix and key/value context."""

    def __init__(
        self,
        logger: logging.Logger,
        extra: MutableMapping[str, Any] | None = None,
        prefix: str = "",
    ) -> None:
        """Wrap ``logger`` with the given context dimensions and prefix."""
        super().__init__(logger, dict(extra or {}))
        self.prefix = prefix

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, Any]:
        """Prepend the prefix and append context dimensions to the message."""
        if self.extra:
            dims = " ".join(f"{k}={v}" for k, v in self.extra.items())
            msg = f"{self.prefix}{msg} [{dims}]"
        elif self.prefix:
            msg = f"{self.prefix}{msg}"
        return msg, kwargs

    def with_context(self, **context: Any) -> "ContextualLogger":
        """Return a child logger with additional context dimensions."""
        return ContextualLogger(self.logger, {**self.extra, **context}, prefix=self.prefix)

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a child logger that prefixes every message."""
        return ContextualLogger(self.logger, self.extra, prefix=f"{self.prefix}{prefix}")


def _configure_base_logger() -> logging.Logger:
    base = logging.getLogger(_LOGGER_NAME)
    if not base.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        base.addHandler(handler)
    base.setLevel(settings.LOG_LEVEL.value)
    base.propagate = True
    return base


logger = ContextualLogger(_configure_base_logger())
