"""Shared exceptions module."""

from typing import Optional


class PostHogTemporalException(Exception):
    """Base exception for posthog_temporal."""

    pass


class ContextCapabilityError(PostHogTemporalException):
    """Raised when an operation is called with a context lacking the capability it needs.

    Fire-and-forget operations need a context with a ``scheduler``;
    feature-flag reads need a context with ``run_action``.
    """

    def __init__(self, operation: str, capability: str, context: object):
        """Create a new ContextCapabilityError instance.

        Args:
        ----
            operation (str): The front client operation that was called.
            capability (str): The missing capability.
            context (object): The context that was passed in.

        """
        self.operation = operation
        self.capability = capability
        self.message = (
            f"{operation}() requires a context with {capability}; "
            f"got {type(context).__name__}"
        )
        super().__init__(self.message)


class BundleSerializationError(PostHogTemporalException):
    """Raised when a dispatch bundle contains a value that cannot cross the boundary."""

    def __init__(self, path: str, value: object, message: Optional[str] = None):
        """Create a new BundleSerializationError instance.

        Args:
        ----
            path (str): Location of the offending value inside the bundle.
            value (object): The offending value.
            message (str, optional): The error message. Has default message.

        """
        self.path = path
        self.message = message or f"Unserializable value at {path}: {type(value).__name__}"
        super().__init__(self.message)
