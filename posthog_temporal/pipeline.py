"""The ``before_send`` transformation pipeline.

Transforms run in configured order. Each receives the previous stage's
output. A transform returning ``None`` suppresses the event: nothing is
dispatched and later transforms are not called.
"""

from typing import Iterable, Optional, Sequence, Tuple, Union

from posthog_temporal.core.logging import logger
from posthog_temporal.schemas.events import Event, TransformFn

BeforeSend = Union[None, TransformFn, Sequence[TransformFn]]


def normalize_transforms(before_send: BeforeSend) -> Tuple[TransformFn, ...]:
    """Accept ``None``, one transform or a sequence of them."""
    if before_send is None:
        return ()
    if callable(before_send):
        return (before_send,)
    transforms = tuple(before_send)
    for transform in transforms:
        if not callable(transform):
            raise TypeError(
                f"before_send entries must be callable, got {type(transform).__name__}"
            )
    return transforms


def apply_before_send(event: Event, transforms: Iterable[TransformFn]) -> Optional[Event]:
    """Run ``event`` through ``transforms``, returning ``None`` if suppressed."""
    current: Optional[Event] = event
    for transform in transforms:
        current = transform(current)
        if current is None:
            logger.debug(
                f"Event '{event.event}' suppressed by before_send "
                f"{getattr(transform, '__name__', repr(transform))}"
            )
            return None
    return current
