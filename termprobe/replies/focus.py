"""Focus-event notifications sent while mode 1004 is enabled."""

from __future__ import annotations

from enum import Enum


class FocusEvent(Enum):
    IN = b"\x1b[I"
    OUT = b"\x1b[O"


def parse_focus_event(response: bytes | None) -> FocusEvent | None:
    """Match the first three bytes only; the rest of the capture is ignored.

    ``None`` means the user pressed something else, which ends observation.
    """
    if not response or len(response) < 3:
        return None
    head = response[:3]
    for event in FocusEvent:
        if head == event.value:
            return event
    return None
