"""DECRPM (report mode) reply parsing.

A terminal answers ``CSI ? <mode> $ p`` with ``CSI ? <mode> ; <status> $ y``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum

_DECRPM_RE = re.compile(rb"\x1b\[\?([0-9]+);([0-4])\$y")


class DecrpmStatus(IntEnum):
    UNKNOWN = 0
    SET = 1
    RESET = 2
    PERMANENTLY_SET = 3
    PERMANENTLY_RESET = 4

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", " ")


@dataclass(frozen=True)
class DecrpmResult:
    mode: int
    status: DecrpmStatus


def parse_decrpm(response: bytes | None) -> DecrpmResult | None:
    """Parse a complete DECRPM reply; anything after the final ``y`` is invalid."""
    if not response:
        return None
    match = _DECRPM_RE.fullmatch(response)
    if match is None:
        return None
    return DecrpmResult(mode=int(match.group(1)), status=DecrpmStatus(int(match.group(2))))


def describe_decrpm(result: DecrpmResult | None) -> str:
    """Human-readable status, ``"?"`` for replies that did not parse."""
    if result is None:
        return "?"
    return result.status.label
