"""Mouse report decoding for the competing xterm encodings.

The grammars overlap by prefix, so decoders are tried in ``MOUSE_DECODERS``
order and the first one that accepts the capture wins:

1. legacy X10 / UTF-8 (modes 1000, 1005): ``CSI M b x y``
2. SGR and SGR-pixels (modes 1006, 1016): ``CSI < b ; x ; y M|m``
3. urxvt (mode 1015): ``CSI b ; x ; y M``
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple

LEGACY_PREFIX = b"\x1b[M"
LEGACY_REPORT_LENGTH = 6
COORDINATE_OFFSET = 32

_SGR_RE = re.compile(rb"\x1b\[<([0-9]+);([0-9]+);([0-9]+)([Mm])")
_URXVT_RE = re.compile(rb"\x1b\[([0-9]+);([0-9]+);([0-9]+)M")


class WindowSize(NamedTuple):
    columns: int
    rows: int


@dataclass(frozen=True)
class LegacyMouseEvent:
    button: int
    col: int
    row: int

    @property
    def modes(self) -> tuple[int, ...]:
        return (1000, 1005)

    def describe(self) -> str:
        return f"{self.button} @ {self.col},{self.row}"


@dataclass(frozen=True)
class Utf8LegacyMouseEvent:
    """Legacy report longer than six bytes; coordinates are not decoded."""

    raw: bytes

    @property
    def modes(self) -> tuple[int, ...]:
        return (1005,)

    def describe(self) -> str:
        return repr(self.raw)


@dataclass(frozen=True)
class SgrMouseEvent:
    button: int
    modifier: str
    col: int
    row: int
    exceeds_window: bool = False

    @property
    def pressed(self) -> bool:
        return self.modifier == "M"

    @property
    def modes(self) -> tuple[int, ...]:
        # Coordinates outside the cell grid can only be pixels.
        return (1016,) if self.exceeds_window else (1006, 1016)

    def describe(self) -> str:
        return f"{self.button}{self.modifier} @ {self.col},{self.row}"


@dataclass(frozen=True)
class UrxvtMouseEvent:
    button: int
    col: int
    row: int

    @property
    def modes(self) -> tuple[int, ...]:
        return (1015,)

    def describe(self) -> str:
        return f"{self.button} @ {self.col},{self.row}"


MouseEvent = LegacyMouseEvent | Utf8LegacyMouseEvent | SgrMouseEvent | UrxvtMouseEvent
MouseDecoder = Callable[[bytes, WindowSize | None], MouseEvent | None]


def decode_legacy(response: bytes, window: WindowSize | None = None) -> MouseEvent | None:
    if not response.startswith(LEGACY_PREFIX) or len(response) < LEGACY_REPORT_LENGTH:
        return None
    b, x, y = response[3], response[4], response[5]
    if b < COORDINATE_OFFSET or x < COORDINATE_OFFSET or y < COORDINATE_OFFSET:
        return None
    # Length is the only hint for UTF-8 coordinates; kept deliberately naive.
    if len(response) > LEGACY_REPORT_LENGTH:
        return Utf8LegacyMouseEvent(raw=response)
    return LegacyMouseEvent(
        button=b - COORDINATE_OFFSET,
        col=x - COORDINATE_OFFSET,
        row=y - COORDINATE_OFFSET,
    )


def decode_sgr(response: bytes, window: WindowSize | None = None) -> MouseEvent | None:
    match = _SGR_RE.fullmatch(response)
    if match is None:
        return None
    col, row = int(match.group(2)), int(match.group(3))
    exceeds = window is not None and (col > window.columns or row > window.rows)
    return SgrMouseEvent(
        button=int(match.group(1)),
        modifier=match.group(4).decode("ascii"),
        col=col,
        row=row,
        exceeds_window=exceeds,
    )


def decode_urxvt(response: bytes, window: WindowSize | None = None) -> MouseEvent | None:
    match = _URXVT_RE.fullmatch(response)
    if match is None:
        return None
    button = int(match.group(1))
    if button < COORDINATE_OFFSET:
        return None
    return UrxvtMouseEvent(
        button=button - COORDINATE_OFFSET,
        col=int(match.group(2)),
        row=int(match.group(3)),
    )


MOUSE_DECODERS: tuple[MouseDecoder, ...] = (decode_legacy, decode_sgr, decode_urxvt)


def parse_mouse_event(
    response: bytes | None,
    window: WindowSize | tuple[int, int] | None = None,
    decoders: tuple[MouseDecoder, ...] = MOUSE_DECODERS,
) -> MouseEvent | None:
    """Decode one captured mouse report, or ``None`` if no grammar accepts it."""
    if not response:
        return None
    if window is not None and not isinstance(window, WindowSize):
        window = WindowSize(*window)
    for decoder in decoders:
        event = decoder(response, window)
        if event is not None:
            return event
    return None
