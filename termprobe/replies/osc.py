"""OSC colour (4) and selection (52) reply parsing.

Replies end in BEL, the 8-bit ST byte, or ``ESC \\``. The payload is what
sits between the last ``;`` and the terminator; decoding it (base64 for
selections) is left to the helpers below.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

OSC = b"\x1b]"
BEL = b"\x07"
ST8 = b"\x9c"
ST = b"\x1b\\"

SELECTION_PREFIX = OSC + b"52;"
COLOUR_PREFIX = OSC + b"4;"

_TERMINATOR_RE = re.compile(rb"\x07|\x9c|\x1b\\")
_RGB_RE = re.compile(r"rgb:([0-9a-fA-F]{1,4})/([0-9a-fA-F]{1,4})/([0-9a-fA-F]{1,4})")


@dataclass(frozen=True)
class OscReply:
    command: int
    params: tuple[bytes, ...]
    payload: bytes

    @property
    def is_selection(self) -> bool:
        return self.command == 52

    @property
    def is_colour(self) -> bool:
        return self.command == 4


def parse_osc_reply(response: bytes | None) -> OscReply | None:
    if not response:
        return None
    if response.startswith(SELECTION_PREFIX):
        command, body_start = 52, len(SELECTION_PREFIX)
    elif response.startswith(COLOUR_PREFIX):
        command, body_start = 4, len(COLOUR_PREFIX)
    else:
        return None

    terminator = _TERMINATOR_RE.search(response, body_start)
    if terminator is None or terminator.end() != len(response):
        return None

    body = response[body_start : terminator.start()]
    *params, payload = body.split(b";")
    return OscReply(command=command, params=tuple(params), payload=payload)


def decode_selection(reply: OscReply | None) -> bytes | None:
    """Base64-decode a selection payload; ``None`` for anything undecodable."""
    if reply is None or not reply.is_selection:
        return None
    try:
        return base64.b64decode(reply.payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def _scale_channel(digits: str) -> int:
    # X11 colour specs scale 1-4 hex digits to the full channel range.
    top = (1 << (4 * len(digits))) - 1
    return round(int(digits, 16) * 255 / top)


def parse_rgb(payload: bytes) -> tuple[int, int, int] | None:
    """Convert ``rgb:R/G/B`` into 8-bit channels."""
    try:
        text = payload.decode("ascii")
    except UnicodeDecodeError:
        return None
    match = _RGB_RE.fullmatch(text)
    if match is None:
        return None
    red, green, blue = (_scale_channel(group) for group in match.groups())
    return red, green, blue
