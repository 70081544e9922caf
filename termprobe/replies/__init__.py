"""Pure decoders for terminal replies.

Every parser accepts the engine's response (``bytes`` or ``None`` when the
transaction failed) and returns a typed result or ``None``; none of them raise
on malformed input.
"""

from .decrpm import DecrpmResult, DecrpmStatus, describe_decrpm, parse_decrpm
from .focus import FocusEvent, parse_focus_event
from .mouse import (
    MOUSE_DECODERS,
    LegacyMouseEvent,
    MouseEvent,
    SgrMouseEvent,
    UrxvtMouseEvent,
    Utf8LegacyMouseEvent,
    WindowSize,
    decode_legacy,
    decode_sgr,
    decode_urxvt,
    parse_mouse_event,
)
from .osc import OscReply, decode_selection, parse_osc_reply, parse_rgb
from .paste import extract_paste, is_bracketed_paste

__all__ = [
    "DecrpmResult",
    "DecrpmStatus",
    "describe_decrpm",
    "parse_decrpm",
    "FocusEvent",
    "parse_focus_event",
    "MOUSE_DECODERS",
    "LegacyMouseEvent",
    "MouseEvent",
    "SgrMouseEvent",
    "UrxvtMouseEvent",
    "Utf8LegacyMouseEvent",
    "WindowSize",
    "decode_legacy",
    "decode_sgr",
    "decode_urxvt",
    "parse_mouse_event",
    "OscReply",
    "decode_selection",
    "parse_osc_reply",
    "parse_rgb",
    "extract_paste",
    "is_bracketed_paste",
]
