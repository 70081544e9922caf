"""Request byte sequences sent to the terminal under test.

``set_legacy_palette`` and ``reset_legacy_palette`` are the Linux console's
private ``OSC P`` / ``OSC R`` forms. They carry no terminator, so other
terminals would treat what follows as an unfinished OSC string.
"""

from __future__ import annotations

import base64

CSI = b"\x1b["
OSC = b"\x1b]"
DCS = b"\x1bP"
ST = b"\x1b\\"
ST8 = b"\x9c"
BEL = b"\x07"

MOUSE_MODES = (1000, 1002, 1003, 1005, 1006, 1015, 1016)
# Encodings compared interactively; 1000 is the base tracking mode they extend.
MOUSE_ENCODING_MODES = (1005, 1006, 1015, 1016)
BRACKETED_PASTE_MODE = 2004
FOCUS_REPORTING_MODE = 1004

SIXEL_SAMPLE = CSI + b"4c" + DCS + b"0;0;0;q??~~??~~??iTiTiT" + ST


def decrqm(mode: int) -> bytes:
    """DECRQM: ask for the state of a DEC private mode."""
    return CSI + f"?{mode}$p".encode("ascii")


def set_private_mode(mode: int) -> bytes:
    return CSI + f"?{mode}h".encode("ascii")


def reset_private_mode(mode: int) -> bytes:
    return CSI + f"?{mode}l".encode("ascii")


def mouse_reset() -> bytes:
    """Turn off every extended encoding and leave basic 1000 tracking on."""
    modes = [mode for mode in MOUSE_MODES if mode != 1000]
    return b"".join(reset_private_mode(mode) for mode in modes) + set_private_mode(1000)


def query_colour(index: int) -> bytes:
    return OSC + f"4;{index};?".encode("ascii") + BEL


def set_colour(index: int, red: int, green: int, blue: int) -> bytes:
    return OSC + f"4;{index};rgb:{red:02x}/{green:02x}/{blue:02x}".encode("ascii") + BEL


def set_legacy_palette(index: int, red: int, green: int, blue: int) -> bytes:
    """Linux console palette form: ``OSC P`` + one hex index digit + RRGGBB."""
    if not 0 <= index <= 15:
        raise ValueError(f"legacy palette index out of range: {index}")
    return OSC + f"P{index:x}{red:02x}{green:02x}{blue:02x}".encode("ascii")


def reset_legacy_palette() -> bytes:
    return OSC + b"R"


def query_selection() -> bytes:
    return OSC + b"52;pc;?" + BEL


def set_selection(data: bytes) -> bytes:
    # ST is not reliably accepted here; BEL is.
    return OSC + b"52;pc;" + base64.b64encode(data) + BEL


def cursor_style(style: int) -> bytes:
    """DECSCUSR; 2 is a steady block, 5 a blinking bar, 6 a steady bar."""
    return CSI + f"{style} q".encode("ascii")


def sgr(*params: int) -> str:
    return "\x1b[" + ";".join(str(param) for param in params) + "m"
