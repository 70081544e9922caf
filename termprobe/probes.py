"""Probe sequencing and the human-readable report.

Each probe is a ``ProbeRunner`` method named in ``PROBES``; they run in that
order and only talk to the terminal through ``TransactionEngine.transact``.
Failures are printed as unsupported and never stop the run.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping, Sequence

from . import sequences as seq
from .replies import (
    FocusEvent,
    Utf8LegacyMouseEvent,
    decode_selection,
    describe_decrpm,
    extract_paste,
    is_bracketed_paste,
    parse_decrpm,
    parse_focus_event,
    parse_mouse_event,
    parse_osc_reply,
    parse_rgb,
)
from .terminal import TerminalSession
from .transaction import TransactionEngine

logger = logging.getLogger(__name__)

PROBES = (
    "identification",
    "decrqm",
    "colours",
    "colour_change",
    "attributes",
    "cursor",
    "sixel",
    "mouse",
    "selection",
    "bracketed_paste",
    "focus",
)

# Widest column a legacy X10 report can encode is 255 - 32.
MIN_MOUSE_COLUMNS = 223
PROBE_COLOUR_INDEX = 1
PROBE_COLOUR_RGB = (0x00, 0xAF, 0x5F)
SELECTION_TEST_DATA = b"Test"


class ProbeRunner:
    def __init__(
        self,
        session: TerminalSession,
        engine: TransactionEngine,
        ident: Sequence[str] = (),
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.session = session
        self.engine = engine
        self.ident = tuple(ident)
        self.environ = os.environ if environ is None else environ
        self._decrqm_supported: bool | None = None

    def run(self, names: Iterable[str] = PROBES) -> None:
        for name in names:
            logger.info("running probe %s", name)
            getattr(self, name)()
        self.engine.transact(b"-- Finished\n", wait_for_first_byte=True)

    def say(self, text: str) -> None:
        self.engine.write(text)

    def prompt(self, text: str) -> bytes | None:
        """Print ``text`` and block until the user sends something."""
        return self.engine.transact(text.encode("utf-8"), wait_for_first_byte=True)

    @property
    def decrqm_supported(self) -> bool:
        if self._decrqm_supported is None:
            self._decrqm_supported = parse_decrpm(self.engine.transact(seq.decrqm(1000))) is not None
        return self._decrqm_supported

    def deccheck(self, mode: int) -> str:
        return describe_decrpm(parse_decrpm(self.engine.transact(seq.decrqm(mode))))

    def identification(self) -> None:
        if self.ident:
            self.say(" ".join(self.ident) + "\n")
        # VTE does not answer DECRQM before it has seen some input.
        self.prompt("-- Press any key to start\n")

        term = self.environ.get("TERM", "")
        self.say(f"-- Identification\nTERM={term}\n")
        upper_term = term.upper()
        entries = [f"{name}={value}" for name, value in self.environ.items()]
        candidates = [
            entry for entry in entries if "VERSION" in entry or (upper_term and upper_term in entry)
        ]
        self.say("Version env var candidates: " + " ".join(candidates) + "\n")

    def decrqm(self) -> None:
        self.say("-- DECRQM: ")
        self._decrqm_supported = None
        self.say(f"{int(self.decrqm_supported)}\n")

    def _query_colour(self, index: int) -> tuple[int, int, int] | None:
        reply = parse_osc_reply(self.engine.transact(seq.query_colour(index)))
        if reply is None or not reply.is_colour:
            return None
        return parse_rgb(reply.payload)

    def colours(self) -> None:
        self.say("-- Colours\n")
        colorterm = self.environ.get("COLORTERM")
        if colorterm:
            claim = " - Claims to support 24-bit colours" if colorterm in ("truecolor", "24bit") else ""
            self.say(f"COLORTERM={colorterm}{claim}\n")

        rgb = self._query_colour(PROBE_COLOUR_INDEX)
        if rgb is None:
            self.say("OSC 4 query: unsupported\n")
        else:
            self.say(f"OSC 4 query: colour {PROBE_COLOUR_INDEX} is #{rgb[0]:02x}{rgb[1]:02x}{rgb[2]:02x}\n")

    def colour_change(self) -> None:
        self.say("-- Colour change\n")
        saved = self._query_colour(PROBE_COLOUR_INDEX)
        if saved is not None:
            self.engine.transact(seq.set_colour(PROBE_COLOUR_INDEX, *PROBE_COLOUR_RGB))
            undo = seq.set_colour(PROBE_COLOUR_INDEX, *saved)
        elif self.environ.get("TERM") == "linux":
            # The console cannot be queried, but it can reset its whole palette.
            self.say("OSC 4 query unsupported, using the console palette\n")
            self.engine.transact(seq.set_legacy_palette(PROBE_COLOUR_INDEX, *PROBE_COLOUR_RGB))
            undo = seq.reset_legacy_palette()
        else:
            # Without the old value the palette could not be put back.
            self.say("OSC 4 set: skipped, colour query unsupported\n")
            return
        self.say(seq.sgr(31) + "This text should be green now." + seq.sgr() + "\n")
        self.prompt("Check the colour above and press a key.\n")
        self.engine.transact(undo)

    def attributes(self) -> None:
        self.say("-- Blink attribute\n")
        self.say(seq.sgr(0, 32, 44) + "SGR" + seq.sgr() + " ")
        self.say(seq.sgr(1, 32, 44) + "Bold" + seq.sgr() + " ")
        self.say(seq.sgr(5, 32, 44) + "Blink" + seq.sgr() + " \n")
        self.say(seq.sgr(0, 5) + "Blink with default colours." + seq.sgr() + "\n")
        self.say("-- Italic attribute\n")
        self.say(seq.sgr(3) + "SGR test.\n" + seq.sgr(0))

    def cursor(self) -> None:
        self.say("-- Bar cursor\n")
        self.engine.transact(seq.cursor_style(5) + b"Blinking (press a key): ", wait_for_first_byte=True)
        self.say("\n")
        self.engine.transact(seq.cursor_style(6) + b"Steady (press a key): ", wait_for_first_byte=True)
        self.say("\n")
        # The previous shape cannot be queried, so fall back to a steady block.
        self.engine.transact(seq.cursor_style(2))

    def sixel(self) -> None:
        self.say("-- Sixel graphics\n")
        self.engine.transact(seq.SIXEL_SAMPLE)
        self.say("\n")

    def mouse(self) -> None:
        self.say("-- Mouse protocol\n")
        while True:
            size = self.session.window_size()
            # An unknown size cannot be checked.
            if size is None or size.columns >= MIN_MOUSE_COLUMNS:
                break
            keypress = self.prompt(
                f"Your terminal needs to be at least {MIN_MOUSE_COLUMNS} columns wide.\n"
                "Press a key once you've made it wide enough.\n"
            )
            if keypress is None:
                logger.warning("input failed while waiting for a wider window")
                self.say("Mouse protocol: skipped, window too narrow\n")
                return
        self.say("Click the rightmost column, if it's possible.\n")

        for mode in seq.MOUSE_ENCODING_MODES:
            if self.decrqm_supported:
                self.say(f"DECRQM({mode}): {self.deccheck(mode)}\n")
            self.say(self.describe_mouse(mode) + "\n")
            self.prompt("Waiting for button up events, press a key if hanging.\n")
        self.engine.transact(seq.reset_private_mode(1000))

    def describe_mouse(self, mode: int) -> str:
        size = self.session.window_size()
        self.engine.transact(seq.mouse_reset())
        response = self.engine.transact(
            seq.set_private_mode(mode) + f"{mode}: ".encode("ascii"),
            wait_for_first_byte=True,
        )
        window = None if size is None else (size.columns, size.lines)
        event = parse_mouse_event(response, window)
        if event is None:
            return "Failed to parse."
        if isinstance(event, Utf8LegacyMouseEvent):
            return "1005"
        modes = "/".join(str(m) for m in event.modes)
        return f"{modes} ({event.describe()})"

    def selection(self) -> None:
        self.say("-- Selection\n")
        reply = parse_osc_reply(self.engine.transact(seq.query_selection()))
        if reply is not None and reply.is_selection:
            self.say("We have received the selection from the terminal!" + seq.sgr(1) + "\n")
            data = decode_selection(reply)
            if data is None:
                self.say("(payload is not valid base64)")
            else:
                self.say(data.decode("utf-8", errors="replace"))
            self.say(seq.sgr() + "\n")

        self.engine.transact(seq.set_selection(SELECTION_TEST_DATA))
        self.prompt("Check if the selection now contains 'Test' and press a key.\n")

    def bracketed_paste(self) -> None:
        self.say("-- Bracketed paste\n")
        if self.decrqm_supported:
            self.say(f"DECRQM: {self.deccheck(seq.BRACKETED_PASTE_MODE)}\n")

        pasted = self.engine.transact(
            seq.set_private_mode(seq.BRACKETED_PASTE_MODE) + b"Paste something: ",
            wait_for_first_byte=True,
        )
        self.engine.transact(seq.reset_private_mode(seq.BRACKETED_PASTE_MODE))
        self.say(f"{int(is_bracketed_paste(pasted))}\n")
        body = extract_paste(pasted)
        if body is not None:
            self.say(f"Pasted: {body.decode('utf-8', errors='replace')!r}\n")

    def focus(self) -> None:
        self.say("-- Focus events\n")
        if self.decrqm_supported:
            self.say(f"DECRQM: {self.deccheck(seq.FOCUS_REPORTING_MODE)}\n")

        # Some terminals report the current focus as soon as the mode is set.
        response = self.engine.transact(
            seq.set_private_mode(seq.FOCUS_REPORTING_MODE)
            + b"Switch focus away and back; press a key to stop.\n"
        )
        if parse_focus_event(response) is None:
            response = self.engine.transact(b"", wait_for_first_byte=True)
        while True:
            event = parse_focus_event(response)
            if event is None:
                break
            self.say("Focus in\n" if event is FocusEvent.IN else "Focus out\n")
            response = self.engine.transact(b"", wait_for_first_byte=True)
        self.engine.transact(seq.reset_private_mode(seq.FOCUS_REPORTING_MODE))
