"""Bracketed-paste marker checks."""

from __future__ import annotations

PASTE_START = b"\x1b[200~"
PASTE_END = b"\x1b[201~"


def is_bracketed_paste(response: bytes | None) -> bool:
    if not response:
        return False
    return response[: len(PASTE_START)] == PASTE_START


def extract_paste(response: bytes | None) -> bytes | None:
    """Return the pasted body, or ``None`` when the start marker is missing.

    A missing end marker is tolerated because long pastes get truncated at
    the response capacity.
    """
    if not is_bracketed_paste(response):
        return None
    body = response[len(PASTE_START) :]
    end = body.find(PASTE_END)
    return body if end < 0 else body[:end]
