"""Request/response transactions over the terminal descriptors.

Terminal replies carry no length and, in general, no terminator, so a reply
is framed by silence: reading stops once no byte arrives within the idle
timeout. This is inherently racy; callers must tolerate short or merged
replies.
"""

from __future__ import annotations

import logging
import os
import select

logger = logging.getLogger(__name__)

RESPONSE_CAPACITY = 999


class TransactionEngine:
    """Write a request and capture whatever the terminal answers.

    ``transact`` returns the captured bytes, possibly empty, or ``None`` when
    the write failed or the wait/read failed before the first byte.
    """

    def __init__(
        self,
        stdin_fd: int,
        stdout_fd: int,
        idle_timeout: float,
        capacity: int = RESPONSE_CAPACITY,
    ) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self.idle_timeout = idle_timeout
        self.capacity = capacity

    def transact(self, request: bytes, wait_for_first_byte: bool = False) -> bytes | None:
        if not self._write_all(request):
            return None

        if wait_for_first_byte:
            try:
                select.select([self.stdin_fd], [], [])
            except (OSError, ValueError) as exc:
                logger.debug("wait for first byte failed: %s", exc)
                return None

        buf = bytearray()
        while len(buf) < self.capacity:
            try:
                ready, _, _ = select.select([self.stdin_fd], [], [], self.idle_timeout)
                if not ready:
                    break
                chunk = os.read(self.stdin_fd, self.capacity - len(buf))
            except (OSError, ValueError) as exc:
                logger.debug("reply read failed after %d bytes: %s", len(buf), exc)
                if not buf:
                    return None
                break
            if not chunk:
                logger.debug("input closed after %d bytes", len(buf))
                if not buf:
                    return None
                break
            buf += chunk

        response = bytes(buf)
        logger.debug("request %r -> response %r", request, response)
        return response

    def write(self, text: str) -> bool:
        """Write report text unbuffered so it stays ordered with requests."""
        return self._write_all(text.encode("utf-8"))

    def _write_all(self, data: bytes) -> bool:
        try:
            written = os.write(self.stdout_fd, data)
        except OSError as exc:
            logger.debug("write of %d bytes failed: %s", len(data), exc)
            return False
        if written < len(data):
            logger.debug("short write: %d of %d bytes", written, len(data))
            return False
        return True
