"""Terminal raw-mode session for the probe run.

Owns the saved termios snapshot, enters cbreak mode with read-back
verification, and guarantees restoration on every exit path we can intercept.
"""

from __future__ import annotations

import atexit
import copy
import logging
import os
import signal
import sys
import termios
import tty
from typing import ClassVar

logger = logging.getLogger(__name__)

RESTORE_SIGNALS = (signal.SIGTERM, signal.SIGHUP, signal.SIGINT, signal.SIGQUIT)


class ModeError(RuntimeError):
    """Raised when the terminal cannot be put into (verified) cbreak mode."""


def _cc_int(value: int | bytes) -> int:
    # termios reports VMIN/VTIME as ints in non-canonical mode, bytes otherwise.
    if isinstance(value, int):
        return value
    return value[0] if value else 0


def cbreak_attributes(attrs: list) -> list:
    """Return a copy of ``attrs`` with echo and canonical input disabled."""
    new_attrs = copy.deepcopy(attrs)
    new_attrs[tty.LFLAG] &= ~(termios.ECHO | termios.ICANON)
    new_attrs[tty.CC][termios.VMIN] = 1
    new_attrs[tty.CC][termios.VTIME] = 0
    return new_attrs


def is_cbreak(attrs: list) -> bool:
    """Whether ``attrs`` read back from the device are in the expected cbreak state."""
    if attrs[tty.LFLAG] & (termios.ECHO | termios.ICANON):
        return False
    cc = attrs[tty.CC]
    return _cc_int(cc[termios.VMIN]) == 1 and _cc_int(cc[termios.VTIME]) == 0


class TerminalSession:
    """Process-wide cbreak session over a pair of terminal descriptors.

    Use as a context manager; ``restore`` is idempotent and also runs from
    ``atexit`` and from the handlers installed for ``RESTORE_SIGNALS``.
    """

    _active: ClassVar[TerminalSession | None] = None

    def __init__(self, stdin_fd: int | None = None, stdout_fd: int | None = None) -> None:
        self.stdin_fd = sys.__stdin__.fileno() if stdin_fd is None else stdin_fd
        self.stdout_fd = sys.__stdout__.fileno() if stdout_fd is None else stdout_fd
        self._saved_tty_state: list | None = None
        self._previous_handlers: dict[int, object] = {}
        self.active = False

    def enter(self) -> None:
        if TerminalSession._active is not None:
            raise ModeError("another terminal session is already active")
        try:
            saved = termios.tcgetattr(self.stdin_fd)
        except termios.error as exc:
            raise ModeError(f"cannot read terminal attributes: {exc}") from exc

        try:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, cbreak_attributes(saved))
        except termios.error as exc:
            raise ModeError(f"cannot set terminal attributes: {exc}") from exc

        try:
            applied = termios.tcgetattr(self.stdin_fd)
        except termios.error:
            applied = None
        if applied is None or not is_cbreak(applied):
            # Never leave a half-applied mode behind.
            try:
                termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, saved)
            except termios.error as exc:
                logger.warning("failed to roll back terminal attributes: %s", exc)
            raise ModeError("terminal did not accept cbreak mode")

        self._saved_tty_state = saved
        self.active = True
        TerminalSession._active = self
        atexit.register(self.restore)
        self._install_signal_handlers()
        logger.info("entered cbreak mode on fd %d", self.stdin_fd)

    def restore(self) -> None:
        """Reinstate the attributes saved by ``enter``; no-op when inactive."""
        if not self.active:
            return
        self.active = False
        if TerminalSession._active is self:
            TerminalSession._active = None
        self._uninstall_signal_handlers()
        atexit.unregister(self.restore)
        try:
            termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)
        except termios.error as exc:
            logger.warning("failed to restore terminal attributes: %s", exc)
            return
        logger.info("restored terminal attributes on fd %d", self.stdin_fd)

    def window_size(self) -> os.terminal_size | None:
        """Current terminal size of the input descriptor, ``None`` if it cannot be read."""
        try:
            return os.get_terminal_size(self.stdin_fd)
        except OSError as exc:
            logger.debug("cannot read window size: %s", exc)
            return None

    def _install_signal_handlers(self) -> None:
        for signum in RESTORE_SIGNALS:
            try:
                # Signals the user chose to ignore must stay ignored.
                if signal.getsignal(signum) == signal.SIG_IGN:
                    continue
                self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)
            except (OSError, ValueError):
                # Not on the main thread, or the platform lacks the signal.
                continue

    def _uninstall_signal_handlers(self) -> None:
        for signum, previous in self._previous_handlers.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous_handlers.clear()

    def _handle_signal(self, signum: int, frame) -> None:
        previous = self._previous_handlers.get(signum)
        self.restore()
        if callable(previous):
            previous(signum, frame)
            return
        signal.signal(signum, signal.SIG_DFL)
        os.kill(os.getpid(), signum)

    def __enter__(self) -> TerminalSession:
        self.enter()
        return self

    def __exit__(self, *exc_info) -> None:
        self.restore()
