"""Tests for idle-framed request/response transactions.

Timing behaviour runs against a scripted byte source with a fake clock, so
reply framing is asserted deterministically. A pipe-backed test covers the
real descriptor path.
"""

from __future__ import annotations

import os
import unittest
from unittest import mock

from termprobe import transaction
from termprobe.transaction import RESPONSE_CAPACITY, TransactionEngine

IDLE = 0.05


class ScriptedInput:
    """Byte arrivals on a fake clock, standing in for ``select`` and ``os.read``."""

    def __init__(self, arrivals: list[tuple[float, bytes]]) -> None:
        self.now = 0.0
        self.arrivals = list(arrivals)
        self.pending = bytearray()

    def _deliver(self) -> None:
        while self.arrivals and self.arrivals[0][0] <= self.now:
            self.pending += self.arrivals.pop(0)[1]

    def select(self, rlist, wlist, xlist, timeout=None):
        self._deliver()
        if self.pending:
            return rlist, [], []
        if not self.arrivals:
            if timeout is None:
                raise AssertionError("select would block forever")
            self.now += timeout
            return [], [], []
        next_time = self.arrivals[0][0]
        if timeout is None or next_time <= self.now + timeout:
            self.now = max(self.now, next_time)
            self._deliver()
            return rlist, [], []
        self.now += timeout
        return [], [], []

    def read(self, fd: int, size: int) -> bytes:
        data = bytes(self.pending[:size])
        del self.pending[:size]
        return data


class IdleFramingTests(unittest.TestCase):
    def _engine(self, source: ScriptedInput) -> TransactionEngine:
        patches = [
            mock.patch.object(transaction.select, "select", side_effect=source.select),
            mock.patch.object(transaction.os, "read", side_effect=source.read),
            mock.patch.object(transaction.os, "write", side_effect=lambda fd, data: len(data)),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)
        return TransactionEngine(stdin_fd=10, stdout_fd=11, idle_timeout=IDLE)

    def test_gaps_shorter_than_idle_timeout_merge_into_one_response(self) -> None:
        source = ScriptedInput([(0.0, b"\x1b[?"), (0.04, b"1000"), (0.08, b";2"), (0.12, b"$y")])
        engine = self._engine(source)

        self.assertEqual(engine.transact(b"\x1b[?1000$p"), b"\x1b[?1000;2$y")

    def test_gaps_longer_than_idle_timeout_split_responses(self) -> None:
        source = ScriptedInput([(0.0, b"\x1b[?1000;"), (0.01, b"2$y"), (0.09, b"\x1b[I")])
        engine = self._engine(source)

        first = engine.transact(b"\x1b[?1000$p")
        second = engine.transact(b"")

        self.assertEqual(first, b"\x1b[?1000;2$y")
        self.assertEqual(second, b"\x1b[I")

    def test_silence_yields_empty_response_not_absent(self) -> None:
        engine = self._engine(ScriptedInput([]))

        self.assertEqual(engine.transact(b"\x1b[?1016$p"), b"")

    def test_wait_for_first_byte_blocks_past_the_idle_timeout(self) -> None:
        source = ScriptedInput([(5.0, b"x")])
        engine = self._engine(source)

        self.assertEqual(engine.transact(b"press a key", wait_for_first_byte=True), b"x")
        self.assertGreaterEqual(source.now, 5.0)

    def test_without_waiting_a_late_reply_is_missed(self) -> None:
        source = ScriptedInput([(5.0, b"x")])
        engine = self._engine(source)

        self.assertEqual(engine.transact(b"\x1b[?1000$p"), b"")

    def test_capture_stops_at_capacity(self) -> None:
        source = ScriptedInput([(0.0, b"a" * 600), (0.01, b"b" * 900)])
        engine = self._engine(source)

        response = engine.transact(b"")

        self.assertEqual(len(response), RESPONSE_CAPACITY)
        self.assertEqual(response, b"a" * 600 + b"b" * (RESPONSE_CAPACITY - 600))


class TransactionFailureTests(unittest.TestCase):
    def test_short_write_is_absent_and_skips_reading(self) -> None:
        with mock.patch("termprobe.transaction.os.write", return_value=2), mock.patch(
            "termprobe.transaction.select.select"
        ) as select_mock:
            engine = TransactionEngine(stdin_fd=10, stdout_fd=11, idle_timeout=IDLE)
            self.assertIsNone(engine.transact(b"\x1b[?1000$p"))

        select_mock.assert_not_called()

    def test_write_error_is_absent(self) -> None:
        with mock.patch("termprobe.transaction.os.write", side_effect=OSError(5, "EIO")):
            engine = TransactionEngine(stdin_fd=10, stdout_fd=11, idle_timeout=IDLE)
            self.assertIsNone(engine.transact(b"\x1b[?1000$p"))
            self.assertFalse(engine.write("report"))

    def test_wait_error_before_any_byte_is_absent(self) -> None:
        with mock.patch("termprobe.transaction.os.write", side_effect=lambda fd, data: len(data)), mock.patch(
            "termprobe.transaction.select.select", side_effect=OSError(4, "EINTR")
        ):
            engine = TransactionEngine(stdin_fd=10, stdout_fd=11, idle_timeout=IDLE)
            self.assertIsNone(engine.transact(b"\x1b[?1000$p"))
            self.assertIsNone(engine.transact(b"prompt", wait_for_first_byte=True))

    def test_error_after_some_bytes_keeps_what_was_captured(self) -> None:
        ready = ([10], [], [])
        with mock.patch("termprobe.transaction.os.write", side_effect=lambda fd, data: len(data)), mock.patch(
            "termprobe.transaction.select.select", side_effect=[ready, OSError(4, "EINTR")]
        ), mock.patch("termprobe.transaction.os.read", return_value=b"\x1b[?10"):
            engine = TransactionEngine(stdin_fd=10, stdout_fd=11, idle_timeout=IDLE)
            self.assertEqual(engine.transact(b"\x1b[?1000$p"), b"\x1b[?10")

    def test_end_of_input_before_any_byte_is_absent(self) -> None:
        ready = ([10], [], [])
        with mock.patch("termprobe.transaction.os.write", side_effect=lambda fd, data: len(data)), mock.patch(
            "termprobe.transaction.select.select", return_value=ready
        ), mock.patch("termprobe.transaction.os.read", return_value=b""):
            engine = TransactionEngine(stdin_fd=10, stdout_fd=11, idle_timeout=IDLE)
            self.assertIsNone(engine.transact(b"\x1b[?1000$p"))


class PipeTransactionTests(unittest.TestCase):
    def test_request_is_written_and_reply_read_over_real_descriptors(self) -> None:
        in_read, in_write = os.pipe()
        out_read, out_write = os.pipe()
        try:
            os.write(in_write, b"\x1b[?2004;2$y")
            engine = TransactionEngine(stdin_fd=in_read, stdout_fd=out_write, idle_timeout=0.02)
            response = engine.transact(b"\x1b[?2004$p")
            sent = os.read(out_read, 64)
        finally:
            for fd in (in_read, in_write, out_read, out_write):
                os.close(fd)

        self.assertEqual(response, b"\x1b[?2004;2$y")
        self.assertEqual(sent, b"\x1b[?2004$p")

    def test_write_sends_report_text_as_utf8(self) -> None:
        out_read, out_write = os.pipe()
        try:
            engine = TransactionEngine(stdin_fd=out_read, stdout_fd=out_write, idle_timeout=0.02)
            self.assertTrue(engine.write("Přemysl\n"))
            sent = os.read(out_read, 64)
        finally:
            os.close(out_read)
            os.close(out_write)

        self.assertEqual(sent, "Přemysl\n".encode("utf-8"))


if __name__ == "__main__":
    unittest.main()
