"""DECRPM reply grammar tests."""

from __future__ import annotations

import unittest

from termprobe.replies import DecrpmResult, DecrpmStatus, describe_decrpm, parse_decrpm


class ParseDecrpmTests(unittest.TestCase):
    def test_every_status_digit_maps_to_its_state(self) -> None:
        for mode in (0, 1, 25, 1000, 2004, 123456789012345678901234567890):
            for status in range(5):
                with self.subTest(mode=mode, status=status):
                    reply = f"\x1b[?{mode};{status}$y".encode("ascii")
                    self.assertEqual(parse_decrpm(reply), DecrpmResult(mode, DecrpmStatus(status)))

    def test_trailing_bytes_invalidate_the_reply(self) -> None:
        self.assertIsNone(parse_decrpm(b"\x1b[?1000;2$yx"))
        self.assertIsNone(parse_decrpm(b"\x1b[?1000;2$y\x1b[?2004;1$y"))

    def test_status_outside_zero_to_four_is_invalid(self) -> None:
        for status in (b"5", b"9", b"12", b""):
            with self.subTest(status=status):
                self.assertIsNone(parse_decrpm(b"\x1b[?1000;" + status + b"$y"))

    def test_malformed_mode_is_invalid(self) -> None:
        for reply in (
            b"\x1b[?;2$y",
            b"\x1b[?-1;2$y",
            b"\x1b[? 1;2$y",
            b"\x1b[?+1;2$y",
            b"\x1b[1000;2$y",
            b"\x1b[?1000;2y",
        ):
            with self.subTest(reply=reply):
                self.assertIsNone(parse_decrpm(reply))

    def test_absent_and_empty_responses_are_invalid(self) -> None:
        self.assertIsNone(parse_decrpm(None))
        self.assertIsNone(parse_decrpm(b""))

    def test_describe_uses_readable_labels(self) -> None:
        self.assertEqual(describe_decrpm(parse_decrpm(b"\x1b[?1006;4$y")), "permanently reset")
        self.assertEqual(describe_decrpm(parse_decrpm(b"\x1b[?1006;0$y")), "unknown")
        self.assertEqual(describe_decrpm(None), "?")


if __name__ == "__main__":
    unittest.main()
