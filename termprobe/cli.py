"""Command-line front door for termprobe.

Parses CLI options, sets up logging and timing config, enters cbreak mode,
then runs the selected probes against the controlling terminal.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .config import load_probe_config
from .log import DEFAULT_LOG_PATH, setup_logging
from .probes import PROBES, ProbeRunner
from .terminal import ModeError, TerminalSession
from .transaction import TransactionEngine

logger = logging.getLogger(__name__)


def _positive_float(value: str) -> float:
    """argparse type for positive millisecond values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termprobe",
        description="Probe the terminal for control-sequence extensions and report what it supports.",
    )
    parser.add_argument(
        "ident",
        nargs="*",
        help="Words identifying the terminal under test, echoed at the top of the report.",
    )
    parser.add_argument(
        "--idle-timeout",
        type=_positive_float,
        default=None,
        metavar="MS",
        help="Silence in milliseconds that ends a reply (default: 50, or 250 over SSH).",
    )
    parser.add_argument(
        "--only",
        nargs="+",
        choices=PROBES,
        metavar="PROBE",
        help=f"Run only these probes ({', '.join(PROBES)}).",
    )
    parser.add_argument(
        "--log",
        nargs="?",
        type=Path,
        const=DEFAULT_LOG_PATH,
        default=None,
        metavar="PATH",
        help=f"Write a log file (default path: {DEFAULT_LOG_PATH}).",
    )
    parser.add_argument("--debug", action="store_true", help="Log every request and response.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log, logging.DEBUG if args.debug else logging.INFO)

    config = load_probe_config(args.idle_timeout)
    session = TerminalSession()
    try:
        session.enter()
    except ModeError as exc:
        # Every probe depends on cbreak mode, so nothing is worth trying.
        logger.error("cannot enter cbreak mode: %s", exc)
        raise SystemExit(f"termprobe: {exc}") from exc

    try:
        engine = TransactionEngine(session.stdin_fd, session.stdout_fd, config.idle_timeout_for())
        names = PROBES if args.only is None else [name for name in PROBES if name in args.only]
        ProbeRunner(session, engine, ident=args.ident).run(names)
    except KeyboardInterrupt:
        logger.info("interrupted")
        raise SystemExit(130) from None
    finally:
        session.restore()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
