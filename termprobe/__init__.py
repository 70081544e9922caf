"""Public package surface for termprobe.

Exports ``main`` for programmatic CLI invocation; the transaction engine and
reply parsers live in ``termprobe.transaction`` and ``termprobe.replies``.
"""

from __future__ import annotations

__version__ = "0.1.0"


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)

__all__ = ["main"]
