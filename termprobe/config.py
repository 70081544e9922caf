"""Read-only JSON config and environment hints.

Resolves the reply idle timeouts from CLI overrides, the user config file,
and built-in defaults. Malformed or missing config falls back silently.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "termprobe"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

# Longer than one local round trip, well under human reaction time.
DEFAULT_IDLE_TIMEOUT_MS = 50.0
DEFAULT_REMOTE_IDLE_TIMEOUT_MS = 250.0
REMOTE_ENV_VARS = ("SSH_CONNECTION", "SSH_CLIENT", "SSH_TTY")


@dataclass(frozen=True)
class ProbeConfig:
    """Effective timing settings for one run."""

    idle_timeout_ms: float = DEFAULT_IDLE_TIMEOUT_MS
    remote_idle_timeout_ms: float = DEFAULT_REMOTE_IDLE_TIMEOUT_MS

    def idle_timeout_for(self, environ: Mapping[str, str] | None = None) -> float:
        """Idle timeout in seconds, picking the remote value over SSH."""
        millis = self.remote_idle_timeout_ms if is_remote_session(environ) else self.idle_timeout_ms
        return millis / 1000.0


def is_remote_session(environ: Mapping[str, str] | None = None) -> bool:
    env = os.environ if environ is None else environ
    return any(env.get(name) for name in REMOTE_ENV_VARS)


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _positive_millis(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value <= 0:
        return None
    return float(value)


def load_probe_config(idle_timeout_ms: float | None = None) -> ProbeConfig:
    """Build the effective config; an explicit ``idle_timeout_ms`` wins everywhere.

    A CLI override applies to both the local and the remote timeout, since a
    user passing it has already accounted for their link.
    """
    if idle_timeout_ms is not None:
        return ProbeConfig(idle_timeout_ms=idle_timeout_ms, remote_idle_timeout_ms=idle_timeout_ms)

    data = load_config()
    local = _positive_millis(data.get("idle_timeout_ms"))
    remote = _positive_millis(data.get("remote_idle_timeout_ms"))
    return ProbeConfig(
        idle_timeout_ms=DEFAULT_IDLE_TIMEOUT_MS if local is None else local,
        remote_idle_timeout_ms=DEFAULT_REMOTE_IDLE_TIMEOUT_MS if remote is None else remote,
    )
