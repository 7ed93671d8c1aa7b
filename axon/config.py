"""Environment-driven settings.

AXON_LOG_DIR       Directory for the daily request logs
                   (default: logs/ next to the running program).
AXON_SPEC_TIMEOUT  Seconds allowed when fetching a remote spec (default: 30).
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DEFAULT_SPEC_TIMEOUT = 30.0


def default_log_dir() -> Path:
    """Return the logs/ directory beside the running program."""
    program = sys.argv[0] if sys.argv and sys.argv[0] else "."
    return Path(program).resolve().parent / "logs"


@dataclass(frozen=True)
class Settings:
    log_dir: Path
    spec_timeout: float = DEFAULT_SPEC_TIMEOUT


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read settings from the environment."""
    env = os.environ if environ is None else environ

    log_dir = env.get("AXON_LOG_DIR")
    raw_timeout = env.get("AXON_SPEC_TIMEOUT")

    timeout = DEFAULT_SPEC_TIMEOUT
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"AXON_SPEC_TIMEOUT must be a number, got {raw_timeout!r}") from None
        if timeout <= 0:
            raise ValueError(f"AXON_SPEC_TIMEOUT must be positive, got {raw_timeout!r}")

    return Settings(
        log_dir=Path(log_dir) if log_dir else default_log_dir(),
        spec_timeout=timeout,
    )
