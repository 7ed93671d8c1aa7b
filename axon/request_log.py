"""Durable log of every outbound request and its response.

Records are appended to one plain-text file per calendar day. Writes are
serialized with a lock held for a single record at a time, so concurrent
invocations never interleave. When the file cannot be written the record
goes to the ``axon.request_log`` logger instead.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M:%S"


class RequestLog:
    """Append-only, day-partitioned request/response log."""

    def __init__(
        self,
        log_dir: Path,
        fallback: logging.Logger | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._log_dir = Path(log_dir)
        self._fallback = fallback or logger
        self._clock = clock
        self._lock = threading.Lock()
        self._closed = False

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def path_for(self, when: datetime) -> Path:
        """Return the log file holding records written on ``when``'s day."""
        return self._log_dir / f"api_requests_{when:%Y-%m-%d}.log"

    def write(self, label: str, text: str) -> None:
        """Append one timestamped record; never raises on I/O failure."""
        now = self._clock()
        record = f"{now.strftime(TIMESTAMP_FORMAT)} {label}:\n{text}\n"

        with self._lock:
            if self._closed:
                self._fallback.info("%s:\n%s", label, text)
                return
            try:
                self._log_dir.mkdir(parents=True, exist_ok=True)
                with open(self.path_for(now), "a", encoding="utf-8") as f:
                    f.write(record)
            except OSError as e:
                self._fallback.warning("Request log unavailable (%s)", e)
                self._fallback.info("%s:\n%s", label, text)

    def close(self) -> None:
        """Stop writing to disk; later records go to the fallback logger."""
        with self._lock:
            self._closed = True
