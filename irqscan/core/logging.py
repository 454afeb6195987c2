"""JSONL diagnostic logging."""

import json
import os
import threading
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any


def get_log_path(source: str, base_path: Path | None = None) -> Path:
    """
    Get the log file path for a log source.

    Args:
        source: Name of the logging source, e.g. "details"
        base_path: Base directory for logs (default: ~/var/log/irqscan)

    Returns:
        Path to the log file: {base}/{date}/{source}.jsonl
    """
    if base_path is None:
        home = Path(os.environ.get("HOME", "/tmp"))
        base_path = home / "var" / "log" / "irqscan"

    today = date.today().isoformat()
    return base_path / today / f"{source}.jsonl"


class DiagnosticLogger:
    """
    JSONL logger for parser and pipeline diagnostics.

    The debug() method matches the observer signature accepted by the
    counter and details streams, so it can be passed as observer
    directly. Writes are serialized, as pipeline observers are called
    from worker threads.
    """

    def __init__(self, source: str, log_path: Path | None = None):
        """
        Initialize logger.

        Args:
            source: Name of the logging source
            log_path: Path to log file (default: auto-generated)
        """
        self.source = source
        self.log_path = log_path or get_log_path(source)
        self._file = None
        self._lock = threading.Lock()

    def _ensure_file(self) -> None:
        """Ensure log file is open."""
        if self._file is None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.log_path, "a")

    def debug(self, message: str, **extra: Any) -> None:
        """Log debug message."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": "debug",
            "source": self.source,
            "message": message,
            **extra,
        }
        line = json.dumps(entry, default=str) + "\n"
        with self._lock:
            self._ensure_file()
            self._file.write(line)
            self._file.flush()

    def close(self) -> None:
        """Close the log file."""
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None

    def __enter__(self) -> "DiagnosticLogger":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
