"""
Append-only audit trail.

One line per mediated operation. The logger is an explicit instance created
at bootstrap and handed to each ``Session``; there is no module-level state.
"""

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, TextIO

from repogate._types import AuditEntry
from repogate.errors import ConfigurationError

logger = logging.getLogger(__name__)

AuditFormat = Literal["text", "json"]


class AuditLogger:
    """
    Line-oriented audit sink.

    Writes are serialized with a lock and flushed per entry, so concurrent
    callers never interleave partial lines.

    Example:
        >>> with AuditLogger("audit.log") as audit:
        ...     audit.log("session-1", "open", "README.md", True)
    """

    def __init__(
        self,
        path: Path | str = "audit.log",
        *,
        fmt: AuditFormat = "text",
        fallback_to_stderr: bool = True,
        stream: TextIO | None = None,
    ) -> None:
        """
        Open the audit log for appending.

        Args:
            path: Log file location. Parent directories are created.
            fmt: ``"text"`` for pipe-delimited lines, ``"json"`` for JSON Lines.
            fallback_to_stderr: If the file cannot be opened, write to stderr
                instead of raising.
            stream: Write to this text stream instead of ``path``. The stream
                is flushed but never closed by the logger.

        Raises:
            ConfigurationError: If ``fmt`` is unknown, or the file cannot be
                opened and ``fallback_to_stderr`` is False.
        """
        if fmt not in ("text", "json"):
            raise ConfigurationError(f"unknown audit format: {fmt}")
        self.fmt = fmt
        self._lock = threading.Lock()
        self._closed = False

        if stream is not None:
            self.path: Path | None = None
            self._stream: TextIO = stream
            self._owns_stream = False
            return

        self.path = Path(path)
        self._owns_stream = True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._stream = open(self.path, "a", encoding="utf-8")
        except OSError as e:
            if not fallback_to_stderr:
                raise ConfigurationError(f"could not open audit log {path}: {e}") from e
            logger.warning(f"Could not open audit log {path}: {e}; writing to stderr")
            self.path = None
            self._stream = sys.stderr
            self._owns_stream = False

    @property
    def closed(self) -> bool:
        return self._closed

    def log(
        self,
        session_id: str,
        command: str,
        argument: str,
        success: bool,
        error_message: str = "",
    ) -> AuditEntry:
        """
        Append one entry.

        Returns:
            The entry that was written.

        Raises:
            ValueError: If the logger has been closed.
            OSError: If the underlying stream fails.
        """
        entry = AuditEntry(
            timestamp=datetime.now(timezone.utc),
            session_id=session_id,
            command=command,
            argument=argument,
            success=success,
            error_message=error_message,
        )
        line = entry.to_json() if self.fmt == "json" else entry.to_line()
        with self._lock:
            if self._closed:
                raise ValueError("audit logger is closed")
            self._stream.write(line + "\n")
            self._stream.flush()
        return entry

    def close(self) -> None:
        """
        Flush and close the log file.

        Safe to call multiple times.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._stream.flush()
            if self._owns_stream:
                self._stream.close()

    def __enter__(self) -> AuditLogger:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
