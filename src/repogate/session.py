"""Per-run session state."""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repogate.audit import AuditLogger
    from repogate.config import Config

logger = logging.getLogger(__name__)


class Session:
    """
    Run-scoped context: identity, start time, command counter and audit sink.

    The counter is the only state shared between concurrent commands and is
    guarded by a lock. Audit logging never raises into the caller.
    """

    def __init__(
        self,
        config: Config,
        audit: AuditLogger | None = None,
        *,
        session_id: str | None = None,
    ) -> None:
        self._config = config
        self._audit = audit
        self._id = session_id or uuid.uuid4().hex
        self._start_time = datetime.now(timezone.utc)
        self._commands_run = 0
        self._lock = threading.Lock()

    @property
    def config(self) -> Config:
        return self._config

    @property
    def id(self) -> str:
        return self._id

    @property
    def start_time(self) -> datetime:
        return self._start_time

    @property
    def elapsed(self) -> float:
        """Seconds since the session started."""
        return (datetime.now(timezone.utc) - self._start_time).total_seconds()

    @property
    def commands_run(self) -> int:
        with self._lock:
            return self._commands_run

    def increment_commands_run(self) -> int:
        """Count one successful command. Returns the new total."""
        with self._lock:
            self._commands_run += 1
            return self._commands_run

    def log_audit(self, command: str, argument: str, success: bool, error_message: str = "") -> None:
        """
        Record an operation in the audit trail.

        Fire-and-forget: a missing logger is a no-op and sink failures are
        reported through ``logging`` instead of reaching the caller.
        """
        if self._audit is None:
            return
        try:
            self._audit.log(self._id, command, argument, success, error_message)
        except Exception as e:
            logger.warning(f"Audit entry dropped for {command} {argument!r}: {e}")
