"""Tests for Session state and audit forwarding."""

from __future__ import annotations

import io
import threading
from datetime import datetime, timezone

from repogate import AuditLogger, Config, Session


class BrokenAudit(AuditLogger):
    """Audit sink whose writes always fail."""

    def __init__(self) -> None:
        super().__init__(stream=io.StringIO())

    def log(self, *args, **kwargs):
        raise OSError("disk full")


class TestSession:
    """Tests for identity and counters."""

    def test_identity(self, config: Config) -> None:
        first = Session(config)
        second = Session(config)
        assert first.id != second.id
        assert first.id == first.id
        assert first.config is config

    def test_explicit_id(self, config: Config) -> None:
        assert Session(config, session_id="abc").id == "abc"

    def test_start_time_fixed(self, config: Config) -> None:
        session = Session(config)
        start = session.start_time
        assert start.tzinfo is timezone.utc
        assert start <= datetime.now(timezone.utc)
        assert session.start_time == start
        assert session.elapsed >= 0

    def test_concurrent_increments_never_lost(self, config: Config) -> None:
        """10 threads x 100 increments gives exactly 1000."""
        session = Session(config)

        def work() -> None:
            for _ in range(100):
                session.increment_commands_run()

        threads = [threading.Thread(target=work) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert session.commands_run == 1000

    def test_increment_returns_total(self, config: Config) -> None:
        session = Session(config)
        assert session.increment_commands_run() == 1
        assert session.increment_commands_run() == 2


class TestSessionAudit:
    """Tests for fire-and-forget audit logging."""

    def test_forwards_to_logger(self, config: Config, audit_stream: io.StringIO, audit: AuditLogger) -> None:
        session = Session(config, audit, session_id="s1")
        session.log_audit("open", "README.md", True)
        assert "|session:s1|open|README.md|success|" in audit_stream.getvalue()

    def test_missing_logger_is_noop(self, config: Config) -> None:
        Session(config).log_audit("open", "x", False, "boom")

    def test_failing_logger_does_not_raise(self, config: Config, caplog) -> None:
        session = Session(config, BrokenAudit())
        session.log_audit("exec", "make", False, "EXEC_FAILED: command exited with code 2")
        assert "Audit entry dropped" in caplog.text

    def test_closed_logger_does_not_raise(self, config: Config) -> None:
        audit = AuditLogger(stream=io.StringIO())
        audit.close()
        Session(config, audit).log_audit("open", "x", True)
