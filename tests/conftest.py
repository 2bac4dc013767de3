"""Pytest configuration and fixtures for repogate tests."""

from __future__ import annotations

import io
import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from repogate import AuditLogger, Config, ExecResult, SearchHit, Session
from repogate.errors import ExecFailedError
from repogate.handlers import ExecHandler, SearchHandler
from repogate.sandbox import ContainerRuntime, RunOutput, RunSpec


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory(prefix="repogate_test_") as tmp:
        # macOS puts tmp behind a symlink; tests compare resolved paths.
        yield Path(os.path.realpath(tmp))


@pytest.fixture
def repo(temp_dir: Path) -> Path:
    """A small repository tree."""
    (temp_dir / "subdir").mkdir()
    (temp_dir / "subdir" / "file.txt").write_text("nested")
    (temp_dir / "README.md").write_text("# hello\n")
    (temp_dir / ".git").mkdir()
    (temp_dir / ".git" / "config").write_text("[core]\n")
    (temp_dir / "server.key").write_text("secret")
    return temp_dir


@pytest.fixture
def config(repo: Path) -> Config:
    """Default policy rooted at the test repository."""
    return Config(str(repo))


@pytest.fixture
def audit_stream() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def audit(audit_stream: io.StringIO) -> Generator[AuditLogger, None, None]:
    logger = AuditLogger(stream=audit_stream)
    try:
        yield logger
    finally:
        logger.close()


@pytest.fixture
def session(config: Config, audit: AuditLogger) -> Session:
    return Session(config, audit, session_id="test-session")


class FakeRuntime(ContainerRuntime):
    """In-memory runtime that records every RunSpec it receives."""

    def __init__(
        self,
        *,
        available: bool = True,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
        raises: BaseException | None = None,
    ) -> None:
        self.available = available
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        self.raises = raises
        self.specs: list[RunSpec] = []
        self.timeouts: list[float] = []
        self.availability_checks = 0

    async def is_available(self) -> bool:
        self.availability_checks += 1
        return self.available

    async def run(self, spec: RunSpec, *, timeout: float) -> RunOutput:
        self.specs.append(spec)
        self.timeouts.append(timeout)
        if self.raises is not None:
            raise self.raises
        return RunOutput(self.exit_code, self.stdout, self.stderr, duration=0.01)


class FakeExecHandler(ExecHandler):
    """Exec handler that skips the sandbox and returns a canned result."""

    def __init__(self, result: ExecResult | None = None) -> None:
        self.result = result or ExecResult(exit_code=0, stdout="ok\n", stderr="")
        self.calls: list[str] = []

    async def execute_command(self, command: str, config: Config) -> ExecResult:
        self.calls.append(command)
        if not self.result.success:
            raise ExecFailedError(self.result)
        return self.result


class FakeSearchHandler(SearchHandler):
    def __init__(self, hits: list[SearchHit] | None = None, raises: Exception | None = None) -> None:
        self.hits = hits or []
        self.raises = raises
        self.queries: list[str] = []

    async def search(self, query: str) -> list[SearchHit]:
        self.queries.append(query)
        if self.raises is not None:
            raise self.raises
        return self.hits


@pytest.fixture
def fake_runtime() -> FakeRuntime:
    return FakeRuntime()
