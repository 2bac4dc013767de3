"""Tests for create_executor API."""

from __future__ import annotations

from pathlib import Path

from conftest import FakeRuntime, FakeSearchHandler

from repogate import AuditLogger, Config, DockerRuntime, ExecSandbox, SearchHit, create_executor
from repogate.errors import ErrorKind


class TestCreateExecutor:
    """Tests for the create_executor factory function."""

    async def test_creates_working_executor(self, config: Config) -> None:
        executor = create_executor(config)
        result = await executor.execute_open("README.md")
        assert result.success
        assert result.result == "# hello\n"

    async def test_defaults(self, config: Config) -> None:
        executor = create_executor(config, session_id="fixed")
        assert executor.session.id == "fixed"
        assert executor.session.config is config
        assert isinstance(executor._exec, ExecSandbox)
        assert isinstance(executor._exec.runtime, DockerRuntime)
        assert (await executor.execute_search("q")).error.kind == ErrorKind.SEARCH_DISABLED

    async def test_audit_wired(self, config: Config, temp_dir: Path) -> None:
        log = temp_dir / "audit.log"
        with AuditLogger(log) as audit:
            executor = create_executor(config, audit=audit, session_id="s")
            await executor.execute_open("README.md")
            await executor.execute_open("../etc/passwd")
        lines = log.read_text().splitlines()
        assert lines[0].split("|")[1:5] == ["session:s", "open", "README.md", "success"]
        assert lines[1].split("|")[4] == "failed"

    async def test_custom_runtime_and_search(self, repo: Path) -> None:
        runtime = FakeRuntime(stdout="built\n")
        search = FakeSearchHandler([SearchHit("main.go", 1.0)])
        executor = create_executor(
            Config.development(str(repo), whitelist=["make"]), runtime=runtime, search=search
        )
        result = await executor.execute_exec("make build")
        assert result.success
        assert result.stdout == "built\n"
        assert (await executor.execute_search("main")).success

    async def test_max_backups_from_config(self, repo: Path) -> None:
        executor = create_executor(Config(str(repo), max_backups=1))
        for i in range(3):
            await executor.execute_write("README.md", f"v{i}")
        assert len(list(repo.glob("README.md.bak.*"))) == 1
