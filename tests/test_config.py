"""Tests for Config and the error taxonomy."""

from __future__ import annotations

import pytest

from repogate import Config, ErrorKind, sanitize_message
from repogate.config import DEFAULT_EXCLUDED_PATHS, DEFAULT_EXEC_WHITELIST
from repogate.errors import ConfigurationError, ExecFailedError, ResourceLimitError
from repogate._types import ExecResult


class TestConfig:
    """Tests for policy defaults and validation."""

    def test_defaults(self) -> None:
        config = Config("/repo")
        assert config.max_file_size == 1024 * 1024
        assert config.max_write_size == 100 * 1024
        assert config.excluded_paths == DEFAULT_EXCLUDED_PATHS
        assert config.allowed_extensions == ()
        assert config.backup_before_write is True
        assert config.exec_enabled is False
        assert config.exec_timeout == 30.0
        assert config.exec_memory_limit == "512m"
        assert config.exec_container_image == "ubuntu:22.04"
        assert config.exec_network_enabled is False

    def test_lists_frozen_to_tuples(self) -> None:
        config = Config("/repo", excluded_paths=[".git"], allowed_extensions=[".go"])
        assert config.excluded_paths == (".git",)
        assert config.allowed_extensions == (".go",)

    def test_immutable(self) -> None:
        config = Config("/repo")
        with pytest.raises(AttributeError):
            config.exec_enabled = True  # type: ignore[misc]

    def test_development(self) -> None:
        config = Config.development("/repo", whitelist={"make"}, exec_timeout=5)
        assert config.exec_enabled
        assert config.exec_whitelist == ("make",)
        assert config.exec_timeout == 5
        assert Config.development("/repo").exec_whitelist == DEFAULT_EXEC_WHITELIST

    @pytest.mark.parametrize(
        "overrides",
        [
            {"repository_root": ""},
            {"max_file_size": -1},
            {"exec_timeout": 0},
            {"exec_cpu_limit": 0},
            {"search_max_results": 0},
            {"exec_enabled": True, "exec_whitelist": []},
        ],
    )
    def test_invalid(self, overrides: dict) -> None:
        base = {"repository_root": "/repo", **overrides}
        with pytest.raises(ConfigurationError):
            Config(**base)

    def test_with_overrides_revalidates(self) -> None:
        config = Config("/repo")
        assert config.with_overrides(max_backups=1).max_backups == 1
        with pytest.raises(ConfigurationError):
            config.with_overrides(exec_timeout=-1)


class TestErrors:
    """Tests for error rendering and sanitization."""

    def test_kind_prefix(self) -> None:
        err = ResourceLimitError("file", 10, 100)
        assert str(err) == "RESOURCE_LIMIT: file too large (100 bytes, max 10)"
        assert err.kind == ErrorKind.RESOURCE_LIMIT
        assert err.detail == "file too large (100 bytes, max 10)"

    def test_exec_failed_carries_result(self) -> None:
        result = ExecResult(exit_code=2, stdout="o", stderr="e")
        err = ExecFailedError(result)
        assert err.result is result
        assert str(err) == "EXEC_FAILED: command exited with code 2"

    def test_sanitize_paths(self) -> None:
        message = "PATH_SECURITY: path escapes repository root: /home/alice/repo/../secret"
        assert sanitize_message(message) == "PATH_SECURITY: path escapes repository root: [path]"

    def test_sanitize_docker_chatter(self) -> None:
        message = "EXEC_ERROR: Error response from daemon: manifest for foo:1 not found"
        assert sanitize_message(message) == "EXEC_ERROR: image foo:1 not available"

    def test_sanitize_user_host(self) -> None:
        assert sanitize_message("denied for user 'alice' on host 'db1'") == (
            "denied for user [redacted] on host [redacted]"
        )
