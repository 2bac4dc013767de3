"""Tests for the exec allow-list and the write-extension allow-list."""

from __future__ import annotations

import pytest

from repogate.errors import ErrorKind, ExecValidationError, ExtensionDeniedError
from repogate.security import (
    MAX_COMMAND_LENGTH,
    ExecPolicy,
    file_extension,
    validate_exec_command,
    validate_write_extension,
)


class TestExecPolicy:
    """Tests for the closed exec allow-list."""

    def test_rm_rf_rejected_naming_base_command(self) -> None:
        """Non-whitelisted commands fail with EXEC_VALIDATION naming the base command."""
        policy = ExecPolicy.allow(["go", "npm"])
        with pytest.raises(ExecValidationError) as exc_info:
            policy.check_command("rm -rf /")
        assert exc_info.value.kind == ErrorKind.EXEC_VALIDATION
        assert "rm" in str(exc_info.value)

    def test_disabled_rejects_everything(self) -> None:
        """A disabled policy rejects even whitelisted commands."""
        with pytest.raises(ExecValidationError, match="disabled"):
            validate_exec_command("go test", enabled=False, whitelist=["go test", "go"])

    def test_disabled_factory(self) -> None:
        with pytest.raises(ExecValidationError):
            ExecPolicy.disabled().check_command("make")

    def test_first_token_match(self) -> None:
        """Whitelist entry ``go`` admits any go subcommand."""
        policy = ExecPolicy.allow(["go"])
        assert policy.check_command("go test ./...") == "go"
        assert policy.check_command("go") == "go"

    def test_multi_word_prefix(self) -> None:
        policy = ExecPolicy.allow(["go test", "npm test"])
        assert policy.check_command("go test -v ./pkg/...") == "go"
        assert policy.check_command("npm test") == "npm"
        with pytest.raises(ExecValidationError):
            policy.check_command("go run main.go")

    def test_prefix_confusable_rejected(self) -> None:
        """``go`` must not admit ``go-evil`` or ``golang-backdoor``."""
        policy = ExecPolicy.allow(["go"])
        for command in ("go-evil", "golang-backdoor --now", "gorm"):
            with pytest.raises(ExecValidationError, match="not in whitelist"):
                policy.check_command(command)

    def test_multi_word_prefix_needs_boundary(self) -> None:
        policy = ExecPolicy.allow(["go test"])
        with pytest.raises(ExecValidationError):
            policy.check_command("go testify")

    def test_empty_command(self) -> None:
        policy = ExecPolicy.allow(["go"])
        with pytest.raises(ExecValidationError, match="empty"):
            policy.check_command("   ")

    def test_too_long(self) -> None:
        policy = ExecPolicy.allow(["go"])
        with pytest.raises(ExecValidationError, match="too long"):
            policy.check_command("go " + "x" * MAX_COMMAND_LENGTH)

    def test_control_characters(self) -> None:
        policy = ExecPolicy.allow(["go"])
        with pytest.raises(ExecValidationError, match="control characters"):
            policy.check_command("go test\x00")

    def test_empty_whitelist(self) -> None:
        with pytest.raises(ExecValidationError, match="no commands"):
            validate_exec_command("go test", enabled=True, whitelist=["", "  "])

    def test_leading_whitespace_ignored(self) -> None:
        assert ExecPolicy.allow(["make"]).check_command("  make build") == "make"

    def test_add_allowed_command(self) -> None:
        policy = ExecPolicy.allow(["make"])
        policy.add_allowed_command("go vet")
        policy.add_allowed_command("go vet")
        assert policy.whitelist == ["make", "go vet"]
        assert policy.check_command("go vet ./...") == "go"

    def test_from_config(self, config) -> None:
        """Default config has exec disabled."""
        policy = ExecPolicy.from_config(config)
        assert policy.enabled is False
        with pytest.raises(ExecValidationError):
            policy.check_command("make")


class TestWriteExtensions:
    """Tests for the write-extension allow-list."""

    def test_disallowed_extension(self) -> None:
        with pytest.raises(ExtensionDeniedError) as exc_info:
            validate_write_extension("script.exe", [".go", ".py"])
        assert exc_info.value.kind == ErrorKind.EXTENSION_DENIED
        assert ".exe" in str(exc_info.value)

    def test_allowed_extension(self) -> None:
        validate_write_extension("pkg/main.go", [".go", ".py"])

    def test_case_insensitive(self) -> None:
        validate_write_extension("Main.GO", [".go"])
        validate_write_extension("main.go", [".GO"])

    def test_extension_without_dot_in_allow_list(self) -> None:
        validate_write_extension("main.py", ["py"])

    def test_only_final_suffix_counts(self) -> None:
        validate_write_extension("archive.tar.gz", [".gz"])
        with pytest.raises(ExtensionDeniedError):
            validate_write_extension("archive.tar.gz", [".tar"])

    def test_empty_allow_list_always_passes(self) -> None:
        validate_write_extension("anything.exe", [])
        validate_write_extension("Makefile", [])

    def test_no_extension_rejected_unless_sentinel(self) -> None:
        with pytest.raises(ExtensionDeniedError, match="no extension"):
            validate_write_extension("Makefile", [".go"])
        validate_write_extension("Makefile", [".go", ""])

    def test_file_extension(self) -> None:
        assert file_extension("a/b/c.PY") == ".py"
        assert file_extension("a.b/Makefile") == ""
        assert file_extension(".env") == ".env"
