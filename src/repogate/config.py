"""
Per-run policy.

A ``Config`` is immutable once built. Lists passed in are frozen into tuples
and the cross-field invariants are checked up front so handlers can trust
what they read.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Iterable

from repogate.errors import ConfigurationError

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
DEFAULT_MAX_WRITE_SIZE = 100 * 1024
DEFAULT_EXCLUDED_PATHS = (".git", ".env", "*.key", "*.pem")
DEFAULT_EXEC_WHITELIST = ("go test", "go build", "npm test", "make")


def _as_tuple(value: Iterable[str] | str) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class Config:
    """
    Immutable policy for one run.

    Attributes:
        repository_root: Directory every file operation is confined to.
        max_file_size: Largest file ``open`` will read, in bytes.
        max_write_size: Largest payload ``write`` will accept, in bytes.
        excluded_paths: Glob patterns or literal names that may never be touched.
        allowed_extensions: Write allow-list. Empty means unrestricted.
        backup_before_write: Snapshot existing files before overwriting.
        max_backups: Backups kept per file; older ones are pruned.
        exec_enabled: Whether ``exec`` is permitted at all.
        exec_whitelist: Closed list of permitted command prefixes.
        exec_timeout: Seconds before a sandboxed run is killed.
        exec_memory_limit: Container memory limit (docker syntax, e.g. ``512m``).
        exec_cpu_limit: Container CPU limit.
        exec_container_image: Image the command runs in.
        exec_network_enabled: Give the container network access.
        exec_max_output_bytes: Truncate stdout/stderr beyond this many characters.
        search_max_results: Maximum hits shown in a search report.
    """

    repository_root: str
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    max_write_size: int = DEFAULT_MAX_WRITE_SIZE
    excluded_paths: tuple[str, ...] = DEFAULT_EXCLUDED_PATHS
    allowed_extensions: tuple[str, ...] = ()
    backup_before_write: bool = True
    max_backups: int = 5
    exec_enabled: bool = False
    exec_whitelist: tuple[str, ...] = DEFAULT_EXEC_WHITELIST
    exec_timeout: float = 30.0
    exec_memory_limit: str = "512m"
    exec_cpu_limit: float = 2
    exec_container_image: str = "ubuntu:22.04"
    exec_network_enabled: bool = False
    exec_max_output_bytes: int = 30_000
    search_max_results: int = 10

    def __post_init__(self) -> None:
        """Normalize sequences and validate invariants."""
        for name in ("excluded_paths", "allowed_extensions", "exec_whitelist"):
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))
        object.__setattr__(self, "repository_root", str(self.repository_root))

        if not self.repository_root.strip():
            raise ConfigurationError("repository_root must not be empty")
        for name in ("max_file_size", "max_write_size", "max_backups", "exec_max_output_bytes"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.exec_timeout <= 0:
            raise ConfigurationError(f"exec_timeout must be positive, got {self.exec_timeout}")
        if self.exec_cpu_limit <= 0:
            raise ConfigurationError(f"exec_cpu_limit must be positive, got {self.exec_cpu_limit}")
        if self.search_max_results <= 0:
            raise ConfigurationError("search_max_results must be positive")
        if self.exec_enabled:
            if not any(entry.strip() for entry in self.exec_whitelist):
                raise ConfigurationError("exec_enabled requires a non-empty exec_whitelist")
            if not self.exec_container_image:
                raise ConfigurationError("exec_enabled requires exec_container_image")

    @classmethod
    def development(
        cls, repository_root: str, whitelist: Iterable[str] = DEFAULT_EXEC_WHITELIST, **overrides: Any
    ) -> Config:
        """
        Policy for local development: exec enabled with the given whitelist.

        Args:
            repository_root: Repository directory.
            whitelist: Permitted command prefixes (e.g., {"go test", "make"}).
        """
        return cls(repository_root, exec_enabled=True, exec_whitelist=tuple(whitelist), **overrides)

    def with_overrides(self, **changes: Any) -> Config:
        """Return a copy with ``changes`` applied and re-validated."""
        return dataclasses.replace(self, **changes)
