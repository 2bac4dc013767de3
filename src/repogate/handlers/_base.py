"""
Abstract capability interfaces.

The Executor depends only on these classes. Each has one production
implementation in this package; tests substitute in-memory fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repogate._types import ExecResult, SearchHit, WriteResult
    from repogate.config import Config


class FileHandler(ABC):
    """Bounded reads and atomic writes on already-validated paths."""

    @abstractmethod
    async def open_file(self, path: str, max_size: int) -> str:
        """
        Read a file.

        Args:
            path: Resolved absolute path (already validated).
            max_size: Largest file size to accept, in bytes.

        Returns:
            File contents as a string.

        Raises:
            FileMissingError: If the file doesn't exist.
            ResourceLimitError: If the file is larger than ``max_size``.
            PermissionDeniedError: If the file cannot be read.
        """
        ...

    @abstractmethod
    async def write_file(self, path: str, content: str, *, max_size: int, backup: bool) -> WriteResult:
        """
        Write a file atomically.

        Creates parent directories if needed.

        Args:
            path: Resolved absolute path (already validated).
            content: Text to write.
            max_size: Largest payload to accept, in bytes.
            backup: Snapshot an existing target before replacing it.

        Raises:
            ResourceLimitError: If ``content`` is larger than ``max_size``.
            BackupFailedError: If the snapshot could not be taken.
            WriteFailedError: If the write or rename failed.
        """
        ...


class ExecHandler(ABC):
    """Validated, sandboxed command execution."""

    @abstractmethod
    async def execute_command(self, command: str, config: Config) -> ExecResult:
        """
        Validate and run a command.

        Args:
            command: Shell command requested by the model.
            config: Exec policy and resource limits.

        Returns:
            ExecResult for a run that exited 0.

        Raises:
            ExecValidationError: If the command is disabled or not whitelisted.
            DockerUnavailableError: If the runtime is unreachable.
            ExecTimeoutError: If the deadline elapsed.
            ExecFailedError: If the command exited non-zero.
            ExecError: If the runtime failed for any other reason.
        """
        ...


class SearchHandler(ABC):
    """Ranked search over the repository."""

    @abstractmethod
    async def search(self, query: str) -> list[SearchHit]:
        """
        Run a query.

        Returns:
            Hits ordered best first.
        """
        ...
