"""
Core type definitions for repogate.

Uses dataclasses for lightweight, immutable value types.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from repogate.errors import RepogateError, sanitize_message


class CommandType(str, Enum):
    """The four request kinds a model can make."""

    OPEN = "open"
    WRITE = "write"
    EXEC = "exec"
    SEARCH = "search"


class WriteAction(str, Enum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"


@dataclass(frozen=True, slots=True)
class Command:
    """
    A request extracted from model output.

    The span fields are produced by the parser and only matter to the
    formatting layer; the core dispatches on ``type``, ``argument`` and
    ``content`` alone.
    """

    type: CommandType | str
    argument: str
    content: str | None = None
    start_pos: int = 0
    end_pos: int = 0
    original: str = ""


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome of a successful write."""

    action: WriteAction
    bytes_written: int
    backup_file: str = ""


@dataclass(frozen=True, slots=True)
class ExecResult:
    """Immutable result from a sandboxed run."""

    exit_code: int
    stdout: str
    stderr: str
    duration: float = 0.0
    truncated: bool = False

    @property
    def success(self) -> bool:
        """Return True if command exited with code 0."""
        return self.exit_code == 0


@dataclass(frozen=True, slots=True)
class SearchHit:
    """One ranked file returned by the search collaborator."""

    file_path: str
    score: float
    line_count: int = 0
    size: int = 0
    preview: str = ""
    mod_time: datetime | None = None


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """
    Uniform outcome envelope for every mediated command.

    ``success`` is derived from ``error`` so a result can never claim success
    while carrying an error, or fail without one.
    """

    command: Command
    error: RepogateError | None = None
    result: str = ""
    execution_time: float = 0.0
    # write
    bytes_written: int = 0
    backup_file: str = ""
    action: WriteAction | None = None
    # exec; None when no process ran
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def public_error(self) -> str | None:
        """Error message with host details stripped, for untrusted consumers."""
        if self.error is None:
            return None
        return sanitize_message(str(self.error))


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """Immutable record of one mediated operation."""

    timestamp: datetime
    session_id: str
    command: str
    argument: str
    success: bool
    error_message: str = ""

    @property
    def status(self) -> str:
        return "success" if self.success else "failed"

    def to_line(self) -> str:
        """
        Render as ``timestamp|session:<id>|command|argument|status|message``.

        Embedded separators are kept as-is; embedded newlines are escaped so
        one entry is always one line.
        """
        fields = [
            self.timestamp.isoformat(timespec="seconds"),
            f"session:{self.session_id}",
            self.command,
            self.argument,
            self.status,
            self.error_message,
        ]
        return "|".join(f.replace("\r", "\\r").replace("\n", "\\n") for f in fields)

    def to_json(self) -> str:
        return json.dumps(
            {
                "timestamp": self.timestamp.isoformat(timespec="seconds"),
                "session_id": self.session_id,
                "command": self.command,
                "argument": self.argument,
                "status": self.status,
                "message": self.error_message,
            },
            separators=(",", ":"),
        )
