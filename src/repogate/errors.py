"""
Error taxonomy for mediated operations.

Every failure the core can produce is a ``RepogateError`` subclass with a
stable ``kind``. ``str(error)`` renders as ``"<KIND>: <detail>"``, which is
what callers see in result envelopes and what the audit trail records.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from repogate._types import ExecResult


class ErrorKind(str, Enum):
    """Failure classes reported by the mediation layer."""

    PATH_SECURITY = "PATH_SECURITY"
    EXTENSION_DENIED = "EXTENSION_DENIED"
    RESOURCE_LIMIT = "RESOURCE_LIMIT"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    BACKUP_FAILED = "BACKUP_FAILED"
    WRITE_FAILED = "WRITE_FAILED"
    EXEC_VALIDATION = "EXEC_VALIDATION"
    DOCKER_UNAVAILABLE = "DOCKER_UNAVAILABLE"
    EXEC_TIMEOUT = "EXEC_TIMEOUT"
    EXEC_FAILED = "EXEC_FAILED"
    EXEC_ERROR = "EXEC_ERROR"
    SEARCH_DISABLED = "SEARCH_DISABLED"
    SEARCH_FAILED = "SEARCH_FAILED"
    UNKNOWN_COMMAND = "UNKNOWN_COMMAND"
    CONFIGURATION = "CONFIGURATION"


class RepogateError(Exception):
    """
    Base class for all mediation failures.

    Attributes:
        kind: The failure class.
        detail: Human-readable description without the kind prefix.
    """

    kind: ErrorKind = ErrorKind.CONFIGURATION

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"{self.kind.value}: {detail}")


class ConfigurationError(RepogateError):
    """Raised when a Config or AuditLogger is constructed with invalid settings."""

    kind = ErrorKind.CONFIGURATION


class PathSecurityError(RepogateError):
    """Containment or exclusion violation."""

    kind = ErrorKind.PATH_SECURITY


class ExtensionDeniedError(RepogateError):
    """Write target extension not in the allow-list."""

    kind = ErrorKind.EXTENSION_DENIED


class ResourceLimitError(RepogateError):
    """A read or write exceeded its configured size bound."""

    kind = ErrorKind.RESOURCE_LIMIT

    def __init__(self, resource: str, limit: int, actual: int) -> None:
        self.resource = resource
        self.limit = limit
        self.actual = actual
        super().__init__(f"{resource} too large ({actual} bytes, max {limit})")


class FileMissingError(RepogateError):
    kind = ErrorKind.FILE_NOT_FOUND


class PermissionDeniedError(RepogateError):
    kind = ErrorKind.PERMISSION_DENIED


class BackupFailedError(RepogateError):
    kind = ErrorKind.BACKUP_FAILED


class WriteFailedError(RepogateError):
    kind = ErrorKind.WRITE_FAILED


class ExecValidationError(RepogateError):
    """Exec disabled, empty, malformed or not whitelisted."""

    kind = ErrorKind.EXEC_VALIDATION


class DockerUnavailableError(RepogateError):
    """The container runtime could not be reached."""

    kind = ErrorKind.DOCKER_UNAVAILABLE


class ExecError(RepogateError):
    """The runtime failed to run the command at all."""

    kind = ErrorKind.EXEC_ERROR


class ExecTimeoutError(RepogateError):
    """
    The exec deadline elapsed and the run was terminated.

    Attributes:
        result: Partial run outcome, with exit code 124.
    """

    kind = ErrorKind.EXEC_TIMEOUT

    def __init__(self, timeout: float, result: ExecResult) -> None:
        self.timeout = timeout
        self.result = result
        super().__init__(f"command timed out after {timeout:g}s")


class ExecFailedError(RepogateError):
    """
    The sandboxed command ran but exited non-zero.

    Attributes:
        result: Full run outcome (exit code, stdout, stderr).
    """

    kind = ErrorKind.EXEC_FAILED

    def __init__(self, result: ExecResult) -> None:
        self.result = result
        super().__init__(f"command exited with code {result.exit_code}")


class SearchDisabledError(RepogateError):
    kind = ErrorKind.SEARCH_DISABLED


class SearchFailedError(RepogateError):
    kind = ErrorKind.SEARCH_FAILED


class UnknownCommandError(RepogateError):
    kind = ErrorKind.UNKNOWN_COMMAND


# Sanitization for messages handed back to untrusted consumers.
_UNIX_PATH = re.compile(r"/[a-zA-Z0-9/_\-.]+")
_WINDOWS_PATH = re.compile(r"[A-Z]:\\[a-zA-Z0-9\\_\-.]+")
_USER_HOST = re.compile(r"(user|host)\s+'[^']+'")
_DOCKER_REPLACEMENTS: list[tuple[str, str]] = [
    ("Error response from daemon:", ""),
    ("repository does not exist or may require 'docker login'", "image not available"),
    ("denied: requested access to the resource is denied", "access denied"),
    ("manifest for", "image"),
    ("not found", "not available"),
]


def sanitize_message(message: str) -> str:
    """
    Strip host details from an error message.

    Absolute paths become ``[path]``, docker daemon chatter is simplified and
    ``user '...'`` / ``host '...'`` fragments are redacted. The audit trail
    always keeps the unsanitized message.

    Args:
        message: The full error message.

    Returns:
        A message safe to show to the model.
    """
    message = _UNIX_PATH.sub("[path]", message)
    message = _WINDOWS_PATH.sub("[path]", message)
    for old, new in _DOCKER_REPLACEMENTS:
        message = message.replace(old, new)
    message = _USER_HOST.sub(r"\1 [redacted]", message)
    return " ".join(message.split())
