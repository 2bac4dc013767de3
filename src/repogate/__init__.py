"""
repogate: mediate model-issued file, exec and search commands against a repository.

Example:
    >>> from repogate import Config, create_executor
    >>> executor = create_executor(Config("./my_project"))
    >>> result = await executor.execute_open("README.md")
    >>> print(result.result)
"""

from repogate._types import (
    AuditEntry,
    Command,
    CommandType,
    ExecResult,
    ExecutionResult,
    SearchHit,
    WriteAction,
    WriteResult,
)
from repogate.api import create_executor
from repogate.audit import AuditLogger
from repogate.config import Config
from repogate.errors import ErrorKind, RepogateError, sanitize_message
from repogate.executor import Executor
from repogate.handlers import (
    DisabledSearchHandler,
    ExecHandler,
    FileHandler,
    LocalFileHandler,
    SearchHandler,
)
from repogate.sandbox import ContainerRuntime, DockerRuntime, ExecSandbox
from repogate.security import ExecPolicy, PathValidator
from repogate.session import Session

__version__ = "0.1.0"

__all__ = [
    # Main API
    "create_executor",
    "Executor",
    "Session",
    "Config",
    "AuditLogger",
    # Types
    "Command",
    "CommandType",
    "ExecutionResult",
    "ExecResult",
    "WriteResult",
    "WriteAction",
    "SearchHit",
    "AuditEntry",
    # Errors
    "ErrorKind",
    "RepogateError",
    "sanitize_message",
    # Handlers
    "FileHandler",
    "ExecHandler",
    "SearchHandler",
    "LocalFileHandler",
    "DisabledSearchHandler",
    # Sandbox
    "ContainerRuntime",
    "DockerRuntime",
    "ExecSandbox",
    # Security
    "ExecPolicy",
    "PathValidator",
]
