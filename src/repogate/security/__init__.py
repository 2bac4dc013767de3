"""Validation layer for repogate."""

from repogate.security.extensions import file_extension, validate_write_extension
from repogate.security.paths import PathValidator, match_excluded, validate_path
from repogate.security.policy import MAX_COMMAND_LENGTH, ExecPolicy, validate_exec_command

__all__ = [
    "MAX_COMMAND_LENGTH",
    "ExecPolicy",
    "PathValidator",
    "file_extension",
    "match_excluded",
    "validate_exec_command",
    "validate_path",
    "validate_write_extension",
]
