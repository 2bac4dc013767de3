"""
Exec allow-list policy.

This is a closed allow-list, not a blocklist: a command runs only if it is
explicitly permitted, regardless of how harmless it looks.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from repogate.errors import ExecValidationError

if TYPE_CHECKING:
    from repogate.config import Config

logger = logging.getLogger(__name__)

# Maximum length for exec commands
MAX_COMMAND_LENGTH = 1000

_CONTROL_CHARS = re.compile(r"[\x00-\x08]")


def _matches(command: str, base_cmd: str, allowed: str) -> bool:
    """
    Boundary-aware whitelist match.

    ``allowed`` admits the command if it equals the base command, equals the
    whole command, or is a prefix of the command followed by whitespace.
    Whitelist entry ``go`` therefore admits ``go test ./...`` but never
    ``go-evil`` or ``golang-backdoor``.
    """
    if allowed == base_cmd or allowed == command:
        return True
    return command.startswith(allowed) and command[len(allowed)].isspace()


def validate_exec_command(command: str, *, enabled: bool, whitelist: Iterable[str]) -> str:
    """
    Validate a shell command against the exec policy.

    Args:
        command: The command string requested by the model.
        enabled: Whether exec is enabled at all.
        whitelist: Permitted command prefixes.

    Returns:
        The base command (first whitespace-separated token).

    Raises:
        ExecValidationError: If exec is disabled or the command is empty,
            malformed, or not whitelisted.
    """
    if not enabled:
        raise ExecValidationError("exec command is disabled")

    command = command.strip()
    if not command:
        raise ExecValidationError("empty command")
    if len(command) > MAX_COMMAND_LENGTH:
        raise ExecValidationError(
            f"command too long (max {MAX_COMMAND_LENGTH} characters, got {len(command)})"
        )
    if _CONTROL_CHARS.search(command):
        raise ExecValidationError("command contains invalid control characters")

    entries = [entry.strip() for entry in whitelist if entry.strip()]
    if not entries:
        raise ExecValidationError("no commands are whitelisted")

    base_cmd = command.split()[0]
    for allowed in entries:
        if _matches(command, base_cmd, allowed):
            return base_cmd

    logger.debug(f"Command {base_cmd!r} not in whitelist")
    raise ExecValidationError(f"command not in whitelist: {base_cmd}")


@dataclass
class ExecPolicy:
    """
    Configurable allow-list for command execution.

    Example:
        >>> policy = ExecPolicy.allow({"go test", "make"})
        >>> policy.check_command("go test ./...")
        'go'
    """

    enabled: bool = False
    whitelist: list[str] = field(default_factory=list)

    @classmethod
    def disabled(cls) -> ExecPolicy:
        """Policy that rejects every command."""
        return cls(enabled=False)

    @classmethod
    def allow(cls, allowed: Iterable[str]) -> ExecPolicy:
        """
        Create an enabled policy that only allows the given prefixes.

        Args:
            allowed: Command prefixes (e.g., {"go test", "npm test", "make"}).
        """
        return cls(enabled=True, whitelist=sorted(allowed))

    @classmethod
    def from_config(cls, config: Config) -> ExecPolicy:
        return cls(enabled=config.exec_enabled, whitelist=list(config.exec_whitelist))

    def check_command(self, command: str) -> str:
        """
        Validate command against the policy.

        Returns:
            The base command.

        Raises:
            ExecValidationError: If the command is rejected.
        """
        return validate_exec_command(command, enabled=self.enabled, whitelist=self.whitelist)

    def add_allowed_command(self, command: str) -> None:
        """
        Add a command prefix to the allow-list.

        Args:
            command: Command prefix to allow (e.g., "go vet").
        """
        if command not in self.whitelist:
            self.whitelist.append(command)
