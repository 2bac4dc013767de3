"""
Abstract base class for container runtimes.

ExecSandbox owns validation and error classification; a runtime only knows
how to start an isolated run and tear it down. Swapping runtimes must not
change how a command is judged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Mount:
    """Host directory exposed inside the sandbox."""

    source: str
    target: str
    read_only: bool = True


@dataclass(frozen=True, slots=True)
class RunSpec:
    """Everything a runtime needs to start one isolated run."""

    image: str
    argv: tuple[str, ...]
    mounts: tuple[Mount, ...] = ()
    workdir: str = "/workspace"
    memory: str = ""
    cpus: float = 0
    network: bool = False
    user: str = "1000:1000"
    env: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RunOutput:
    """Raw outcome of a finished run."""

    exit_code: int
    stdout: str
    stderr: str
    duration: float


class ContainerRuntime(ABC):
    """
    Abstract base for all sandbox runtimes.

    Provides a consistent interface for checking availability and running a
    command in an isolated environment.
    """

    @abstractmethod
    async def is_available(self) -> bool:
        """Return True if the runtime can accept runs right now."""
        ...

    @abstractmethod
    async def run(self, spec: RunSpec, *, timeout: float) -> RunOutput:
        """
        Run ``spec`` to completion.

        Args:
            spec: Image, command, mounts and limits.
            timeout: Maximum seconds to wait before killing the run.

        Returns:
            RunOutput with exit code, decoded output and duration.

        Raises:
            TimeoutError: If ``timeout`` elapsed. The run has been terminated
                and reaped before this propagates.

        Implementations must also terminate the run when the awaiting task is
        cancelled.
        """
        ...
