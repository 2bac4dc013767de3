"""
Sandboxed command execution.

Every command is validated against the allow-list before the runtime is even
contacted; the runtime then runs it with the repository mounted read-only, a
throwaway scratch directory, no network and bounded memory/CPU.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
import time
from typing import TYPE_CHECKING

from repogate._types import ExecResult
from repogate.errors import (
    DockerUnavailableError,
    ExecError,
    ExecFailedError,
    ExecTimeoutError,
)
from repogate.handlers._base import ExecHandler
from repogate.sandbox._base import ContainerRuntime, Mount, RunSpec
from repogate.sandbox.docker import DockerRuntime
from repogate.security.policy import ExecPolicy

if TYPE_CHECKING:
    from repogate.config import Config

logger = logging.getLogger(__name__)

# Conventional exit status for a command killed by its deadline.
TIMEOUT_EXIT_CODE = 124

WORKSPACE_DIR = "/workspace"
SCRATCH_DIR = "/tmp/workspace"
SCRATCH_MODE = 0o1777


def truncate_output(text: str, limit: int) -> tuple[str, bool]:
    """Truncate ``text`` to ``limit`` characters, noting how much was dropped."""
    if limit and len(text) > limit:
        truncated_count = len(text) - limit
        text = text[:limit]
        text += f"\n\n[Truncated: {truncated_count} characters removed]"
        return text, True
    return text, False


class ExecSandbox(ExecHandler):
    """
    Runs whitelisted commands in an isolated container.

    Holds no per-run state, so one instance can serve concurrent commands.

    Example:
        >>> sandbox = ExecSandbox()
        >>> config = Config.development("/repo", whitelist={"go test"})
        >>> result = await sandbox.execute_command("go test ./...", config)
        >>> result.exit_code
        0
    """

    def __init__(self, runtime: ContainerRuntime | None = None, *, grace_period: float = 5.0) -> None:
        """
        Args:
            runtime: Container runtime. Defaults to DockerRuntime.
            grace_period: Extra seconds allowed past ``exec_timeout`` for the
                runtime to honour its own deadline before the run is cancelled.
        """
        self.runtime = runtime if runtime is not None else DockerRuntime()
        self.grace_period = grace_period

    def build_run_spec(self, command: str, config: Config, scratch_dir: str) -> RunSpec:
        repo_root = os.path.realpath(config.repository_root)
        return RunSpec(
            image=config.exec_container_image,
            argv=("sh", "-c", command),
            mounts=(
                Mount(repo_root, WORKSPACE_DIR, read_only=True),
                Mount(scratch_dir, SCRATCH_DIR, read_only=False),
            ),
            workdir=WORKSPACE_DIR,
            memory=config.exec_memory_limit,
            cpus=config.exec_cpu_limit,
            network=config.exec_network_enabled,
        )

    async def execute_command(self, command: str, config: Config) -> ExecResult:
        ExecPolicy.from_config(config).check_command(command)
        command = command.strip()

        try:
            available = await self.runtime.is_available()
        except Exception as e:
            raise DockerUnavailableError(f"container runtime check failed: {e}") from e
        if not available:
            raise DockerUnavailableError("container runtime is not available")

        timeout = config.exec_timeout
        limit = config.exec_max_output_bytes
        with tempfile.TemporaryDirectory(prefix="repogate-exec-") as scratch_dir:
            # The container runs as an unprivileged uid that may differ from ours.
            os.chmod(scratch_dir, SCRATCH_MODE)
            spec = self.build_run_spec(command, config, scratch_dir)
            start = time.monotonic()
            try:
                output = await asyncio.wait_for(
                    self.runtime.run(spec, timeout=timeout),
                    timeout=timeout + self.grace_period,
                )
            except TimeoutError:
                duration = time.monotonic() - start
                logger.info(f"Command timed out after {duration:.1f}s: {command!r}")
                result = ExecResult(
                    exit_code=TIMEOUT_EXIT_CODE,
                    stdout="",
                    stderr=f"Command timed out after {timeout:g}s",
                    duration=duration,
                )
                raise ExecTimeoutError(timeout, result) from None
            except Exception as e:
                raise ExecError(f"failed to run command: {e}") from e

        stdout, stdout_truncated = truncate_output(output.stdout, limit)
        stderr, stderr_truncated = truncate_output(output.stderr, limit)
        result = ExecResult(
            exit_code=output.exit_code,
            stdout=stdout,
            stderr=stderr,
            duration=output.duration,
            truncated=stdout_truncated or stderr_truncated,
        )
        if not result.success:
            raise ExecFailedError(result)
        return result
