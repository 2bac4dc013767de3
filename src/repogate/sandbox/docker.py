"""
Docker-based sandbox runtime.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
import uuid

from repogate.sandbox._base import ContainerRuntime, RunOutput, RunSpec

logger = logging.getLogger(__name__)

# Exit status docker itself uses when it could not start the container.
DOCKER_RUN_ERROR = 125


class DockerRuntime(ContainerRuntime):
    """
    Runs commands inside ephemeral, locked-down Docker containers.

    Each run gets a unique container name so it can be force-removed if the
    deadline fires; killing the docker client alone does not stop the
    container.
    """

    def __init__(
        self,
        docker: str = "docker",
        *,
        pull_timeout: float = 300.0,
        check_timeout: float = 10.0,
    ) -> None:
        """
        Args:
            docker: Docker CLI executable.
            pull_timeout: Seconds allowed for pulling a missing image.
            check_timeout: Seconds allowed for the availability probe.
        """
        self.docker = docker
        self.pull_timeout = pull_timeout
        self.check_timeout = check_timeout

    async def is_available(self) -> bool:
        try:
            code, _, stderr = await self._docker("version", timeout=self.check_timeout)
        except (OSError, TimeoutError) as e:
            logger.debug(f"Docker not available: {e}")
            return False
        if code != 0:
            logger.debug(f"Docker not available: {stderr.strip()}")
        return code == 0

    def build_args(self, spec: RunSpec, name: str) -> list[str]:
        """Translate a RunSpec into a ``docker run`` argument list."""
        args = [
            self.docker, "run", "--rm",
            "--init",  # Handle signals properly
            "--name", name,
            f"--network={'bridge' if spec.network else 'none'}",
            "--workdir", spec.workdir,
        ]
        if spec.memory:
            args += ["--memory", spec.memory]
        if spec.cpus:
            args.append(f"--cpus={spec.cpus:g}")
        for mount in spec.mounts:
            volume = f"{mount.source}:{mount.target}"
            if mount.read_only:
                volume += ":ro"
            args += ["-v", volume]
        for key, value in spec.env.items():
            args += ["-e", f"{key}={value}"]
        args += [
            "--user", spec.user,
            "--cap-drop", "ALL",
            "--security-opt", "no-new-privileges",
            "--read-only",
            "--tmpfs", "/tmp",
            spec.image,
            *spec.argv,
        ]
        return args

    async def run(self, spec: RunSpec, *, timeout: float) -> RunOutput:
        await self._ensure_image(spec.image)

        name = f"repogate-{uuid.uuid4().hex[:12]}"
        start = time.monotonic()
        proc = await asyncio.create_subprocess_exec(
            *self.build_args(spec, name),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except BaseException:
            # Timeout or cancellation: nothing may outlive this call.
            await self._terminate(proc, name)
            raise

        duration = time.monotonic() - start
        code = proc.returncode if proc.returncode is not None else -1
        stderr_text = stderr.decode(errors="replace")
        if code == DOCKER_RUN_ERROR:
            raise RuntimeError(f"docker run failed: {stderr_text.strip()}")

        return RunOutput(
            exit_code=code,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr_text,
            duration=duration,
        )

    async def _ensure_image(self, image: str) -> None:
        code, _, _ = await self._docker("image", "inspect", image, timeout=self.check_timeout)
        if code == 0:
            return
        logger.info(f"Pulling image {image}")
        code, _, stderr = await self._docker("pull", image, timeout=self.pull_timeout)
        if code != 0:
            raise RuntimeError(f"failed to pull image {image}: {stderr.strip()}")

    async def _terminate(self, proc: asyncio.subprocess.Process, name: str) -> None:
        if proc.returncode is None:
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()  # Ensure process is reaped
        try:
            code, _, stderr = await self._docker("rm", "-f", name, timeout=self.check_timeout)
        except (OSError, TimeoutError) as e:
            logger.warning(f"Could not remove container {name}: {e}")
            return
        if code != 0 and "No such container" not in stderr:
            logger.warning(f"Could not remove container {name}: {stderr.strip()}")

    async def _docker(self, *args: str, timeout: float) -> tuple[int, str, str]:
        """Run a short docker CLI call, killing it if it overruns."""
        proc = await asyncio.create_subprocess_exec(
            self.docker,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except BaseException:
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()
            raise
        return (
            proc.returncode if proc.returncode is not None else -1,
            stdout.decode(errors="replace"),
            stderr.decode(errors="replace"),
        )
