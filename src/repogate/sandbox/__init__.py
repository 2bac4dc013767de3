"""
Sandbox backends.
"""

from repogate.sandbox._base import ContainerRuntime, Mount, RunOutput, RunSpec
from repogate.sandbox.docker import DockerRuntime
from repogate.sandbox.exec import TIMEOUT_EXIT_CODE, ExecSandbox

__all__ = [
    "ContainerRuntime",
    "Mount",
    "RunSpec",
    "RunOutput",
    "DockerRuntime",
    "ExecSandbox",
    "TIMEOUT_EXIT_CODE",
]
