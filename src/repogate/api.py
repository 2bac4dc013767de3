"""
Main entry point: create_executor factory function.

This is the primary API for mediating model-issued commands against a
repository.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from repogate.executor import Executor
from repogate.handlers.files import LocalFileHandler
from repogate.sandbox.exec import ExecSandbox
from repogate.session import Session

if TYPE_CHECKING:
    from repogate.audit import AuditLogger
    from repogate.config import Config
    from repogate.handlers._base import SearchHandler
    from repogate.sandbox._base import ContainerRuntime


def create_executor(
    config: Config,
    *,
    audit: AuditLogger | None = None,
    runtime: ContainerRuntime | None = None,
    search: SearchHandler | None = None,
    session_id: str | None = None,
) -> Executor:
    """
    Create an Executor wired with the production handlers.

    Args:
        config: Policy for this run.
        audit: Audit sink. When omitted, nothing is recorded.
        runtime: Container runtime for exec. Defaults to DockerRuntime.
        search: Search collaborator. Defaults to a handler that reports
                search as disabled.
        session_id: Fixed session id. Defaults to a random one.

    Returns:
        Executor bound to a fresh Session.

    Example:
        >>> config = Config.development("./my_project", whitelist={"go test"})
        >>> with AuditLogger("audit.log") as audit:
        ...     executor = create_executor(config, audit=audit)
        ...     result = await executor.execute_exec("go test ./...")
        >>> print(result.stdout)
    """
    session = Session(config, audit, session_id=session_id)
    return Executor(
        session,
        LocalFileHandler(max_backups=config.max_backups),
        ExecSandbox(runtime),
        search_handler=search,
    )
