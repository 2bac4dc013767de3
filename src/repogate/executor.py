"""
Command mediation.

The Executor is the single entry point between model-issued commands and the
host. Every operation follows the same shape: validate, delegate to a
capability handler, audit, and return an ``ExecutionResult``. Failures are
returned as data; nothing raised below this layer reaches the caller.
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
from typing import TYPE_CHECKING, Sequence

from repogate._types import Command, CommandType, ExecutionResult, SearchHit
from repogate.errors import (
    ExecError,
    ExecFailedError,
    ExecTimeoutError,
    PathSecurityError,
    PermissionDeniedError,
    RepogateError,
    SearchFailedError,
    UnknownCommandError,
    WriteFailedError,
)
from repogate.handlers.search import DisabledSearchHandler
from repogate.security.paths import PathValidator

if TYPE_CHECKING:
    from repogate.handlers._base import ExecHandler, FileHandler, SearchHandler
    from repogate.session import Session

logger = logging.getLogger(__name__)

_SIZE_UNITS = "KMGTPE"


def format_file_size(size: int) -> str:
    """
    Format a byte count with 1024-based units.

    Example:
        >>> format_file_size(512)
        '512 B'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {_SIZE_UNITS[exp]}B"


def format_search_report(query: str, hits: Sequence[SearchHit], duration: float, max_results: int) -> str:
    """
    Render search hits as the plain-text report handed back to the model.

    At most ``max_results`` hits are listed; a trailer notes when the list was
    capped.
    """
    lines = [f"=== SEARCH: {query} ===", f"=== SEARCH RESULTS ({duration:.2f}s) ==="]

    if not hits:
        lines.append("No files found matching query.")
        lines.append("Try broader search terms or check if files are indexed.")
        lines.append("=== END SEARCH ===")
        return "\n".join(lines) + "\n"

    for rank, hit in enumerate(hits[:max_results], start=1):
        lines.append(f"{rank}. {hit.file_path} (score: {hit.score:.2f})")
        meta = f"   Lines: {hit.line_count} | Size: {format_file_size(hit.size)}"
        if hit.mod_time is not None:
            meta += f" | Modified: {hit.mod_time.strftime('%Y-%m-%d')}"
        lines.append(meta)
        if hit.preview:
            lines.append(f'   Preview: "{hit.preview}"')
        lines.append("")

    if len(hits) >= max_results:
        lines.append(f"[Showing top {max_results} results]")
    lines.append("=== END SEARCH ===")
    return "\n".join(lines) + "\n"


def _combine_output(stdout: str, stderr: str) -> str:
    if stdout and stderr:
        return f"STDOUT:\n{stdout}\n\nSTDERR:\n{stderr}"
    return stdout or stderr


def _type_name(command: Command) -> str:
    return command.type.value if isinstance(command.type, CommandType) else str(command.type)


class Executor:
    """
    Validates and dispatches commands on behalf of one session.

    Safe to share between concurrent tasks: the only mutable state touched is
    the session counter, which the session guards itself.

    Example:
        >>> executor = create_executor(Config("/repo"))
        >>> result = await executor.execute_open("README.md")
        >>> result.success
        True
    """

    def __init__(
        self,
        session: Session,
        file_handler: FileHandler,
        exec_handler: ExecHandler,
        search_handler: SearchHandler | None = None,
        validator: PathValidator | None = None,
    ) -> None:
        """
        Args:
            session: Run-scoped context (config, counter, audit sink).
            file_handler: Performs reads and writes on validated paths.
            exec_handler: Validates and runs sandboxed commands.
            search_handler: Search collaborator. Defaults to one that reports
                search as disabled.
            validator: Path and extension checks. Defaults to PathValidator.
        """
        self._session = session
        self._files = file_handler
        self._exec = exec_handler
        self._search = search_handler if search_handler is not None else DisabledSearchHandler()
        self._validator = validator if validator is not None else PathValidator()

    @property
    def session(self) -> Session:
        return self._session

    async def execute(self, command: Command) -> ExecutionResult:
        """
        Dispatch a parsed command by type.

        Unknown types produce an ``UNKNOWN_COMMAND`` result.
        """
        try:
            kind = CommandType(command.type)
        except ValueError:
            error = UnknownCommandError(f"unknown command type: {command.type}")
            return self._fail(command, error, time.perf_counter())

        if kind is CommandType.OPEN:
            return await self._open(command)
        if kind is CommandType.WRITE:
            return await self._write(command)
        if kind is CommandType.EXEC:
            return await self._run(command)
        return await self._find(command)

    async def execute_open(self, path: str) -> ExecutionResult:
        """Read a file inside the repository."""
        return await self._open(Command(CommandType.OPEN, path))

    async def execute_write(self, path: str, content: str) -> ExecutionResult:
        """Create or replace a file inside the repository."""
        return await self._write(Command(CommandType.WRITE, path, content))

    async def execute_exec(self, command: str) -> ExecutionResult:
        """Run a whitelisted command in the sandbox."""
        return await self._run(Command(CommandType.EXEC, command))

    async def execute_search(self, query: str) -> ExecutionResult:
        """Query the search collaborator and format a report."""
        return await self._find(Command(CommandType.SEARCH, query))

    async def _open(self, command: Command) -> ExecutionResult:
        start = time.perf_counter()
        config = self._session.config
        try:
            path = self._resolve(command.argument)
        except RepogateError as e:
            return self._fail(command, e, start)

        try:
            content = await self._files.open_file(path, config.max_file_size)
        except RepogateError as e:
            return self._fail(command, e, start)
        except Exception as e:
            return self._fail(command, PermissionDeniedError(f"cannot read {path}: {e}"), start)

        return self._succeed(command, start, "", result=content)

    async def _write(self, command: Command) -> ExecutionResult:
        start = time.perf_counter()
        config = self._session.config
        content = command.content or ""
        try:
            path = self._resolve(command.argument)
            self._validator.validate_write_extension(path, config.allowed_extensions)
        except RepogateError as e:
            return self._fail(command, e, start)

        try:
            written = await self._files.write_file(
                path,
                content,
                max_size=config.max_write_size,
                backup=config.backup_before_write,
            )
        except RepogateError as e:
            return self._fail(command, e, start)
        except Exception as e:
            return self._fail(command, WriteFailedError(f"could not write {path}: {e}"), start)

        digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
        message = f"hash:{digest},bytes:{written.bytes_written},action:{written.action.value.lower()}"
        if written.backup_file:
            message += f",backup:{os.path.basename(written.backup_file)}"
        return self._succeed(
            command,
            start,
            message,
            result=f"{written.action.value} {command.argument} ({written.bytes_written} bytes)",
            bytes_written=written.bytes_written,
            backup_file=written.backup_file,
            action=written.action,
        )

    async def _run(self, command: Command) -> ExecutionResult:
        start = time.perf_counter()
        config = self._session.config
        try:
            outcome = await self._exec.execute_command(command.argument, config)
        except (ExecTimeoutError, ExecFailedError) as e:
            partial = e.result
            return self._fail(
                command,
                e,
                start,
                result=_combine_output(partial.stdout, partial.stderr),
                exit_code=partial.exit_code,
                stdout=partial.stdout,
                stderr=partial.stderr,
            )
        except RepogateError as e:
            return self._fail(command, e, start)
        except Exception as e:
            return self._fail(command, ExecError(f"failed to run command: {e}"), start)

        elapsed = time.perf_counter() - start
        return self._succeed(
            command,
            start,
            f"exit_code:{outcome.exit_code},duration:{elapsed:.3f}s",
            result=_combine_output(outcome.stdout, outcome.stderr),
            exit_code=outcome.exit_code,
            stdout=outcome.stdout,
            stderr=outcome.stderr,
        )

    async def _find(self, command: Command) -> ExecutionResult:
        start = time.perf_counter()
        config = self._session.config
        try:
            hits = await self._search.search(command.argument)
        except RepogateError as e:
            return self._fail(command, e, start)
        except Exception as e:
            return self._fail(command, SearchFailedError(str(e)), start)

        elapsed = time.perf_counter() - start
        report = format_search_report(command.argument, hits, elapsed, config.search_max_results)
        return self._succeed(
            command,
            start,
            f"results:{len(hits)},duration:{elapsed:.3f}s",
            result=report,
        )

    def _resolve(self, requested: str) -> str:
        config = self._session.config
        try:
            return self._validator.validate_path(requested, config.repository_root, config.excluded_paths)
        except RepogateError:
            raise
        except Exception as e:
            raise PathSecurityError(f"cannot resolve {requested!r}: {e}") from e

    def _fail(self, command: Command, error: RepogateError, start: float, **fields) -> ExecutionResult:
        logger.debug(f"{_type_name(command)} {command.argument!r} failed: {error}")
        self._session.log_audit(_type_name(command), command.argument, False, str(error))
        return ExecutionResult(
            command=command,
            error=error,
            execution_time=time.perf_counter() - start,
            **fields,
        )

    def _succeed(self, command: Command, start: float, message: str, **fields) -> ExecutionResult:
        self._session.log_audit(_type_name(command), command.argument, True, message)
        self._session.increment_commands_run()
        return ExecutionResult(
            command=command,
            execution_time=time.perf_counter() - start,
            **fields,
        )
