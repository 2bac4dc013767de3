"""
PydanticAI integration for repogate.

Provides helpers to create PydanticAI-compatible tools.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

try:
    from pydantic_ai import RunContext, Tool
except ImportError:
    raise ImportError(
        "PydanticAI integration requires 'pydantic-ai'. "
        "Install with `pip install repogate[pydantic-ai]`"
    )

from repogate.integrations._render import render_result

if TYPE_CHECKING:
    from repogate.executor import Executor


def create_pydantic_ai_tools(executor: Executor) -> list[Tool]:
    """
    Create PydanticAI tools backed by an Executor.

    Example:
        >>> from pydantic_ai import Agent
        >>> executor = create_executor(Config("./project"))
        >>> agent = Agent("openai:gpt-4o", tools=create_pydantic_ai_tools(executor))
    """

    async def open_file(ctx: RunContext, path: str) -> str:
        """
        Read a file from the repository.

        Args:
            path: Path relative to the repository root.
        """
        return render_result(await executor.execute_open(path))

    async def write_file(ctx: RunContext, path: str, content: str) -> str:
        """
        Create or replace a file in the repository.

        Args:
            path: Path relative to the repository root.
            content: Full new file content.
        """
        return render_result(await executor.execute_write(path, content))

    async def run_command(ctx: RunContext, command: str) -> str:
        """
        Run a whitelisted command in an isolated container.
        Only allowed commands will succeed.

        Args:
            command: Shell command, e.g. "go test ./...".
        """
        return render_result(await executor.execute_exec(command))

    async def search_code(ctx: RunContext, query: str) -> str:
        """
        Search the repository for files relevant to a query.

        Args:
            query: Free-text search terms.
        """
        return render_result(await executor.execute_search(query))

    return [
        Tool(open_file, takes_ctx=True),
        Tool(write_file, takes_ctx=True),
        Tool(run_command, takes_ctx=True),
        Tool(search_code, takes_ctx=True),
    ]
