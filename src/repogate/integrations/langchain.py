"""LangChain integration for repogate."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from repogate.integrations._render import render_result

if TYPE_CHECKING:
    from repogate.executor import Executor

HAS_LANGCHAIN = False
_StructuredTool: Any = None

try:
    import langchain_core.tools

    _StructuredTool = langchain_core.tools.StructuredTool
    HAS_LANGCHAIN = True
except ImportError:
    pass


def create_langchain_tools(executor: Executor) -> dict[str, Any]:
    """
    Create LangChain tools from an Executor.

    Args:
        executor: The executor to wrap.

    Returns:
        Dictionary of LangChain StructuredTool instances.

    Raises:
        ImportError: If langchain-core is not installed.

    Example:
        >>> executor = create_executor(Config("."))
        >>> tools = create_langchain_tools(executor)
        >>> agent = create_react_agent(llm, list(tools.values()))
    """
    if not HAS_LANGCHAIN:
        raise ImportError(
            "LangChain integration requires langchain-core. "
            "Install with: pip install repogate[langchain]"
        )

    async def open_file(path: str) -> str:
        """Read a file from the repository."""
        return render_result(await executor.execute_open(path))

    async def write_file(path: str, content: str) -> str:
        """Write a file in the repository."""
        return render_result(await executor.execute_write(path, content))

    async def run_command(command: str) -> str:
        """Run a whitelisted command in the sandbox."""
        return render_result(await executor.execute_exec(command))

    async def search_code(query: str) -> str:
        """Search the repository."""
        return render_result(await executor.execute_search(query))

    config = executor.session.config
    whitelist = ", ".join(config.exec_whitelist) if config.exec_enabled else "none (exec disabled)"

    return {
        "open_file": _StructuredTool.from_function(
            coroutine=open_file,
            name="open_file",
            description="Read a file from the repository. Paths are relative to the repository root.",
        ),
        "write_file": _StructuredTool.from_function(
            coroutine=write_file,
            name="write_file",
            description="Create or replace a file in the repository.",
        ),
        "run_command": _StructuredTool.from_function(
            coroutine=run_command,
            name="run_command",
            description=f"Run a command in an isolated container. Allowed commands: {whitelist}.",
        ),
        "search_code": _StructuredTool.from_function(
            coroutine=search_code,
            name="search_code",
            description="Search the repository for files relevant to a query.",
        ),
    }
