"""Plain-text rendering of results for agent frameworks."""

from __future__ import annotations

from repogate._types import CommandType, ExecutionResult


def render_result(result: ExecutionResult) -> str:
    """
    Turn an ExecutionResult into the text returned to the model.

    Errors are sanitized; exec failures keep their output so the model can
    see why the program failed.
    """
    if result.success:
        if result.command.type == CommandType.WRITE and not result.result:
            return f"Written to {result.command.argument}"
        return result.result

    message = f"Error: {result.public_error}"
    if result.command.type == CommandType.EXEC and result.result:
        message += f" (exit {result.exit_code})\n{result.result}"
    return message
