"""
Simulation of an AI Agent using repogate.

This demonstrates how `repogate` is used in a real agent loop.
The agent (simulated here) issues commands dynamically.
repogate acts as the safety layer, allowing in-policy commands and rejecting the rest.
"""

import asyncio
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

from repogate import AuditLogger, Command, CommandType, Config, create_executor
from repogate.integrations import render_result


@dataclass
class AgentAction:
    thought: str
    command: Command


class MockLLM:
    """Simulates an LLM acting on a user request."""

    def __init__(self):
        self.step = 0

    def next_action(self) -> AgentAction | None:
        """Returns the next command the 'AI' wants to run."""
        actions = [
            # Innocent exploration
            AgentAction(
                thought="I need to read the project notes.",
                command=Command(CommandType.OPEN, "README.md"),
            ),
            # Doing work (allowed)
            AgentAction(
                thought="I'll add a config file.",
                command=Command(CommandType.WRITE, "config.json", '{"debug": true}'),
            ),
            # Running the build (whitelisted, needs Docker)
            AgentAction(
                thought="Let me run the build.",
                command=Command(CommandType.EXEC, "make build"),
            ),
            # HALLUCINATION / MISTAKE (Dangerous!)
            # The agent gets confused and tries to read host secrets
            AgentAction(
                thought="I should check the system passwords.",
                command=Command(CommandType.OPEN, "../../etc/passwd"),
            ),
            # Secret exfiltration (Dangerous!)
            AgentAction(
                thought="I'll grab the deploy key.",
                command=Command(CommandType.OPEN, "deploy.key"),
            ),
            # Off-list command (Dangerous!)
            AgentAction(
                thought="I'll clean up everything.",
                command=Command(CommandType.EXEC, "rm -rf /"),
            ),
        ]

        if self.step < len(actions):
            action = actions[self.step]
            self.step += 1
            return action
        return None


async def main():
    logging.basicConfig(level=logging.INFO)
    print("🤖 Agent initializing...")

    with tempfile.TemporaryDirectory(prefix="repogate-demo-") as workspace:
        root = Path(workspace)
        (root / "README.md").write_text("# Demo project\n")
        (root / "deploy.key").write_text("-----BEGIN KEY-----\n")

        config = Config.development(str(root), whitelist={"make"}, allowed_extensions=[".json", ".md"])
        print("🔒 repogate active: paths confined, exec whitelisted\n")

        with AuditLogger(root / "audit.log") as audit:
            executor = create_executor(config, audit=audit)
            llm = MockLLM()

            while True:
                action = llm.next_action()
                if not action:
                    print("✅ Agent finished task.")
                    break

                print(f"🤖 Thought: {action.thought}")
                result = await executor.execute(action.command)
                output = render_result(result).strip() or "(empty)"

                if not result.success:
                    print(f"🛡️ REPOGATE BLOCKED: {output.splitlines()[0]}")
                else:
                    print(f"  -> Result: {output.splitlines()[0]}...")
                print("-" * 50)

        print(f"\n{executor.session.commands_run} commands succeeded.")
        print((root / "audit.log").read_text())


if __name__ == "__main__":
    asyncio.run(main())
