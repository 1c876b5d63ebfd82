from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..base import BaseTool, CommandOutput, ToolContext, ToolSpec
from ..policy import CommandPolicy
from ...util.subprocess import run_shell

@dataclass
class BashTool(BaseTool):
    spec: ToolSpec = ToolSpec(
        name="execute_bash",
        display_name="Bash",
        description="Execute the specified bash command.",
        parameters={
            "type": "object",
            "properties": {
                "command": {"type": "string", "description": "Bash command to execute"},
            },
            "required": ["command"],
        },
    )
    policy: CommandPolicy = field(default_factory=CommandPolicy.default)

    def requires_acceptance(self, params: dict[str, Any]) -> bool:
        command = params.get("command")
        if not isinstance(command, str):
            return False
        return self.policy.is_destructive(command)

    def display_action(self, params: dict[str, Any]) -> str:
        return f"Executing: {params.get('command')}"

    async def execute(self, params: dict[str, Any], ctx: ToolContext | None = None) -> CommandOutput:
        command = params.get("command")
        if not isinstance(command, str) or not command.strip():
            return CommandOutput(stdout="", stderr="Missing required parameter: command", exit_status="1")

        res = await run_shell(command, cwd=ctx.cwd if ctx else None)
        # A non-zero exit is a normal result, not an error.
        return CommandOutput(stdout=res.stdout, stderr=res.stderr, exit_status=str(res.returncode))
