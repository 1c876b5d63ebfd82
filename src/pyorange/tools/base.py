from __future__ import annotations
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, Union

@dataclass(frozen=True)
class ToolSpec:
    name: str
    display_name: str
    description: str
    parameters: dict[str, Any]   # JSONSchema: {"type": "object", "properties": ..., "required": [...]}

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Tool name cannot be empty.")
        props = self.parameters.get("properties") or {}
        unknown = [r for r in self.parameters.get("required") or [] if r not in props]
        if unknown:
            raise ValueError(f"Tool {self.name}: required parameter(s) not declared: {', '.join(unknown)}")

    @property
    def required(self) -> list[str]:
        return list(self.parameters.get("required") or [])


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class CommandOutput:
    stdout: str
    stderr: str
    exit_status: str

    def to_dict(self) -> dict[str, str]:
        return {"stdout": self.stdout, "stderr": self.stderr, "exit_status": self.exit_status}


# fs tools return plain text, execute_bash returns a CommandOutput
ToolOutput = Union[str, CommandOutput]

Notifier = Callable[[Any], Union[Awaitable[None], None]]


@dataclass
class ToolContext:
    cwd: str | None = None
    # Receives side-effect events (file content / diffs) for display.
    notify: Notifier | None = None

    async def publish(self, event: Any) -> None:
        if self.notify is None:
            return
        res = self.notify(event)
        if inspect.isawaitable(res):
            await res


class Tool(Protocol):
    spec: ToolSpec
    def validate(self, params: dict[str, Any]) -> ValidationResult: ...
    def requires_acceptance(self, params: dict[str, Any]) -> bool: ...
    def display_action(self, params: dict[str, Any]) -> str: ...
    async def execute(self, params: dict[str, Any], ctx: ToolContext | None = None) -> ToolOutput: ...


class BaseTool:
    """Shared behaviour for the builtin tools.

    Subclasses declare a class-level `spec` and implement `execute`.
    """

    spec: ToolSpec

    @property
    def name(self) -> str:
        return self.spec.name

    def validate(self, params: dict[str, Any]) -> ValidationResult:
        # Presence only; type and semantic checks happen in execute.
        for key in self.spec.required:
            if key not in params or params[key] is None:
                return ValidationResult(False, f"Missing required parameter: {key}")
        return ValidationResult(True)

    def requires_acceptance(self, params: dict[str, Any]) -> bool:
        return False

    def display_action(self, params: dict[str, Any]) -> str:
        return f"Running {self.spec.display_name}"


@dataclass
class ToolResult:
    """Outcome of one tool call as reported back to the model."""

    tool_use_id: str
    content: str
    is_error: bool = False
