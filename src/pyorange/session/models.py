from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Literal

Role = Literal["system", "user", "assistant", "tool"]

@dataclass
class Message:
    role: Role
    # content can be null when an assistant message only carries tool_calls
    content: str | None
    tool_call_id: str | None = None
    # Assistant-only: OpenAI-compatible tool call representation
    tool_calls: list[dict[str, Any]] | None = None

    def to_openai(self) -> dict[str, Any]:
        d: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_call_id:
            d["tool_call_id"] = self.tool_call_id
        if self.role == "assistant" and self.tool_calls is not None:
            d["tool_calls"] = self.tool_calls
        return d

@dataclass
class ToolCall:
    """One invocation request: tool name, correlation id and raw arguments."""
    id: str
    name: str
    arguments: dict[str, Any]  # parsed json

@dataclass
class Usage:
    input_tokens: int = 0
    output_tokens: int = 0

@dataclass
class AssistantTurn:
    text: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    usage: Usage | None = None
