"""Lifecycle events emitted by the agent runtime.

Each event type has exactly one payload class; the string values are the
names the terminal renderer subscribes to.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar


class EventType(str, Enum):
    USER_SENT = "userSent"
    ASSISTANT_RECEIVE = "assistantReceive"
    TOOL_START = "toolStart"
    TOOL_END = "toolEnd"
    TOOL_CONFIRMATION = "toolConfirmation"
    ERROR = "error"
    FILE_NEW_CONTENT = "fileNewContent"
    FILE_UPDATE_CONTENT = "fileUpdateContent"
    TOKEN_USAGE = "tokenUsage"
    SYSTEM_CLOSED = "systemClosed"


@dataclass(frozen=True)
class UserSent:
    type: ClassVar[EventType] = EventType.USER_SENT
    content: str


@dataclass(frozen=True)
class AssistantReceive:
    type: ClassVar[EventType] = EventType.ASSISTANT_RECEIVE
    content: str


@dataclass(frozen=True)
class ToolStart:
    type: ClassVar[EventType] = EventType.TOOL_START
    tool_use_id: str
    tool_name: str
    input: dict[str, Any] = field(default_factory=dict)
    display_action: str = ""


@dataclass(frozen=True)
class ToolEnd:
    type: ClassVar[EventType] = EventType.TOOL_END
    tool_use_id: str
    tool_name: str
    elapsed_ms: int
    is_error: bool = False


@dataclass(frozen=True)
class ToolConfirmation:
    type: ClassVar[EventType] = EventType.TOOL_CONFIRMATION
    tool_use_id: str
    tool_name: str
    input: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ErrorEvent:
    type: ClassVar[EventType] = EventType.ERROR
    error: str


@dataclass(frozen=True)
class FileNewContent:
    type: ClassVar[EventType] = EventType.FILE_NEW_CONTENT
    path: str
    text: str


@dataclass(frozen=True)
class FileUpdateContent:
    type: ClassVar[EventType] = EventType.FILE_UPDATE_CONTENT
    path: str
    old_str: str
    new_str: str


@dataclass(frozen=True)
class TokenUsage:
    type: ClassVar[EventType] = EventType.TOKEN_USAGE
    input_tokens: int = 0
    output_tokens: int = 0
    total_cost: float | None = None


@dataclass(frozen=True)
class SystemClosed:
    type: ClassVar[EventType] = EventType.SYSTEM_CLOSED
    reason: str
    message: str | None = None


AgentEvent = (
    UserSent | AssistantReceive | ToolStart | ToolEnd | ToolConfirmation | ErrorEvent
    | FileNewContent | FileUpdateContent | TokenUsage | SystemClosed
)
