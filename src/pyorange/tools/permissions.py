from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .base import Tool

AFFIRMATIVE = "y"


def is_affirmative(answer: str | None) -> bool:
    """Only an exact "y" / "Y" approves; anything else denies."""
    return answer is not None and answer.lower() == AFFIRMATIVE


class GateState(str, Enum):
    REQUESTED = "requested"
    AWAITING_HUMAN = "awaiting_human"
    APPROVED = "approved"
    DENIED = "denied"


class UnknownConfirmationError(KeyError):
    def __str__(self) -> str:
        return f"No pending confirmation for tool use {self.args[0]!r}"


@dataclass
class PendingConfirmation:
    tool_use_id: str
    tool_name: str
    input: dict[str, Any]
    future: asyncio.Future = field(repr=False)
    state: GateState = GateState.AWAITING_HUMAN


class ConfirmationGate:
    """Holds flagged tool calls until a human approves or denies them.

    Pending requests are keyed by tool_use_id. Each one suspends only the
    coroutine awaiting it.
    """

    def __init__(self, accept_all: bool = False):
        self.accept_all = accept_all
        self._pending: dict[str, PendingConfirmation] = {}

    def needs_human(self, tool: Tool, params: dict[str, Any]) -> bool:
        if self.accept_all:
            return False
        return bool(tool.requires_acceptance(params))

    def open(self, tool_use_id: str, tool_name: str, params: dict[str, Any]) -> PendingConfirmation:
        if tool_use_id in self._pending:
            raise ValueError(f"Confirmation already pending for tool use {tool_use_id!r}")
        fut = asyncio.get_running_loop().create_future()
        pending = PendingConfirmation(tool_use_id, tool_name, dict(params), fut)
        self._pending[tool_use_id] = pending
        return pending

    def resolve(self, tool_use_id: str, approved: bool) -> GateState:
        pending = self._pending.get(tool_use_id)
        if pending is None:
            raise UnknownConfirmationError(tool_use_id)
        pending.state = GateState.APPROVED if approved else GateState.DENIED
        if not pending.future.done():
            pending.future.set_result(bool(approved))
        return pending.state

    async def wait(self, tool_use_id: str) -> bool:
        pending = self._pending.get(tool_use_id)
        if pending is None:
            raise UnknownConfirmationError(tool_use_id)
        try:
            return await pending.future
        finally:
            self._pending.pop(tool_use_id, None)

    def cancel(self, tool_use_id: str) -> None:
        pending = self._pending.pop(tool_use_id, None)
        if pending is not None and not pending.future.done():
            pending.future.cancel()

    @property
    def pending(self) -> list[PendingConfirmation]:
        return list(self._pending.values())
