from __future__ import annotations

import asyncio
import json
import time
import uuid
from typing import Any, Mapping

from .events.dispatcher import EventDispatcher, Handler
from .events.store import EventStore
from .events.types import (
    AgentEvent,
    AssistantReceive,
    ErrorEvent,
    EventType,
    SystemClosed,
    TokenUsage,
    ToolConfirmation,
    ToolEnd,
    ToolStart,
    UserSent,
)
from .llm.openai_compat import OpenAICompatProvider
from .session.models import AssistantTurn, Message, ToolCall
from .tools.base import CommandOutput, ToolContext, ToolOutput, ToolResult
from .tools.permissions import ConfirmationGate
from .tools.registry import ToolRegistry, UnknownToolError


def _tool_specs_to_openai(tools: ToolRegistry) -> list[dict]:
    out = []
    for spec in tools.list_specs():
        out.append({
            "type": "function",
            "function": {
                "name": spec.name,
                "description": spec.description,
                "parameters": spec.parameters,
            },
        })
    return out


def render_output(output: ToolOutput) -> str:
    if isinstance(output, CommandOutput):
        return json.dumps(output.to_dict(), ensure_ascii=False)
    return str(output)


def output_is_error(output: ToolOutput) -> bool:
    if isinstance(output, CommandOutput):
        return output.exit_status != "0"
    return str(output).startswith("Error:")


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    half = limit // 2
    return text[:half] + f"\n\n... (truncated {len(text) - limit} chars) ...\n\n" + text[-half:]


class AgentRuntime:
    """Drives one chat session: model calls, tool dispatch and lifecycle events.

    Tool calls are handled one at a time. A call whose tool asks for
    acceptance is parked in the ConfirmationGate and a `toolConfirmation`
    event is emitted; the consumer answers with handle_tool_confirmation().
    """

    def __init__(
        self,
        provider: OpenAICompatProvider,
        tools: ToolRegistry,
        gate: ConfirmationGate,
        *,
        system_prompt: str = "",
        events: EventStore | None = None,
        max_steps: int = 25,
        max_tool_result_chars: int = 20000,
        cwd: str | None = None,
        retry_delay: float = 0.5,
    ) -> None:
        self.provider = provider
        self.tools = tools
        self.gate = gate
        self.events = events
        self.max_steps = max_steps
        self.max_tool_result_chars = max_tool_result_chars
        self.cwd = cwd
        self.retry_delay = retry_delay
        self.dispatcher = EventDispatcher()
        self.messages: list[Message] = []
        if system_prompt:
            self.messages.append(Message(role="system", content=system_prompt))
        self.closed = False

    def on(self, handlers: Mapping[EventType | str, Handler]) -> None:
        self.dispatcher.on(handlers)

    async def emit(self, event: AgentEvent) -> bool:
        return await self.dispatcher.emit(event)

    def _log(self, event_type: str, data: dict[str, Any]) -> None:
        if self.events:
            self.events.append(event_type, data)

    def handle_tool_confirmation(self, tool_use_id: str, approved: bool) -> None:
        self.gate.resolve(tool_use_id, approved)

    async def shutdown(self, reason: str = "user_quit", message: str | None = None) -> None:
        if self.closed:
            return
        self.closed = True
        self._log("session.closed", {"reason": reason})
        if self.events:
            self.events.close()
        await self.emit(SystemClosed(reason=reason, message=message))

    async def _chat(self, step: int) -> AssistantTurn | None:
        messages = [m.to_openai() for m in self.messages]
        tools = _tool_specs_to_openai(self.tools)
        self._log("llm.request", {"step": step, "model": self.provider.model, "messages_count": len(messages), "tools_count": len(tools)})

        # Retry transient provider failures a few times.
        last_err: Exception | None = None
        for attempt in range(3):
            t0 = time.perf_counter()
            try:
                turn = await asyncio.to_thread(self.provider.chat, messages, tools)
            except Exception as e:
                last_err = e
                self._log("llm.error", {"step": step, "attempt": attempt + 1, "error": str(e)[:2000]})
                if attempt < 2:
                    await asyncio.sleep(self.retry_delay * (2 ** attempt))
                continue
            self._log(
                "llm.response",
                {
                    "step": step,
                    "elapsed_ms": int((time.perf_counter() - t0) * 1000),
                    "text_len": len(turn.text or ""),
                    "tool_calls": [tc.name for tc in turn.tool_calls],
                },
            )
            return turn

        await self.emit(ErrorEvent(error=f"LLM call failed after retries: {last_err}"))
        return None

    async def run(self, user_input: str) -> str:
        """Run one user turn to completion and return the final assistant text."""
        if self.closed:
            raise RuntimeError("Agent runtime has been shut down.")

        await self.emit(UserSent(content=user_input))
        self.messages.append(Message(role="user", content=user_input))

        final_text = ""
        for step in range(self.max_steps):
            turn = await self._chat(step)
            if turn is None:
                return final_text

            if turn.usage is not None:
                await self.emit(TokenUsage(input_tokens=turn.usage.input_tokens, output_tokens=turn.usage.output_tokens))

            for i, tc in enumerate(turn.tool_calls):
                if not tc.id:
                    tc.id = f"tc_{step}_{i}_{uuid.uuid4().hex[:8]}"

            self.messages.append(
                Message(
                    role="assistant",
                    content=turn.text or (None if turn.tool_calls else ""),
                    tool_calls=[
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {"name": tc.name, "arguments": json.dumps(tc.arguments or {}, ensure_ascii=False)},
                        }
                        for tc in turn.tool_calls
                    ] or None,
                )
            )

            if turn.text:
                final_text = turn.text
                await self.emit(AssistantReceive(content=turn.text))

            if not turn.tool_calls:
                return final_text

            for tc in turn.tool_calls:
                res = await self.run_tool_call(tc)
                self.messages.append(Message(role="tool", content=res.content, tool_call_id=tc.id))

        await self.emit(ErrorEvent(error=f"Reached max steps ({self.max_steps}) without a final answer"))
        return final_text

    async def run_tool_call(self, tc: ToolCall) -> ToolResult:
        try:
            tool = self.tools.get(tc.name)
        except UnknownToolError as e:
            self._log("tool.missing", {"tool": tc.name, "tool_call_id": tc.id})
            await self.emit(ErrorEvent(error=str(e)))
            return ToolResult(tc.id, f"Tool {tc.name} not found.", is_error=True)

        args = dict(tc.arguments or {})
        check = tool.validate(args)
        if not check.ok:
            self._log("tool.invalid", {"tool": tc.name, "tool_call_id": tc.id, "error": check.error})
            await self.emit(ErrorEvent(error=f"{tc.name}: {check.error}"))
            return ToolResult(tc.id, f"Error: {check.error}", is_error=True)

        self._log("tool.call", {"tool": tc.name, "tool_call_id": tc.id, "args": sorted(args)})

        if self.gate.needs_human(tool, args):
            self.gate.open(tc.id, tc.name, args)
            try:
                delivered = await self.emit(ToolConfirmation(tool_use_id=tc.id, tool_name=tc.name, input=args))
            except BaseException:
                self.gate.cancel(tc.id)
                raise
            if not delivered:
                # Nobody can answer: deny.
                self.gate.resolve(tc.id, False)
            approved = await self.gate.wait(tc.id)
            if not approved:
                self._log("tool.denied", {"tool": tc.name, "tool_call_id": tc.id})
                return ToolResult(tc.id, f"Tool {tc.name} was denied by the user.", is_error=True)

        await self.emit(ToolStart(tool_use_id=tc.id, tool_name=tc.name, input=args, display_action=tool.display_action(args)))
        ctx = ToolContext(cwd=self.cwd, notify=self.emit)
        t0 = time.perf_counter()
        try:
            output = await tool.execute(args, ctx)
            content, is_error = render_output(output), output_is_error(output)
        except Exception as e:
            content, is_error = f"Tool {tc.name} exception: {e}", True
        elapsed_ms = int((time.perf_counter() - t0) * 1000)

        await self.emit(ToolEnd(tool_use_id=tc.id, tool_name=tc.name, elapsed_ms=elapsed_ms, is_error=is_error))
        self._log(
            "tool.result",
            {"tool": tc.name, "tool_call_id": tc.id, "is_error": is_error, "elapsed_ms": elapsed_ms, "content_len": len(content)},
        )
        return ToolResult(tc.id, _truncate(content, self.max_tool_result_chars), is_error=is_error)
