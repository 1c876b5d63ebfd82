from __future__ import annotations

import asyncio
import difflib
import json
import re

from rich.console import Console
from rich.rule import Rule
from rich.status import Status
from rich.text import Text

from ..events.types import (
    AssistantReceive,
    ErrorEvent,
    FileNewContent,
    FileUpdateContent,
    SystemClosed,
    TokenUsage,
    ToolConfirmation,
    ToolEnd,
    ToolStart,
    UserSent,
)

_THINKING = re.compile(r"<thinking>[\s\S]*?</thinking>")
RULE_WIDTH = 50


def strip_thinking(content: str) -> str:
    return _THINKING.sub("", content)


def diff_lines(old: str, new: str) -> list[tuple[str, str]]:
    """Line diff as (kind, line) pairs; kind is " ", "+" or "-"."""
    a = old.splitlines()
    b = new.splitlines()
    out: list[tuple[str, str]] = []
    for tag, i1, i2, j1, j2 in difflib.SequenceMatcher(None, a, b, autojunk=False).get_opcodes():
        if tag == "equal":
            out.extend((" ", line) for line in a[i1:i2])
            continue
        out.extend(("-", line) for line in a[i1:i2])
        out.extend(("+", line) for line in b[j1:j2])
    return out


_DIFF_STYLE = {" ": "dim", "+": "green", "-": "red"}


def format_diff(old: str, new: str) -> Text:
    text = Text()
    for kind, line in diff_lines(old, new):
        prefix = "  " if kind == " " else f"{kind} "
        text.append(prefix + line + "\n", style=_DIFF_STYLE[kind])
    text.rstrip()
    return text


def format_tool_start(event: ToolStart) -> Text:
    text = Text()
    text.append("→ ", style="cyan")
    text.append(f"Executing {event.tool_name}", style="bold")
    if event.display_action:
        text.append(f"\n{event.display_action}", style="dim")
    if event.input:
        text.append("\n" + json.dumps(event.input, indent=2, ensure_ascii=False))
    return text


def format_tool_end(event: ToolEnd) -> Text:
    seconds = event.elapsed_ms / 1000
    if event.is_error:
        return Text.assemble(("✗ ", "red"), (f"Finished with errors in {seconds}s", "bold"))
    return Text.assemble(("✓ ", "green"), (f"Completed in {seconds}s", "bold"))


def confirmation_question(event: ToolConfirmation) -> str:
    if event.tool_name == "execute_bash":
        return f"Enter y to run the following command: \n{json.dumps(event.input, ensure_ascii=False)}"
    return "Enter y to run this tool, otherwise continue chatting."


def format_confirmation(event: ToolConfirmation) -> Text:
    return Text.assemble(("→ ", "red"), (confirmation_question(event), "bold"), "\n")


def format_error(event: ErrorEvent) -> Text:
    return Text.assemble(("✗ ", "red"), ("Failed: ", "bold"), str(event.error))


def format_token_usage(event: TokenUsage) -> Text:
    if event.total_cost:
        return Text(f"${event.total_cost}", style="blue")
    return Text(f"tokens: {event.input_tokens} in / {event.output_tokens} out", style="dim")


def format_system_closed(event: SystemClosed) -> Text:
    suffix = f" - {event.message}" if event.message else ""
    return Text(f"Chat session ended: {event.reason}{suffix}", style="blue")


class Renderer:
    """Writes lifecycle events to the terminal.

    Owns the "Thinking..." spinner; it is only animated on a real terminal.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console(highlight=False)
        self._status: Status | None = None

    # spinner
    def start_spinner(self, message: str = "Thinking...") -> None:
        self.stop_spinner()
        if not self.console.is_terminal:
            self.console.print(Text(message, style="dim"))
            return
        self._status = self.console.status(Text(message, style="dim"), spinner="dots")
        self._status.start()

    def stop_spinner(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    @property
    def spinning(self) -> bool:
        return self._status is not None

    # input
    async def ask(self, prompt: str | Text) -> str:
        self.stop_spinner()
        return await asyncio.to_thread(self.console.input, prompt)

    # event handlers
    def user_sent(self, event: UserSent) -> None:
        self.start_spinner()

    def assistant_receive(self, event: AssistantReceive) -> None:
        self.stop_spinner()
        content = strip_thinking(event.content).strip()
        if content:
            self.console.print(Text(content))

    def tool_start(self, event: ToolStart) -> None:
        self.stop_spinner()
        self.console.print()
        self.console.print(Rule(style="dim"), width=RULE_WIDTH)
        self.console.print(format_tool_start(event))

    def tool_end(self, event: ToolEnd) -> None:
        self.console.print(format_tool_end(event))
        self.console.print(Rule(style="dim"), width=RULE_WIDTH)
        self.console.print()
        # the model is called again with the tool result
        self.start_spinner()

    def error(self, event: ErrorEvent) -> None:
        self.stop_spinner()
        self.console.print(format_error(event))

    def file_new_content(self, event: FileNewContent) -> None:
        self.console.print(Text(event.text, style="green"))

    def file_update_content(self, event: FileUpdateContent) -> None:
        self.console.print(format_diff(event.old_str, event.new_str))

    def token_usage(self, event: TokenUsage) -> None:
        self.console.print(format_token_usage(event))

    def system_closed(self, event: SystemClosed) -> None:
        self.stop_spinner()
        self.console.print(format_system_closed(event))

    def info(self, message: str, style: str = "dim") -> None:
        self.console.print(Text(message, style=style))

    def exception(self, exc: BaseException) -> None:
        self.stop_spinner()
        self.console.print(Text.assemble(("Error: ", "bold red"), str(exc) or type(exc).__name__))
