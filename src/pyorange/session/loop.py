from __future__ import annotations

from typing import Awaitable, Callable

from rich.text import Text

from ..events.types import EventType, SystemClosed, ToolConfirmation
from ..runner import AgentRuntime
from ..tools.permissions import is_affirmative
from .render import Renderer, format_confirmation

QUIT_COMMAND = "/quit"
PROMPT = Text("\n> ", style="cyan")

LineReader = Callable[[str | Text], Awaitable[str]]


class SessionClosed(Exception):
    """The agent runtime reported systemClosed; the loop must stop."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class SessionLoop:
    """Read a line, hand it to the runtime, render what comes back.

    The loop owns the terminal. It subscribes the renderer to every event
    type and answers `toolConfirmation` by asking the user.
    """

    def __init__(self, runtime: AgentRuntime, renderer: Renderer, read_line: LineReader | None = None):
        self.runtime = runtime
        self.renderer = renderer
        self.read_line: LineReader = read_line or renderer.ask
        self._subscribe()

    def _subscribe(self) -> None:
        r = self.renderer
        self.runtime.on({
            EventType.USER_SENT: r.user_sent,
            EventType.ASSISTANT_RECEIVE: r.assistant_receive,
            EventType.TOOL_START: r.tool_start,
            EventType.TOOL_END: r.tool_end,
            EventType.TOOL_CONFIRMATION: self.confirm,
            EventType.ERROR: r.error,
            EventType.FILE_NEW_CONTENT: r.file_new_content,
            EventType.FILE_UPDATE_CONTENT: r.file_update_content,
            EventType.TOKEN_USAGE: r.token_usage,
            EventType.SYSTEM_CLOSED: self.closed,
        })

    async def confirm(self, event: ToolConfirmation) -> None:
        try:
            answer = await self.read_line(format_confirmation(event))
        except (EOFError, KeyboardInterrupt):
            answer = ""
        approved = is_affirmative(answer)
        self.runtime.handle_tool_confirmation(event.tool_use_id, approved)
        if not approved:
            self.renderer.start_spinner()

    def closed(self, event: SystemClosed) -> None:
        self.renderer.system_closed(event)
        raise SessionClosed(event.reason)

    async def quit(self) -> int:
        self.renderer.info("Goodbye!", style="")
        try:
            await self.runtime.shutdown()
        except SessionClosed:
            pass
        return 0

    async def handle_line(self, line: str) -> bool:
        """Dispatch one input line; returns False once the session is over."""
        if line.strip().lower() == QUIT_COMMAND:
            return False
        if not line.strip():
            return True
        try:
            await self.runtime.run(line)
        except SessionClosed:
            raise
        except Exception as e:
            # A failed turn is reported; the session keeps going.
            self.renderer.exception(e)
        return True

    async def run(self) -> int:
        """Run until /quit, end of input or systemClosed; returns the exit status."""
        while True:
            try:
                line = await self.read_line(PROMPT)
            except (EOFError, KeyboardInterrupt):
                return await self.quit()
            try:
                keep_going = await self.handle_line(line)
            except SessionClosed:
                return 0
            if not keep_going:
                return await self.quit()
