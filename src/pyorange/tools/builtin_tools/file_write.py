from __future__ import annotations
import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import BaseTool, ToolContext, ToolSpec
from ...events.types import FileNewContent, FileUpdateContent
from ...util.fs import expand_path, join_lines, read_text, split_lines, write_text

COMMANDS = ("create", "str_replace", "insert", "append")

# command -> parameters that must be present (not None) for it
_COMMAND_PARAMS: dict[str, tuple[str, ...]] = {
    "create": ("file_text",),
    "str_replace": ("old_str", "new_str"),
    "insert": ("new_str", "insert_line"),
    "append": ("new_str",),
}


class _WriteRejected(Exception):
    """Raised inside the worker thread when a command cannot be applied."""


@dataclass(frozen=True)
class _Change:
    message: str
    path: str
    old: str | None  # None: the file did not exist before
    new: str


@dataclass
class FsWriteTool(BaseTool):
    spec: ToolSpec = ToolSpec(
        name="fs_write",
        display_name="File System Writer",
        description="A tool for creating and editing files",
        parameters={
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "enum": list(COMMANDS),
                    "description": "The commands to run. Allowed options are: `create`, `str_replace`, `insert`, `append`.",
                },
                "path": {
                    "type": "string",
                    "description": "Absolute path to file or directory, e.g. `/repo/file.py` or `/repo`.",
                },
                "file_text": {
                    "type": "string",
                    "description": "Required parameter of `create` command, with the content of the file to be created.",
                },
                "old_str": {
                    "type": "string",
                    "description": "Required parameter of `str_replace` command containing the string in `path` to replace.",
                },
                "new_str": {
                    "type": "string",
                    "description": (
                        "Required parameter of `str_replace` command containing the new string. "
                        "Required parameter of `insert` command containing the string to insert. "
                        "Required parameter of `append` command containing the content to append to the file."
                    ),
                },
                "insert_line": {
                    "type": "integer",
                    "description": "Required parameter of `insert` command. The `new_str` will be inserted AFTER the line `insert_line` of `path`.",
                },
            },
            "required": ["command", "path"],
        },
    )

    def display_action(self, params: dict[str, Any]) -> str:
        path = params.get("path")
        command = params.get("command")
        if command == "create":
            return f"Creating file: {path}"
        if command == "str_replace":
            return f"Modifying file: {path}"
        if command == "insert":
            return f"Inserting into file: {path} at line {params.get('insert_line')}"
        if command == "append":
            return f"Appending to file: {path}"
        return f"Writing to: {path}"

    def preflight(self, params: dict[str, Any]) -> str | None:
        """Per-command parameter check; returns an error string or None."""
        command = params.get("command")
        if command not in _COMMAND_PARAMS:
            return f"Error: Unsupported command {command}"
        if not isinstance(params.get("path"), str) or not params["path"]:
            return "Error: path parameter is required"
        missing = [k for k in _COMMAND_PARAMS[command] if params.get(k) is None]
        if missing:
            names = " and ".join(missing)
            noun = "parameter is" if len(missing) == 1 else "parameters are"
            return f"Error: {names} {noun} required for {command} command"
        if command == "str_replace" and params["old_str"] == "":
            return "Error: old_str must not be empty for str_replace command"
        if command == "insert":
            line = params["insert_line"]
            if isinstance(line, bool) or not isinstance(line, int):
                return f"Error: insert_line must be an integer, got {line!r}"
        return None

    async def execute(self, params: dict[str, Any], ctx: ToolContext | None = None) -> str:
        err = self.preflight(params)
        if err:
            return err
        try:
            change = await asyncio.to_thread(self._apply, params)
        except Exception as e:
            return f"Error: {e}"

        if ctx is not None:
            if change.old is None:
                await ctx.publish(FileNewContent(path=change.path, text=change.new))
            else:
                await ctx.publish(FileUpdateContent(path=change.path, old_str=change.old, new_str=change.new))
        return change.message

    def _apply(self, params: dict[str, Any]) -> _Change:
        command = params["command"]
        raw_path = params["path"]
        p = expand_path(raw_path)
        p.parent.mkdir(parents=True, exist_ok=True)

        if command == "create":
            text = params["file_text"]
            write_text(p, text)
            return _Change(f"File created successfully: {raw_path}", raw_path, None, text)

        if command == "append":
            return self._append(p, raw_path, params["new_str"])

        old = self._read_existing(p, raw_path)
        if command == "str_replace":
            old_str = params["old_str"]
            if old_str not in old:
                raise _WriteRejected(f"The string to replace was not found in {raw_path}")
            new = old.replace(old_str, params["new_str"], 1)
            write_text(p, new)
            return _Change(f"File modified successfully: {raw_path}", raw_path, old, new)

        # insert
        insert_line = params["insert_line"]
        lines = split_lines(old)
        if insert_line < 0 or insert_line > len(lines):
            raise _WriteRejected(
                f"Insert line {insert_line} is out of range (file has {len(lines)} lines)"
            )
        lines.insert(insert_line, params["new_str"])
        new = join_lines(lines, trailing_newline=old.endswith("\n"))
        write_text(p, new)
        return _Change(
            f"Content inserted successfully at line {insert_line} in {raw_path}", raw_path, old, new
        )

    def _append(self, p: Path, raw_path: str, new_str: str) -> _Change:
        if not p.exists():
            write_text(p, new_str)
            return _Change(f"File created and content appended: {raw_path}", raw_path, None, new_str)
        old = self._read_existing(p, raw_path)
        chunk = new_str if (not old or old.endswith("\n")) else "\n" + new_str
        with p.open("a", encoding="utf-8", newline="") as f:
            f.write(chunk)
        return _Change(f"Content appended successfully to {raw_path}", raw_path, old, old + chunk)

    @staticmethod
    def _read_existing(p: Path, raw_path: str) -> str:
        try:
            return read_text(p)
        except Exception as e:
            raise _WriteRejected(f"Could not read file {raw_path}: {e}") from e
