from __future__ import annotations
import asyncio
import os
import re
import stat
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..base import BaseTool, ToolContext, ToolSpec
from ...util.fs import expand_path, read_text, split_lines

MODES = ("Line", "Directory", "Search", "Full")
DEFAULT_CONTEXT_LINES = 2


def _owner(st: os.stat_result) -> tuple[str, str]:
    try:
        import grp
        import pwd
    except ImportError:  # windows
        return str(st.st_uid), str(st.st_gid)
    try:
        user = pwd.getpwuid(st.st_uid).pw_name
    except KeyError:
        user = str(st.st_uid)
    try:
        group = grp.getgrgid(st.st_gid).gr_name
    except KeyError:
        group = str(st.st_gid)
    return user, group


def _long_entry(p: Path, name: str) -> str:
    st = p.lstat()
    user, group = _owner(st)
    mtime = time.strftime("%b %d %H:%M", time.localtime(st.st_mtime))
    line = f"{stat.filemode(st.st_mode)} {st.st_nlink:>3} {user} {group} {st.st_size:>8} {mtime} {name}"
    if p.is_symlink():
        line += f" -> {os.readlink(p)}"
    return line


def list_long(directory: Path) -> str:
    """`ls -la` style listing: one line per entry, dot entries first."""
    names = sorted(os.listdir(directory))
    lines = [f"total {len(names)}"]
    lines.append(_long_entry(directory, "."))
    lines.append(_long_entry(directory / "..", ".."))
    for name in names:
        try:
            lines.append(_long_entry(directory / name, name))
        except OSError:
            continue
    return "\n".join(lines) + "\n"


def list_files(directory: Path, depth: int) -> str:
    """Files under `directory` at most `depth` levels down (`find -maxdepth N -type f`)."""
    out: list[str] = []
    base_depth = len(directory.parts)
    for root, dirs, files in os.walk(directory):
        level = len(Path(root).parts) - base_depth + 1
        if level >= depth:
            dirs[:] = []
        if level > depth:
            continue
        dirs.sort()
        for f in sorted(files):
            out.append(str(Path(root) / f))
    return "\n".join(out) + ("\n" if out else "")


def select_lines(lines: list[str], start_line: int, end_line: int) -> str:
    n = len(lines)
    if start_line < 0:
        start_line = n + start_line + 1
    if end_line < 0:
        end_line = n + end_line + 1
    start_line = max(1, start_line)
    end_line = min(n, end_line)
    return "\n".join(lines[start_line - 1:end_line])


def search_lines(lines: list[str], rx: re.Pattern[str], context_lines: int) -> str:
    results: list[str] = []
    for i, line in enumerate(lines):
        if not rx.search(line):
            continue
        if results:
            results.append("--")
        lo = max(0, i - context_lines)
        hi = min(len(lines) - 1, i + context_lines)
        for j in range(lo, hi + 1):
            marker = "> " if j == i else "  "
            results.append(f"{marker}{j + 1}: {lines[j]}")
    return "\n".join(results) if results else "No matches found"


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class FsReadTool(BaseTool):
    spec: ToolSpec = ToolSpec(
        name="fs_read",
        display_name="File System Reader",
        description=(
            "Tool for reading files (for example, `cat -n`) and directories (for example, `ls -la`). "
            "The behavior of this tool is determined by the `mode` parameter."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "Path to the file or directory. The path should be absolute, or otherwise start with ~ for the user's home.",
                },
                "mode": {
                    "type": "string",
                    "enum": list(MODES),
                    "description": "The mode to run in: `Line`, `Directory`, `Search`, `Full`. `Line`, `Search`, and `Full` are only for text files, and `Directory` is only for directories.",
                },
                "start_line": {
                    "type": "integer",
                    "default": 1,
                    "description": "Starting line number (optional, for Line mode). A negative index represents a line number starting from the end of the file.",
                },
                "end_line": {
                    "type": "integer",
                    "default": -1,
                    "description": "Ending line number (optional, for Line mode). A negative index represents a line number starting from the end of the file.",
                },
                "depth": {
                    "type": "integer",
                    "description": "Depth of a recursive directory listing (optional, for Directory mode)",
                },
                "pattern": {
                    "type": "string",
                    "description": "Pattern to search for (required, for Search mode). Case insensitive. The pattern matching is performed per line.",
                },
                "context_lines": {
                    "type": "integer",
                    "default": DEFAULT_CONTEXT_LINES,
                    "description": "Number of context lines around search results (optional, for Search mode)",
                },
            },
            "required": ["path", "mode"],
        },
    )

    def display_action(self, params: dict[str, Any]) -> str:
        path = params.get("path")
        mode = params.get("mode")
        if mode == "Line":
            return f"Reading file: {path}"
        if mode == "Directory":
            return f"Listing directory: {path}"
        if mode == "Search":
            return f'Searching in file: {path} for "{params.get("pattern")}"'
        if mode == "Full":
            return f"Reading entire file: {path}"
        return f"Reading: {path}"

    async def execute(self, params: dict[str, Any], ctx: ToolContext | None = None) -> str:
        try:
            return await asyncio.to_thread(self._read, params)
        except Exception as e:
            return f"Error: {e}"

    def _read(self, params: dict[str, Any]) -> str:
        raw_path = params.get("path")
        mode = params.get("mode")
        if not isinstance(raw_path, str) or not raw_path:
            return "Error: path parameter is required"
        if mode not in MODES:
            return f"Error: Invalid mode specified: {mode!r} (expected one of {', '.join(MODES)})"

        p = expand_path(raw_path)
        if not os.path.lexists(p):
            return f"Path '{raw_path}' does not exist yet"

        if mode == "Directory":
            if not p.is_dir():
                return f"Path '{raw_path}' is not a directory"
            depth = params.get("depth")
            # depth 0 / absent means a flat listing
            if depth:
                return list_files(p, _as_int(depth, "depth"))
            return list_long(p)

        if not p.is_file():
            return f"Path '{raw_path}' is not a file"

        content = read_text(p)
        if mode == "Full":
            return content

        lines = split_lines(content)
        if mode == "Line":
            start_line = params.get("start_line")
            end_line = params.get("end_line")
            if not start_line:
                return 'Error: Line mode must include a "start_line" key with a non-zero number'
            if not end_line:
                return 'Error: Line mode must include a "end_line" key with a non-zero number'
            return select_lines(lines, _as_int(start_line, "start_line"), _as_int(end_line, "end_line"))

        # Search
        pattern = params.get("pattern")
        if not pattern:
            return "Search pattern is required for Search mode"
        try:
            rx = re.compile(str(pattern), re.IGNORECASE)
        except re.error as e:
            return f"Error: Invalid search pattern {pattern!r}: {e}"
        context_lines = params.get("context_lines")
        context_lines = DEFAULT_CONTEXT_LINES if context_lines is None else max(0, _as_int(context_lines, "context_lines"))
        return search_lines(lines, rx, context_lines)
