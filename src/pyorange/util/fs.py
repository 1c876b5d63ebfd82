from __future__ import annotations
import os
from pathlib import Path

class FsError(RuntimeError):
    pass

def expand_path(path_str: str) -> Path:
    # Only a leading "~" is expanded, joined onto HOME; everything else is used as given.
    if path_str.startswith("~"):
        home = os.environ.get("HOME") or str(Path.home())
        return Path(os.path.join(home, path_str[1:].lstrip("/")))
    return Path(path_str)

def read_text(path: Path) -> str:
    # Raw bytes: line endings come back exactly as stored.
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise FsError(f"File is not valid UTF-8 text: {path}") from e

def write_text(path: Path, content: str) -> None:
    path.write_text(content, encoding="utf-8", newline="")

def split_lines(content: str) -> list[str]:
    """Split on "\\n" without producing a phantom last line for a trailing newline."""
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return lines

def join_lines(lines: list[str], trailing_newline: bool) -> str:
    out = "\n".join(lines)
    if trailing_newline and lines:
        out += "\n"
    return out
