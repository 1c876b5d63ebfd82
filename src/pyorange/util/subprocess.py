from __future__ import annotations
import asyncio
import os
import shutil
from dataclasses import dataclass
from typing import Optional

@dataclass
class CmdResult:
    returncode: int
    stdout: str
    stderr: str

def _shell() -> str | None:
    if os.name == "nt":
        return None
    return shutil.which("bash") or shutil.which("sh")

async def run_shell(command: str, cwd: Optional[str] = None) -> CmdResult:
    """Run `command` through a shell and wait for it to finish.

    Spawn failures are reported as a CmdResult with returncode 1 (or the OS
    errno) and the error text on stderr; nothing is raised.
    """
    try:
        proc = await asyncio.create_subprocess_shell(
            command,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            executable=_shell(),
        )
    except OSError as e:
        return CmdResult(e.errno or 1, "", str(e))
    out, err = await proc.communicate()
    return CmdResult(
        proc.returncode if proc.returncode is not None else 1,
        out.decode("utf-8", errors="replace"),
        err.decode("utf-8", errors="replace"),
    )
