"""System prompt assembly: environment, project metadata and file tree."""
from __future__ import annotations

import json
import platform
import tomllib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .rules.resolver import combine_rules, load_rules
from .util.subprocess import run_shell

IGNORE_DIRS = {"node_modules", ".git", "dist", "build", "coverage", "__pycache__", ".venv", ".mypy_cache", ".pytest_cache"}
TREE_DEPTH = 2
MAX_DEPENDENCIES = 5

STYLE_GUIDELINES = """# Style guidelines
- Be concise and direct in your responses
- Prioritize actionable information over general explanations
"""


def build_file_tree(directory: Path, depth: int, level: int = 0) -> str:
    if depth <= 0:
        return ""
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError:
        return ""
    out = []
    prefix = "  " * level
    for p in entries:
        try:
            is_dir = p.is_dir()
        except OSError:
            continue
        if is_dir:
            if p.name in IGNORE_DIRS:
                continue
            out.append(f"{prefix}- 📁 {p.name}/\n")
            out.append(build_file_tree(p, depth - 1, level + 1))
        else:
            out.append(f"{prefix}- 📄 {p.name}\n")
    return "".join(out)


def _pyproject_info(cwd: Path) -> dict[str, Any] | None:
    p = cwd / "pyproject.toml"
    if not p.is_file():
        return None
    try:
        data = tomllib.loads(p.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return None
    proj = data.get("project") or {}
    deps = [str(d) for d in (proj.get("dependencies") or [])]
    return {
        "name": proj.get("name"),
        "version": proj.get("version"),
        "description": proj.get("description"),
        "dependencies": deps[:MAX_DEPENDENCIES],
    }


def _package_json_info(cwd: Path) -> dict[str, Any] | None:
    p = cwd / "package.json"
    if not p.is_file():
        return None
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    deps = data.get("dependencies") or {}
    return {
        "name": data.get("name"),
        "version": data.get("version"),
        "description": data.get("description"),
        "dependencies": [f"{k}: {v}" for k, v in list(deps.items())[:MAX_DEPENDENCIES]],
    }


def project_info_section(cwd: Path) -> str:
    info = _pyproject_info(cwd) or _package_json_info(cwd)
    if info is None:
        return ""
    text = "\n# Project Information\n"
    text += f"- Project name: {info.get('name')}\n"
    text += f"- Project version: {info.get('version')}\n"
    text += f"- Description: {info.get('description') or 'No description'}\n"
    if info["dependencies"]:
        text += "\n## Key Dependencies\n"
        text += "".join(f"- {d}\n" for d in info["dependencies"])
    return text


async def git_branch(cwd: Path) -> str | None:
    res = await run_shell("git branch --show-current", cwd=str(cwd))
    if res.returncode != 0:
        return None
    return res.stdout.strip() or None


async def build_project_context(cwd: Path, *, now: datetime | None = None, config_dir: Path | None = None) -> str:
    try:
        now = now or datetime.now(timezone.utc)
        context = "# System Context\n"
        context += f"- Operating System: {platform.system().lower()}\n"
        context += f"- Current Directory: {cwd}\n\n"

        branch = await git_branch(cwd)
        if branch:
            context += f"Git branch: {branch}\n"

        context += project_info_section(cwd)
        context += "\n# Project Structure\n"
        context += build_file_tree(cwd, TREE_DEPTH)

        rules = combine_rules(load_rules(cwd=cwd, config_dir=config_dir))
        if rules:
            context += "\n# Project Rules\n" + rules + "\n"

        context += "\n" + STYLE_GUIDELINES
        context += f"\n# Current date and time (UTC)\n{now.strftime('%Y-%m-%d')}\n"
        return context
    except Exception:
        return "Failed to build project context."
