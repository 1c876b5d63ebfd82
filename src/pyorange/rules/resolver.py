from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from platformdirs import user_config_dir

APP_NAME = "pyorange"


@dataclass(frozen=True)
class RuleDoc:
    scope: str  # "project" or "global"
    path: Path
    content: str


def _read_text(p: Path) -> str | None:
    try:
        if p.is_file():
            return p.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None
    return None


def _project_rule_candidates(cwd: Path) -> list[Path]:
    return [
        cwd / "AGENTS.md",
        cwd / "RULES.md",
        cwd / ".pyorange" / "AGENTS.md",
        cwd / ".pyorange" / "RULES.md",
    ]


def _global_rule_candidates(config_dir: Path | None = None) -> list[Path]:
    d = config_dir or Path(user_config_dir(APP_NAME))
    return [d / "AGENTS.md", d / "RULES.md"]


def load_rules(*, cwd: Path, config_dir: Path | None = None) -> list[RuleDoc]:
    """First readable rules file per scope; project rules come first."""
    docs: list[RuleDoc] = []
    for scope, candidates in (
        ("project", _project_rule_candidates(cwd)),
        ("global", _global_rule_candidates(config_dir)),
    ):
        for p in candidates:
            txt = _read_text(p)
            if txt and txt.strip():
                docs.append(RuleDoc(scope=scope, path=p, content=txt))
                break
    return docs


def combine_rules(docs: Iterable[RuleDoc]) -> str:
    parts: list[str] = []
    for d in docs:
        header = f"[{d.scope}] {d.path}"
        parts.append(header)
        parts.append("-" * len(header))
        parts.append(d.content.strip())
        parts.append("")
    return "\n".join(parts).strip()
