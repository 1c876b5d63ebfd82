from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable

# Case-sensitive, searched anywhere in the raw command text.
DEFAULT_DESTRUCTIVE_PATTERNS: tuple[str, ...] = (
    r"\brm\s+(-[rf]+\s+)?/",   # rm on a rooted path
    r"\bdd\b",
    r"\bmkfs\b",
    r"\bformat\b",
    r"\bsudo\b",
    r"\bchmod\b.*777",
    r"\bshred\b",
    r"\bwipe\b",
    r"\bkill\b.*-9",
    r"\bpkill\b",
    r"\btruncate\b",
)


@dataclass(frozen=True)
class CommandPolicy:
    """Heuristic detection of destructive shell commands.

    A match means the command must be confirmed by a human before it runs.
    False negatives are expected; the list targets common dangerous idioms.
    """

    patterns: tuple[str, ...] = DEFAULT_DESTRUCTIVE_PATTERNS
    _compiled: tuple[re.Pattern[str], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        compiled = []
        for p in self.patterns:
            try:
                compiled.append(re.compile(p))
            except re.error as e:
                raise ValueError(f"Invalid destructive-command pattern {p!r}: {e}") from e
        object.__setattr__(self, "_compiled", tuple(compiled))

    @staticmethod
    def default() -> "CommandPolicy":
        return CommandPolicy()

    def extended(self, extra: Iterable[str]) -> "CommandPolicy":
        extra = [p for p in extra if p and p not in self.patterns]
        return CommandPolicy(patterns=self.patterns + tuple(extra))

    def matching(self, command: str) -> list[str]:
        return [rx.pattern for rx in self._compiled if rx.search(command)]

    def is_destructive(self, command: str) -> bool:
        return any(rx.search(command) for rx in self._compiled)
