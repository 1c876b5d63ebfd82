from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class ProviderSettings:
    base_url: str = ""
    api_key: str = ""
    timeout: int = 120


@dataclass
class AppConfig:
    """Settings loaded from pyorange.yaml; CLI flags are applied on top."""

    provider: ProviderSettings = field(default_factory=ProviderSettings)
    model: str | None = None
    max_steps: int = 25
    accept_all: bool = False
    # Appended to the builtin destructive-command patterns.
    confirm_patterns: list[str] = field(default_factory=list)
    trace: bool = True
    max_tool_result_chars: int = 20000

    loaded_from: Path | None = None
