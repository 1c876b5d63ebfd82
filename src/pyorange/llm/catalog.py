from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelChoice:
    key: str
    model_id: str
    label: str
    aliases: tuple[str, ...] = ()


MODELS: tuple[ModelChoice, ...] = (
    ModelChoice("premier", "us.amazon.nova-premier-v1:0", "Nova Premier"),
    ModelChoice("micro", "amazon.nova-micro-v1:0", "Nova Micro"),
    ModelChoice("lite", "amazon.nova-lite-v1:0", "Nova Lite"),
    ModelChoice("claude-3-5", "us.anthropic.claude-3-5-sonnet-20241022-v2:0", "Claude 3.5 Sonnet", ("claude35", "s35")),
    ModelChoice("claude-3-7", "us.anthropic.claude-3-7-sonnet-20250219-v1:0", "Claude 3.7 Sonnet", ("claude37", "s37")),
    ModelChoice("claude-3", "anthropic.claude-3-sonnet-20240229-v1:0", "Claude 3 Sonnet", ("claude3", "s0")),
)

DEFAULT_MODEL = "micro"


def _index() -> dict[str, ModelChoice]:
    out: dict[str, ModelChoice] = {}
    for m in MODELS:
        out[m.key] = m
        for a in m.aliases:
            out[a] = m
    return out


def get_model(name: str) -> ModelChoice | None:
    return _index().get((name or "").strip().lower())


def default_model() -> ModelChoice:
    return _index()[DEFAULT_MODEL]


def resolve_model(name: str | None) -> tuple[ModelChoice, bool]:
    """Map a --model value to a catalog entry.

    Returns (choice, recognized). An empty value selects the default and
    counts as recognized; an unknown value falls back to the default.
    """
    if not name:
        return default_model(), True
    m = get_model(name)
    if m is None:
        return default_model(), False
    return m, True


def known_names() -> list[str]:
    return sorted(_index())
