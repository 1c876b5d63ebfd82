from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_dir

from .models import AppConfig, ProviderSettings

APP_NAME = "pyorange"

_ENV_PATTERN = re.compile(r"\$\{(\w+)\}")


class ConfigError(ValueError):
    pass


def _candidate_paths(cwd: Path) -> list[Path]:
    # project-level first, then the per-user config dir
    return [
        cwd / "pyorange.yaml",
        cwd / ".pyorange.yaml",
        Path(user_config_dir(APP_NAME)) / "pyorange.yaml",
    ]


def expand_env_placeholders(s: str) -> str:
    def repl(m: re.Match) -> str:
        var = m.group(1)
        val = os.getenv(var)
        if not val:
            raise ConfigError(f"Placeholder '${{{var}}}' not found in environment or is empty.")
        return val

    return _ENV_PATTERN.sub(repl, s)


def _load_yaml(p: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config {p}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {p} must be a YAML mapping.")
    return data


def _int(data: dict[str, Any], key: str, default: int) -> int:
    v = data.get(key, default)
    if isinstance(v, bool) or not isinstance(v, int) or v <= 0:
        raise ConfigError(f"'{key}' must be a positive integer, got {v!r}")
    return v


def _bool(data: dict[str, Any], key: str, default: bool) -> bool:
    v = data.get(key, default)
    if not isinstance(v, bool):
        raise ConfigError(f"'{key}' must be true or false, got {v!r}")
    return v


def find_config(cwd: Path, explicit_path: Path | None = None) -> Path | None:
    if explicit_path is not None:
        p = explicit_path.expanduser().resolve()
        if not p.is_file():
            raise ConfigError(f"Config file not found: {p}")
        return p
    for p in _candidate_paths(cwd):
        if p.is_file():
            return p
    return None


def parse_config(data: dict[str, Any]) -> AppConfig:
    cfg = AppConfig()

    prov = data.get("provider") or {}
    if not isinstance(prov, dict):
        raise ConfigError("'provider' must be a mapping with base_url / api_key.")
    base_url = str(prov.get("base_url") or os.getenv("PYORANGE_BASE_URL") or "").strip()
    api_key = str(prov.get("api_key") or os.getenv("PYORANGE_API_KEY") or "").strip()
    cfg.provider = ProviderSettings(
        base_url=expand_env_placeholders(base_url),
        api_key=expand_env_placeholders(api_key),
        timeout=_int(prov, "timeout", 120),
    )

    model = data.get("model")
    if model is not None:
        if not isinstance(model, str):
            raise ConfigError(f"'model' must be a string, got {model!r}")
        cfg.model = model.strip() or None

    cfg.max_steps = _int(data, "max_steps", cfg.max_steps)
    cfg.max_tool_result_chars = _int(data, "max_tool_result_chars", cfg.max_tool_result_chars)
    cfg.accept_all = _bool(data, "accept_all", cfg.accept_all)
    cfg.trace = _bool(data, "trace", cfg.trace)

    pats = data.get("confirm_patterns") or []
    if not isinstance(pats, list) or not all(isinstance(p, str) for p in pats):
        raise ConfigError("'confirm_patterns' must be a list of regular expressions.")
    for p in pats:
        try:
            re.compile(p)
        except re.error as e:
            raise ConfigError(f"Invalid confirm pattern {p!r}: {e}") from e
    cfg.confirm_patterns = list(pats)
    return cfg


def load_app_config(*, cwd: Path, explicit_path: Path | None = None) -> AppConfig:
    """Load pyorange.yaml.

    Lookup: explicit path, then ./pyorange.yaml, ./.pyorange.yaml, then the
    user config dir. A missing file gives defaults plus PYORANGE_* env vars.
    """
    path = find_config(cwd, explicit_path)
    data = _load_yaml(path) if path is not None else {}
    cfg = parse_config(data)
    cfg.loaded_from = path
    return cfg
