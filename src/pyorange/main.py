from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from .app_context import AppContext
from .config.loader import ConfigError, load_app_config
from .config.models import AppConfig
from .llm.catalog import ModelChoice, resolve_model
from .llm.openai_compat import ProviderError
from .session.loop import SessionLoop
from .session.render import Renderer

app = typer.Typer(add_completion=False, help="pyorange: chat with a local coding agent.")
console = Console(highlight=False)


@app.callback()
def _main() -> None:
    """pyorange command line."""


def _resolve_cwd(cwd: Path | None) -> Path:
    cwd = Path(str(cwd or Path.cwd())).expanduser().resolve()
    if not cwd.is_dir():
        raise typer.BadParameter(f"--cwd must be an existing directory, got: {cwd}")
    return cwd


def select_model(name: str | None) -> ModelChoice:
    choice, recognized = resolve_model(name)
    if recognized:
        console.print(f"[dim]Using {choice.label} model[/dim]")
    else:
        console.print(f"[red]Unknown model: {name}, using default {choice.label}[/red]")
    return choice


async def _chat(cwd: Path, config: AppConfig, model: ModelChoice) -> int:
    ctx = await AppContext.create(cwd=cwd, config=config, model=model)
    renderer = Renderer(console)
    loop = SessionLoop(ctx.runtime, renderer)
    console.print("[blue]Chat session initialized[/blue]")
    if ctx.events is not None and ctx.events.enabled:
        console.print(f"[dim]session {ctx.events.session_id} · log {ctx.events.path}[/dim]")
    return await loop.run()


@app.command()
def chat(
    model: str = typer.Option(None, "--model", "-m", help="Model: premier, micro, lite, claude-3-5, claude-3-7, claude-3."),
    config: Path = typer.Option(None, "--config", help="pyorange.yaml path (default: ./pyorange.yaml, then the user config dir)."),
    cwd: Path = typer.Option(None, "--cwd", help="Project directory. Defaults to the current directory."),
    yes: bool = typer.Option(False, "--yes", help="Run flagged commands without asking for confirmation."),
    max_steps: int = typer.Option(None, "--max-steps", help="Max model/tool iterations per message."),
):
    """Start an interactive chat session. Type /quit to leave."""
    cwd = _resolve_cwd(cwd)
    console.print("Welcome to pyorange")
    console.print("[dim]Starting up....[/dim]")

    try:
        cfg = load_app_config(cwd=cwd, explicit_path=config)
    except ConfigError as e:
        console.print(f"[red]Config error:[/red] {e}")
        raise typer.Exit(code=1)
    if yes:
        cfg.accept_all = True
    if max_steps is not None:
        cfg.max_steps = max_steps

    choice = select_model(model or cfg.model)
    try:
        code = asyncio.run(_chat(cwd, cfg, choice))
    except ProviderError as e:
        console.print(f"[red]Provider error:[/red] {e}")
        raise typer.Exit(code=1)
    raise typer.Exit(code=code)


if __name__ == "__main__":
    app()
