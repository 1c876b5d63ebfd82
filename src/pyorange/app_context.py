from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config.models import AppConfig
from .events.store import EventStore
from .llm.catalog import ModelChoice
from .llm.factory import resolve_provider
from .project_context import build_project_context
from .runner import AgentRuntime
from .tools.builtin import build_registry
from .tools.permissions import ConfirmationGate
from .tools.policy import CommandPolicy
from .tools.registry import ToolRegistry


@dataclass
class AppContext:
    cwd: Path
    config: AppConfig
    model: ModelChoice
    tools: ToolRegistry
    gate: ConfirmationGate
    runtime: AgentRuntime
    events: EventStore | None = None

    @staticmethod
    async def create(*, cwd: Path, config: AppConfig, model: ModelChoice) -> "AppContext":
        policy = CommandPolicy.default().extended(config.confirm_patterns)
        tools = build_registry(policy)
        gate = ConfirmationGate(accept_all=config.accept_all)
        provider = resolve_provider(config.provider, model)
        events = EventStore.open(enabled=config.trace)

        system_prompt = await build_project_context(cwd)
        runtime = AgentRuntime(
            provider,
            tools,
            gate,
            system_prompt=system_prompt,
            events=events,
            max_steps=config.max_steps,
            max_tool_result_chars=config.max_tool_result_chars,
            cwd=str(cwd),
        )
        return AppContext(
            cwd=cwd,
            config=config,
            model=model,
            tools=tools,
            gate=gate,
            runtime=runtime,
            events=events,
        )
