from __future__ import annotations

from .registry import ToolRegistry
from .policy import CommandPolicy

from .builtin_tools.bash_tool import BashTool
from .builtin_tools.file_read import FsReadTool
from .builtin_tools.file_write import FsWriteTool

def register_builtin_tools(registry: ToolRegistry, policy: CommandPolicy | None = None) -> None:
    registry.register(BashTool(policy=policy or CommandPolicy.default()))
    registry.register(FsReadTool())
    registry.register(FsWriteTool())

def build_registry(policy: CommandPolicy | None = None) -> ToolRegistry:
    registry = ToolRegistry()
    register_builtin_tools(registry, policy)
    return registry
