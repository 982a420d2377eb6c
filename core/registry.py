"""Tool registry: registers ChainScout's actions and looks them up.

Lookup works by tool name or by any of the tool's similes, so hosts that
emit ``QUERY_BALANCE`` reach the ``query_balance`` tool.
"""

from __future__ import annotations

from typing import Any

from core.balance.networks import NetworkRegistry
from core.config import Config
from tools.base import BaseTool


class ToolRegistry:
    """Central registry for all available tools."""

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        """Register a tool instance."""
        self._tools[tool.name] = tool

    def get(self, name: str) -> BaseTool | None:
        """Look up a tool by name or simile."""
        tool = self._tools.get(name)
        if tool is not None:
            return tool
        return next((t for t in self._tools.values() if t.answers_to(name)), None)

    def list_tools(self) -> list[dict[str, Any]]:
        """Return tool schemas in OpenAI function-calling format for LLM."""
        return [tool.to_llm_schema() for tool in self._tools.values()]

    def load_builtin_tools(
        self, config: Config, router: Any, networks: NetworkRegistry
    ) -> None:
        """Instantiate and register all built-in tools."""
        from tools.balance.query_tool import BalanceQueryTool

        self.register(BalanceQueryTool(config, router, networks))
