"""Tool registry: the enabled catalog plus dispatch to the Data Tool Provider."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

from econchat.ai.tools.base import DataToolProvider, ToolInvocation, ToolOutcome, ToolSpec
from econchat.errors import UnknownToolError
from econchat.log import get_logger

logger = get_logger(__name__)

DEFAULT_TOOL_TIMEOUT = 30.0


class ToolRegistry:
    """Registry of the tools the model may call in this process."""

    def __init__(self, provider: DataToolProvider, specs: Iterable[ToolSpec] = ()):
        self._tools: dict[str, ToolSpec] = {}
        self._provider = provider
        for spec in specs:
            self.register(spec)

    def register(self, spec: ToolSpec) -> None:
        self._tools[spec.name] = spec
        logger.debug("tool_registered", tool_name=spec.name)

    def get(self, name: str) -> ToolSpec | None:
        return self._tools.get(name)

    def all_tools(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    def api_definitions(self) -> list[dict[str, Any]]:
        return [spec.to_api_dict() for spec in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    async def dispatch(self, invocation: ToolInvocation, timeout: float = DEFAULT_TOOL_TIMEOUT) -> ToolOutcome:
        """Run one invocation. Every failure mode is captured in the returned outcome."""
        name = invocation.name
        if name not in self._tools:
            error = str(UnknownToolError(name))
            logger.warning("unknown_tool", tool=name)
            return ToolOutcome(tool=name, error=error, invocation_id=invocation.id)

        try:
            result = await asyncio.wait_for(
                self._provider.execute(name, dict(invocation.arguments)),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.error("tool_execution_error", tool=name, error="timeout", timeout=timeout)
            return ToolOutcome(
                tool=name,
                error=f"{name} timed out after {timeout:g} seconds",
                invocation_id=invocation.id,
            )
        except Exception as e:
            logger.error("tool_execution_error", tool=name, error=str(e))
            return ToolOutcome(tool=name, error=f"Error executing {name}: {e}", invocation_id=invocation.id)

        if isinstance(result, dict) and "error" in result:
            logger.info("tool_reported_error", tool=name, error=str(result["error"]))
            return ToolOutcome(tool=name, error=str(result["error"]), invocation_id=invocation.id)

        return ToolOutcome(tool=name, result=result, invocation_id=invocation.id)

    async def close(self) -> None:
        await self._provider.close()
