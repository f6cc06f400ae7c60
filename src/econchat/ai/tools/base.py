"""Tool definitions, invocations, outcomes and the Data Tool Provider boundary."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """One model-callable data tool. Execution happens in a :class:`DataToolProvider`."""

    name: str
    description: str
    input_schema: dict[str, Any]

    @property
    def source_prefix(self) -> str:
        return self.name.split("_", 1)[0]

    def to_api_dict(self) -> dict[str, Any]:
        """Serialize to the Anthropic tool definition format (also used as the neutral form)."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


@dataclass(frozen=True, slots=True)
class ToolInvocation:
    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ToolOutcome:
    """Result of one invocation: exactly one of ``result`` / ``error`` is meaningful."""

    tool: str
    result: Any = None
    error: Optional[str] = None
    invocation_id: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def content_text(self) -> str:
        """Model-visible serialization of the outcome."""
        if self.error is not None:
            return f"Error: {self.error}"
        return json.dumps(self.result, ensure_ascii=False, default=str)

    def to_result_block(self) -> dict[str, Any]:
        return {
            "type": "tool_result",
            "tool_use_id": self.invocation_id,
            "name": self.tool,
            "content": self.content_text(),
            "is_error": self.error is not None,
        }


class DataToolProvider(ABC):
    """External collaborator that performs one source-specific fetch per call.

    Implementations return any JSON-compatible value, or ``{"error": "..."}``
    for a structured failure. Raised exceptions are treated the same way.
    """

    @abstractmethod
    async def execute(self, tool_name: str, arguments: dict[str, Any]) -> Any:
        ...

    async def close(self) -> None:
        """Release provider resources. Default: nothing to release."""
        return None
