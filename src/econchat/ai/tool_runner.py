"""Iterative tool execution loop over a model gateway."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from econchat.ai.gateways import GatewayResponse, ModelGateway
from econchat.ai.prompts import SUMMARY_INSTRUCTION
from econchat.ai.retry import NO_RETRY, RetryPolicy
from econchat.ai.tools.base import ToolOutcome
from econchat.ai.tools.registry import DEFAULT_TOOL_TIMEOUT, ToolRegistry
from econchat.core.types import GatewayRole
from econchat.log import get_logger

logger = get_logger(__name__)

MAX_TOOL_ROUNDS = 10


@dataclass(frozen=True, slots=True)
class ModelCall:
    """Token usage of one completed gateway call."""

    role: GatewayRole
    model: str
    input_tokens: int
    output_tokens: int


@dataclass
class ToolLoopResult:
    text: str
    model: str
    outcomes: list[ToolOutcome] = field(default_factory=list)
    calls: list[ModelCall] = field(default_factory=list)
    messages: list[dict[str, Any]] = field(default_factory=list)
    hit_cap: bool = False

    @property
    def tools_used(self) -> list[str]:
        """Distinct invoked tool names in first-call order."""
        return list(dict.fromkeys(o.tool for o in self.outcomes))

    @property
    def model_calls(self) -> int:
        return len(self.calls)


async def run_tool_loop(
    gateway: ModelGateway,
    registry: ToolRegistry,
    history: list[dict[str, Any]],
    system: str,
    max_iterations: int = MAX_TOOL_ROUNDS,
    retry: RetryPolicy = NO_RETRY,
    tool_timeout: float = DEFAULT_TOOL_TIMEOUT,
) -> ToolLoopResult:
    """Call the model until it answers without tools, or the iteration cap is hit.

    At most ``max_iterations`` tool-enabled calls are made. On reaching the cap
    one more call is made with tool calls forbidden, asking the model to answer
    from what it already has. ``history`` is not modified.
    """
    messages = list(history)
    tool_defs = registry.api_definitions() or None
    result = ToolLoopResult(text="", model=gateway.model, messages=messages)

    async def _generate(allow_tool_calls: bool = True) -> GatewayResponse:
        response = await retry.run(
            lambda: gateway.generate(messages, system, tool_defs, allow_tool_calls=allow_tool_calls)
        )
        result.calls.append(
            ModelCall(
                role=gateway.role,
                model=gateway.model,
                input_tokens=response.input_tokens,
                output_tokens=response.output_tokens,
            )
        )
        return response

    for rounds in range(max_iterations):
        response = await _generate()

        if not response.wants_tools:
            messages.append(response.assistant_message())
            result.text = response.text
            return result

        messages.append(response.assistant_message())
        invocations = response.tool_invocations
        logger.info(
            "tool_round",
            gateway=gateway.role.value,
            round=rounds + 1,
            tools=[inv.name for inv in invocations],
        )

        # Execute tool calls concurrently; dispatch never raises
        outcomes = await asyncio.gather(*(registry.dispatch(inv, timeout=tool_timeout) for inv in invocations))
        result.outcomes.extend(outcomes)
        messages.append({"role": "user", "content": [o.to_result_block() for o in outcomes]})

    logger.warning("tool_loop_iteration_cap", gateway=gateway.role.value, max_iterations=max_iterations)
    _append_summary_instruction(messages)
    # tool definitions stay in the request; providers reject tool blocks without them
    response = await _generate(allow_tool_calls=False)
    messages.append({"role": "assistant", "content": response.text})
    result.text = response.text
    result.hit_cap = True
    return result


def _append_summary_instruction(messages: list[dict[str, Any]]) -> None:
    instruction = {"type": "text", "text": SUMMARY_INSTRUCTION}
    if messages and messages[-1]["role"] == "user":
        last = messages[-1]
        content = last["content"]
        if isinstance(content, str):
            content = [{"type": "text", "text": content}]
        messages[-1] = {"role": "user", "content": [*content, instruction]}
    else:
        messages.append({"role": "user", "content": [instruction]})
