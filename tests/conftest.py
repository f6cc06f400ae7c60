"""Shared fakes: scripted model gateways and an in-process data tool provider."""

from __future__ import annotations

import copy
from typing import Any, Callable, Union

import pytest

from econchat.ai.gateways import GatewayResponse, ModelGateway
from econchat.ai.retry import RetryPolicy
from econchat.ai.tools.base import DataToolProvider, ToolInvocation
from econchat.ai.tools.definitions import ALL_TOOLS
from econchat.ai.tools.registry import ToolRegistry
from econchat.config import ModelConfig, ModelsConfig
from econchat.core.session import ConversationManager, InMemorySessionStore
from econchat.core.types import GatewayRole
from econchat.core.usage import UsageTracker

ScriptItem = Union[GatewayResponse, Exception, Callable[[list, Any], GatewayResponse]]


def text_response(text: str, input_tokens: int = 100, output_tokens: int = 50) -> GatewayResponse:
    return GatewayResponse(text=text, input_tokens=input_tokens, output_tokens=output_tokens)


def tool_response(*calls: tuple[str, dict], text: str = "", input_tokens: int = 100, output_tokens: int = 20) -> GatewayResponse:
    invocations = [ToolInvocation(id=f"call_{i}_{name}", name=name, arguments=args) for i, (name, args) in enumerate(calls)]
    return GatewayResponse(text=text, tool_invocations=invocations, input_tokens=input_tokens, output_tokens=output_tokens)


class ScriptedGateway(ModelGateway):
    """Replays a fixed list of responses (or raises scripted errors) and records every call."""

    provider = "fake"

    def __init__(self, role: GatewayRole, model: str, script: list[ScriptItem] | None = None):
        super().__init__(role, ModelConfig(provider="fake", model=model))
        self.script = list(script or [])
        self.calls: list[dict[str, Any]] = []

    async def generate(self, history, system, tools=None, allow_tool_calls=True):
        self.calls.append(
            {
                "history": copy.deepcopy(history),
                "system": system,
                "tools": tools,
                "allow_tool_calls": allow_tool_calls,
            }
        )
        if not self.script:
            raise AssertionError(f"{self.model}: unexpected call #{len(self.calls)}")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(history, tools)
        return item


class FakeProvider(DataToolProvider):
    """Maps tool names to canned results; an Exception value is raised, a callable is called."""

    def __init__(self, results: dict[str, Any] | None = None, default: Any = None):
        self.results = dict(results or {})
        self.default = default
        self.calls: list[tuple[str, dict]] = []
        self.closed = False

    async def execute(self, tool_name, arguments):
        self.calls.append((tool_name, dict(arguments)))
        value = self.results.get(tool_name, self.default)
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return await value(arguments)
        return value

    async def close(self):
        self.closed = True


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fast_retry(sleep) -> RetryPolicy:
    return RetryPolicy(max_attempts=3, base_delay_ms=1000, sleep=sleep)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def registry(provider) -> ToolRegistry:
    return ToolRegistry(provider, ALL_TOOLS)


@pytest.fixture
def usage() -> UsageTracker:
    return UsageTracker.from_config(ModelsConfig())


@pytest.fixture
def conversations() -> ConversationManager:
    return ConversationManager(InMemorySessionStore())


@pytest.fixture
def gateways() -> dict[GatewayRole, ScriptedGateway]:
    return {
        GatewayRole.PREMIUM: ScriptedGateway(GatewayRole.PREMIUM, "premium-model"),
        GatewayRole.STANDARD: ScriptedGateway(GatewayRole.STANDARD, "standard-model"),
        GatewayRole.FALLBACK: ScriptedGateway(GatewayRole.FALLBACK, "fallback-model"),
    }
