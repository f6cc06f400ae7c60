"""Running call and cost counters per gateway tier."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from econchat.config import ModelsConfig
from econchat.core.types import GatewayRole

PER_MILLION = 1_000_000


@dataclass(frozen=True, slots=True)
class TokenRate:
    """USD per single token."""

    input: float
    output: float

    @classmethod
    def per_million(cls, input_cost: float, output_cost: float) -> TokenRate:
        return cls(input=input_cost / PER_MILLION, output=output_cost / PER_MILLION)

    def cost(self, input_tokens: int, output_tokens: int) -> float:
        return input_tokens * self.input + output_tokens * self.output


@dataclass(frozen=True, slots=True)
class UsageSnapshot:
    calls: Mapping[str, int]
    tool_calls: int
    total_cost: float

    def to_dict(self) -> dict:
        return {
            "calls": dict(self.calls),
            "tool_calls": self.tool_calls,
            "total_cost": round(self.total_cost, 6),
        }


@dataclass
class UsageTracker:
    """Additive counters; one instance per application, shared by reference."""

    rates: Mapping[str, TokenRate]
    _calls: dict[str, int] = field(default_factory=dict)
    _tool_calls: int = 0
    _total_cost: float = 0.0

    @classmethod
    def from_config(cls, models: ModelsConfig) -> UsageTracker:
        rates = {}
        for role in GatewayRole:
            cfg = models.for_role(role)
            rates[role.value] = TokenRate.per_million(cfg.input_cost_per_mtok, cfg.output_cost_per_mtok)
        return cls(rates=rates)

    def cost_of(self, tier: str, input_tokens: int, output_tokens: int) -> float:
        rate = self.rates.get(str(tier))
        if rate is None:
            raise KeyError(f"No token rate configured for tier '{tier}'")
        return rate.cost(input_tokens, output_tokens)

    def record(self, tier: str, input_tokens: int, output_tokens: int) -> float:
        """Count one model call and add its cost. Returns the cost added."""
        key = str(tier)
        cost = self.cost_of(key, input_tokens, output_tokens)
        self._calls[key] = self._calls.get(key, 0) + 1
        self._total_cost += cost
        return cost

    def record_tool_call(self) -> None:
        self._tool_calls += 1

    def snapshot(self) -> UsageSnapshot:
        calls = {key: self._calls.get(key, 0) for key in self.rates}
        calls.update(self._calls)
        return UsageSnapshot(
            calls=MappingProxyType(calls),
            tool_calls=self._tool_calls,
            total_cost=self._total_cost,
        )

    def reset(self) -> None:
        self._calls.clear()
        self._tool_calls = 0
        self._total_cost = 0.0
