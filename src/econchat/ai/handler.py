"""Request handler: query -> tier -> tool phase -> (premium analysis) -> answer."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from econchat.ai.gateways import ModelGateway
from econchat.ai.prompts import (
    NO_ANSWER_TEXT,
    PREMIUM_SYSTEM_PROMPT,
    STANDARD_SYSTEM_PROMPT,
    TOOL_SYSTEM_PROMPT,
    premium_context,
    premium_user_message,
)
from econchat.ai.retry import NO_RETRY, RetryPolicy
from econchat.ai.tool_runner import ModelCall, ToolLoopResult, run_tool_loop
from econchat.ai.tools.definitions import sources_for_tools
from econchat.ai.tools.registry import ToolRegistry
from econchat.charts.models import ChartData
from econchat.charts.normalizer import normalize
from econchat.config import OrchestrationConfig
from econchat.core.classifier import explain
from econchat.core.session import ConversationManager
from econchat.core.types import GatewayRole, Tier
from econchat.core.usage import UsageTracker
from econchat.errors import AnswerError
from econchat.log import get_logger, request_context

logger = get_logger(__name__)


@dataclass
class ChatAnswer:
    answer_text: str
    tools_used: list[str]
    charts: list[ChartData]
    tier_used: Tier
    model_identifier: str
    estimated_cost: float
    latency_ms: int
    sources: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "response": self.answer_text,
            "toolsUsed": list(self.tools_used),
            "charts": [c.to_dict() for c in self.charts],
            "tierUsed": self.tier_used.value,
            "modelUsed": self.model_identifier,
            "estimatedCost": round(self.estimated_cost, 6),
            "latencyMs": self.latency_ms,
            "sources": list(self.sources),
        }


@dataclass
class _Draft:
    text: str
    model: str
    loop: Optional[ToolLoopResult] = None
    calls: list[ModelCall] = field(default_factory=list)


class ChatHandler:
    """Handles the full flow for one question within a session."""

    def __init__(
        self,
        gateways: Mapping[GatewayRole, ModelGateway],
        registry: ToolRegistry,
        conversations: ConversationManager,
        usage: UsageTracker,
        settings: OrchestrationConfig | None = None,
        retry: RetryPolicy | None = None,
    ):
        missing = [role.value for role in GatewayRole if role not in gateways]
        if missing:
            raise ValueError(f"Missing gateways for roles: {', '.join(missing)}")
        self._gateways = dict(gateways)
        self._registry = registry
        self._conversations = conversations
        self._usage = usage
        self._settings = settings or OrchestrationConfig()
        self._retry = retry or RetryPolicy(
            max_attempts=self._settings.retry_max_attempts,
            base_delay_ms=self._settings.retry_base_delay_ms,
        )

    @property
    def gateways(self) -> dict[GatewayRole, ModelGateway]:
        return dict(self._gateways)

    async def answer(
        self,
        query: str,
        session_key: str,
        tier_override: Optional[Tier] = None,
        tools_enabled: bool = True,
    ) -> ChatAnswer:
        """Answer ``query`` in the context of ``session_key``.

        Raises :class:`AnswerError` with a single message on any failure; the
        session history is left untouched in that case.
        """
        with request_context(session_key=session_key):
            try:
                return await self._answer(query, session_key, tier_override, tools_enabled)
            except AnswerError:
                raise
            except Exception as e:
                logger.error("answer_failed", error=str(e), error_type=type(e).__name__)
                raise AnswerError(str(e) or type(e).__name__) from e

    async def _answer(
        self,
        query: str,
        session_key: str,
        tier_override: Optional[Tier],
        tools_enabled: bool,
    ) -> ChatAnswer:
        started = time.monotonic()
        text = (query or "").strip()
        if not text:
            raise AnswerError("Query must not be empty.")

        if tier_override is not None:
            tier = Tier(tier_override)
            logger.info("query_classified", tier=tier.value, override=True)
        else:
            verdict = explain(text)
            tier = verdict.tier
            logger.info(
                "query_classified",
                tier=tier.value,
                premium_score=verdict.premium_score,
                standard_score=verdict.standard_score,
                rules=list(verdict.matched),
            )

        prior = await self._conversations.history(session_key)

        if tools_enabled:
            draft = await self._tool_phase(prior, text)
            if tier is Tier.PREMIUM:
                draft = await self._premium_analysis(prior, text, draft)
        else:
            draft = await self._direct(prior, text, tier)

        loop = draft.loop
        outcomes = loop.outcomes if loop else []
        tools_used = loop.tools_used if loop else []
        charts = normalize(outcomes, text)

        cost = 0.0
        for call in draft.calls:
            cost += self._usage.record(call.role, call.input_tokens, call.output_tokens)
        for _ in outcomes:
            self._usage.record_tool_call()

        answer_text = draft.text or NO_ANSWER_TEXT
        await self._conversations.record_exchange(session_key, text, answer_text)

        latency_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "answer_completed",
            tier=tier.value,
            model=draft.model,
            tools=tools_used,
            charts=len(charts),
            cost=round(cost, 6),
            latency_ms=latency_ms,
        )
        return ChatAnswer(
            answer_text=answer_text,
            tools_used=tools_used,
            charts=charts,
            tier_used=tier,
            model_identifier=draft.model,
            estimated_cost=cost,
            latency_ms=latency_ms,
            sources=sources_for_tools(tools_used),
        )

    async def _tool_phase(self, prior: list[dict[str, Any]], text: str) -> _Draft:
        """Standard gateway with retry; on failure one wholesale rerun on the fallback gateway."""
        history = [*prior, {"role": "user", "content": text}]
        try:
            loop = await self._run_loop(self._gateways[GatewayRole.STANDARD], history, self._retry)
        except Exception as e:
            logger.warning(
                "standard_phase_failed",
                error=str(e),
                error_type=type(e).__name__,
                status_code=getattr(e, "status_code", None),
            )
            loop = await self._run_loop(self._gateways[GatewayRole.FALLBACK], history, NO_RETRY)
        return _Draft(text=loop.text, model=loop.model, loop=loop, calls=list(loop.calls))

    async def _run_loop(self, gateway: ModelGateway, history: list[dict[str, Any]], retry: RetryPolicy) -> ToolLoopResult:
        return await run_tool_loop(
            gateway,
            self._registry,
            history,
            TOOL_SYSTEM_PROMPT,
            max_iterations=self._settings.max_tool_iterations,
            retry=retry,
            tool_timeout=self._settings.tool_timeout,
        )

    async def _premium_analysis(self, prior: list[dict[str, Any]], text: str, draft: _Draft) -> _Draft:
        """Tool-free Premium call over the collected data; degrades to the draft on failure."""
        gateway = self._gateways[GatewayRole.PREMIUM]
        outcomes = draft.loop.outcomes if draft.loop else []
        content = premium_user_message(text, premium_context(outcomes, draft.text))
        history = [*prior, {"role": "user", "content": content}]
        try:
            response = await self._retry.run(lambda: gateway.generate(history, PREMIUM_SYSTEM_PROMPT, None))
        except Exception as e:
            logger.warning(
                "premium_analysis_failed",
                error=str(e),
                error_type=type(e).__name__,
                status_code=getattr(e, "status_code", None),
            )
            return draft

        call = ModelCall(
            role=gateway.role,
            model=gateway.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )
        return _Draft(text=response.text, model=gateway.model, loop=draft.loop, calls=[*draft.calls, call])

    async def _direct(self, prior: list[dict[str, Any]], text: str, tier: Tier) -> _Draft:
        """Single tool-free call on the tier's own gateway. Errors propagate."""
        if tier is Tier.PREMIUM:
            gateway, system = self._gateways[GatewayRole.PREMIUM], PREMIUM_SYSTEM_PROMPT
        else:
            gateway, system = self._gateways[GatewayRole.STANDARD], STANDARD_SYSTEM_PROMPT
        history = [*prior, {"role": "user", "content": text}]
        response = await self._retry.run(lambda: gateway.generate(history, system, None))
        call = ModelCall(
            role=gateway.role,
            model=gateway.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
        )
        return _Draft(text=response.text, model=gateway.model, calls=[call])

    async def reset_session(self, session_key: str) -> None:
        await self._conversations.reset(session_key)
