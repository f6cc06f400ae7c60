"""Application orchestrator - wires all components and manages lifecycle."""

from __future__ import annotations

import importlib
from typing import Optional

from econchat.ai.gateways import AnthropicGateway, GeminiGateway, ModelGateway
from econchat.ai.handler import ChatAnswer, ChatHandler
from econchat.ai.tools.base import DataToolProvider
from econchat.ai.tools.definitions import ALL_TOOLS
from econchat.ai.tools.registry import ToolRegistry
from econchat.config import AppConfig
from econchat.core.session import ConversationManager, InMemorySessionStore, SessionStore
from econchat.core.types import GatewayRole, Tier
from econchat.core.usage import UsageSnapshot, UsageTracker
from econchat.log import get_logger
from econchat.storage.database import Database
from econchat.storage.session_repo import SqliteSessionStore

logger = get_logger(__name__)


class EconChatApp:
    """Top-level application orchestrator."""

    def __init__(
        self,
        config: AppConfig,
        provider: Optional[DataToolProvider] = None,
        gateways: Optional[dict[GatewayRole, ModelGateway]] = None,
    ):
        self.config = config
        self.db: Optional[Database] = None
        self.store = self._create_store()
        self.conversations = ConversationManager(self.store, config.orchestration.max_history_messages)
        self.usage_tracker = UsageTracker.from_config(config.models)
        self.provider = provider or load_provider(config.tools.provider)
        self.tool_registry = ToolRegistry(self.provider, self._enabled_tools())
        self.gateways = gateways or {role: self._create_gateway(role) for role in GatewayRole}
        self.handler = ChatHandler(
            gateways=self.gateways,
            registry=self.tool_registry,
            conversations=self.conversations,
            usage=self.usage_tracker,
            settings=config.orchestration,
        )

    async def start(self) -> None:
        if self.db is not None:
            await self.db.initialize()
        logger.info(
            "econchat_started",
            storage=self.config.storage.backend,
            tools=len(self.tool_registry),
            models={role.value: gw.model for role, gw in self.gateways.items()},
        )

    async def stop(self) -> None:
        await self.tool_registry.close()
        if self.db is not None:
            await self.db.close()
        logger.info("econchat_stopped")

    async def answer(
        self,
        query: str,
        session_key: str = "default",
        tier_override: Optional[Tier] = None,
        tools_enabled: bool = True,
    ) -> ChatAnswer:
        return await self.handler.answer(query, session_key, tier_override=tier_override, tools_enabled=tools_enabled)

    async def reset_session(self, session_key: str) -> None:
        await self.handler.reset_session(session_key)

    def usage(self) -> UsageSnapshot:
        return self.usage_tracker.snapshot()

    def reset_usage(self) -> None:
        self.usage_tracker.reset()
        logger.info("usage_reset")

    def _enabled_tools(self):
        enabled = self.config.tools.enabled
        if not enabled:
            return ALL_TOOLS
        known = {spec.name for spec in ALL_TOOLS}
        unknown = sorted(set(enabled) - known)
        if unknown:
            raise ValueError(f"Unknown tools in tools.enabled: {', '.join(unknown)}")
        return tuple(spec for spec in ALL_TOOLS if spec.name in enabled)

    def _create_store(self) -> SessionStore:
        match self.config.storage.backend:
            case "memory":
                return InMemorySessionStore()
            case "sqlite":
                self.db = Database(self.config.storage.db_path)
                return SqliteSessionStore(self.db)
            case _:
                raise ValueError(f"Unknown storage backend: {self.config.storage.backend}")

    def _create_gateway(self, role: GatewayRole) -> ModelGateway:
        """Create a model gateway based on the role's provider configuration."""
        model_cfg = self.config.models.for_role(role)
        match model_cfg.provider:
            case "anthropic":
                if not self.config.anthropic:
                    raise ValueError(
                        f"Model '{role.value}' uses the 'anthropic' provider but "
                        "no 'anthropic' section in config"
                    )
                return AnthropicGateway(role, model_cfg, self.config.anthropic)
            case "gemini":
                if not self.config.gemini:
                    raise ValueError(
                        f"Model '{role.value}' uses the 'gemini' provider but "
                        "no 'gemini' section in config"
                    )
                return GeminiGateway(role, model_cfg, self.config.gemini)
            case _:
                raise ValueError(f"Unknown model provider: {model_cfg.provider}")


def load_provider(path: Optional[str]) -> DataToolProvider:
    """Instantiate the Data Tool Provider named by a ``module:attribute`` path."""
    if not path:
        raise ValueError("No data tool provider configured (tools.provider)")
    module_name, sep, attr = path.partition(":")
    if not sep or not attr:
        raise ValueError(f"tools.provider must look like 'package.module:factory', got '{path}'")
    factory = getattr(importlib.import_module(module_name), attr)
    provider = factory()
    if not isinstance(provider, DataToolProvider):
        raise TypeError(f"{path} did not produce a DataToolProvider (got {type(provider).__name__})")
    return provider
