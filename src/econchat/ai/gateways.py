"""Model gateways: one adapter per provider behind a single ``generate`` operation.

Histories and tool definitions are provider-neutral (Anthropic-shaped dicts);
each gateway converts them to its SDK's wire format and converts the response
back into a :class:`GatewayResponse`. Provider errors are translated into
:class:`GatewayError` / :class:`TransientGatewayError`. SDK-side retries are
disabled; retrying is the caller's decision.
"""

from __future__ import annotations

import json
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx

from econchat.ai.tools.base import ToolInvocation
from econchat.config import AnthropicConfig, GeminiConfig, ModelConfig
from econchat.core.types import GatewayRole
from econchat.errors import GatewayError, TransientGatewayError
from econchat.log import get_logger

logger = get_logger(__name__)

ANTHROPIC_TRANSIENT_STATUS = frozenset({503, 529})
GEMINI_TRANSIENT_STATUS = frozenset({503})


@dataclass
class GatewayResponse:
    """Unified response from any model provider."""

    text: str = ""
    tool_invocations: list[ToolInvocation] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    raw: Any = None  # provider-specific response object

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_invocations)

    def assistant_message(self) -> dict[str, Any]:
        """The neutral assistant message that records this response in history."""
        if not self.tool_invocations:
            return {"role": "assistant", "content": self.text}
        blocks: list[dict[str, Any]] = []
        if self.text:
            blocks.append({"type": "text", "text": self.text})
        for inv in self.tool_invocations:
            blocks.append({"type": "tool_use", "id": inv.id, "name": inv.name, "input": dict(inv.arguments)})
        return {"role": "assistant", "content": blocks}


class ModelGateway(ABC):
    """A configured model on one provider."""

    provider: str = ""

    def __init__(self, role: GatewayRole, model_config: ModelConfig):
        self.role = role
        self.model_config = model_config

    @property
    def model(self) -> str:
        return self.model_config.model

    @abstractmethod
    async def generate(
        self,
        history: list[dict[str, Any]],
        system: str,
        tools: list[dict[str, Any]] | None = None,
        allow_tool_calls: bool = True,
    ) -> GatewayResponse:
        """Send ``history`` to the model.

        ``tools=None`` sends no tool definitions. ``allow_tool_calls=False`` keeps
        the definitions (needed when history holds tool blocks) but forbids new calls.
        """
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(role={self.role.value}, model={self.model})"


class AnthropicGateway(ModelGateway):
    """Anthropic Messages API backend using the official SDK."""

    provider = "anthropic"

    def __init__(
        self,
        role: GatewayRole,
        model_config: ModelConfig,
        config: AnthropicConfig,
        client: Any = None,
    ):
        super().__init__(role, model_config)
        if client is None:
            import anthropic

            client = anthropic.AsyncAnthropic(
                api_key=config.api_key,
                base_url=config.base_url,
                max_retries=0,
                timeout=config.timeout,
            )
        self._client = client

    async def generate(
        self,
        history: list[dict[str, Any]],
        system: str,
        tools: list[dict[str, Any]] | None = None,
        allow_tool_calls: bool = True,
    ) -> GatewayResponse:
        import anthropic

        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.model_config.max_tokens,
            "system": system,
            "messages": [_to_anthropic_message(m) for m in history],
            "temperature": self.model_config.temperature,
        }
        if tools:
            kwargs["tools"] = tools
            if not allow_tool_calls:
                kwargs["tool_choice"] = {"type": "none"}

        logger.debug("api_request", provider=self.provider, model=self.model, message_count=len(history))
        try:
            response = await self._client.messages.create(**kwargs)
        except anthropic.APIStatusError as e:
            raise _status_error(self.provider, e.status_code, str(e), ANTHROPIC_TRANSIENT_STATUS) from e
        except anthropic.APIError as e:
            raise GatewayError(str(e), provider=self.provider) from e

        texts: list[str] = []
        invocations: list[ToolInvocation] = []
        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "tool_use":
                invocations.append(ToolInvocation(id=block.id, name=block.name, arguments=dict(block.input or {})))

        logger.debug(
            "api_response",
            provider=self.provider,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            stop_reason=response.stop_reason,
        )
        return GatewayResponse(
            text="\n".join(texts),
            tool_invocations=invocations,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            raw=response,
        )


def _to_anthropic_message(message: dict[str, Any]) -> dict[str, Any]:
    content = message["content"]
    if isinstance(content, str):
        return {"role": message["role"], "content": content}
    blocks = []
    for block in content:
        if block.get("type") == "tool_result":
            # "name" is kept in history for providers that key results by function name
            block = {k: v for k, v in block.items() if k != "name"}
        blocks.append(block)
    return {"role": message["role"], "content": blocks}


class GeminiGateway(ModelGateway):
    """Google Gemini backend using the google-genai SDK (async client)."""

    provider = "gemini"

    def __init__(
        self,
        role: GatewayRole,
        model_config: ModelConfig,
        config: GeminiConfig,
        client: Any = None,
    ):
        super().__init__(role, model_config)
        if client is None:
            from google import genai
            from google.genai import types

            client = genai.Client(
                api_key=config.api_key,
                http_options=types.HttpOptions(timeout=config.timeout * 1000),
            )
        self._client = client

    async def generate(
        self,
        history: list[dict[str, Any]],
        system: str,
        tools: list[dict[str, Any]] | None = None,
        allow_tool_calls: bool = True,
    ) -> GatewayResponse:
        from google.genai import errors, types

        config_kwargs: dict[str, Any] = {
            "system_instruction": system,
            "max_output_tokens": self.model_config.max_tokens,
            "temperature": self.model_config.temperature,
        }
        if tools:
            config_kwargs["tools"] = [
                types.Tool(
                    function_declarations=[
                        types.FunctionDeclaration(
                            name=t["name"],
                            description=t["description"],
                            parameters_json_schema=t["input_schema"],
                        )
                        for t in tools
                    ]
                )
            ]
            if not allow_tool_calls:
                config_kwargs["tool_config"] = types.ToolConfig(
                    function_calling_config=types.FunctionCallingConfig(mode="NONE")
                )

        logger.debug("api_request", provider=self.provider, model=self.model, message_count=len(history))
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=to_gemini_contents(history),
                config=types.GenerateContentConfig(**config_kwargs),
            )
        except errors.APIError as e:
            raise _gemini_error(e) from e
        except httpx.HTTPError as e:
            # transport failures (timeouts, resets) are not wrapped by the SDK
            raise GatewayError(str(e) or type(e).__name__, provider=self.provider) from e

        return parse_gemini_response(response)


def to_gemini_contents(history: list[dict[str, Any]]) -> list[Any]:
    """Convert neutral messages into ``types.Content`` objects."""
    from google.genai import types

    contents = []
    for message in history:
        role = "model" if message["role"] == "assistant" else "user"
        content = message["content"]
        if isinstance(content, str):
            parts = [types.Part(text=content)]
        else:
            parts = []
            for block in content:
                match block.get("type"):
                    case "text":
                        parts.append(types.Part(text=block["text"]))
                    case "tool_use":
                        parts.append(
                            types.Part(
                                function_call=types.FunctionCall(
                                    id=block["id"], name=block["name"], args=block.get("input") or {}
                                )
                            )
                        )
                    case "tool_result":
                        parts.append(
                            types.Part.from_function_response(
                                name=block["name"],
                                response={"error" if block.get("is_error") else "result": _decode(block["content"])},
                            )
                        )
        contents.append(types.Content(role=role, parts=parts))
    return contents


def parse_gemini_response(response: Any) -> GatewayResponse:
    texts: list[str] = []
    invocations: list[ToolInvocation] = []
    candidates = getattr(response, "candidates", None) or []
    parts = []
    if candidates and candidates[0].content is not None:
        parts = candidates[0].content.parts or []
    for part in parts:
        fc = getattr(part, "function_call", None)
        if fc is not None and fc.name:
            call_id = fc.id or f"call_{uuid.uuid4().hex[:12]}"
            invocations.append(ToolInvocation(id=call_id, name=fc.name, arguments=dict(fc.args or {})))
        elif getattr(part, "text", None) and not getattr(part, "thought", False):
            texts.append(part.text)

    meta = getattr(response, "usage_metadata", None)
    input_tokens = (getattr(meta, "prompt_token_count", 0) or 0) if meta else 0
    output_tokens = (getattr(meta, "candidates_token_count", 0) or 0) if meta else 0
    logger.debug(
        "api_response",
        provider="gemini",
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        function_calls=len(invocations),
    )
    return GatewayResponse(
        text="".join(texts),
        tool_invocations=invocations,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        raw=response,
    )


def _decode(content: Any) -> Any:
    if not isinstance(content, str):
        return content
    try:
        return json.loads(content)
    except ValueError:
        return content


def _gemini_error(e: Any) -> GatewayError:
    if getattr(e, "status", None) == "UNAVAILABLE":
        return TransientGatewayError(str(e), provider="gemini", status_code=getattr(e, "code", None))
    return _status_error("gemini", getattr(e, "code", None), str(e), GEMINI_TRANSIENT_STATUS)


def _status_error(provider: str, status_code: Optional[int], message: str, transient: frozenset[int]) -> GatewayError:
    if status_code in transient:
        return TransientGatewayError(message, provider=provider, status_code=status_code)
    return GatewayError(message, provider=provider, status_code=status_code)
