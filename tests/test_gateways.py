from types import SimpleNamespace
from unittest.mock import AsyncMock

import anthropic
import httpx
import pytest
from google.genai import types

from econchat.ai.gateways import (
    AnthropicGateway,
    GatewayResponse,
    GeminiGateway,
    _gemini_error,
    _to_anthropic_message,
    parse_gemini_response,
    to_gemini_contents,
)
from econchat.ai.tools.base import ToolInvocation
from econchat.ai.tools.definitions import ALL_TOOLS
from econchat.config import AnthropicConfig, GeminiConfig, ModelConfig
from econchat.core.types import GatewayRole
from econchat.errors import GatewayError, TransientGatewayError

TOOL_HISTORY = [
    {"role": "user", "content": "GDP growth in Nigeria?"},
    {
        "role": "assistant",
        "content": [
            {"type": "text", "text": "Fetching."},
            {"type": "tool_use", "id": "t1", "name": "imf_get_weo_data", "input": {"indicator": "NGDP_RPCH"}},
        ],
    },
    {
        "role": "user",
        "content": [
            {
                "type": "tool_result",
                "tool_use_id": "t1",
                "name": "imf_get_weo_data",
                "content": '[{"country": "NGA", "year": 2024, "value": 3.1}]',
                "is_error": False,
            }
        ],
    },
]


def anthropic_gateway(client):
    return AnthropicGateway(
        GatewayRole.FALLBACK,
        ModelConfig(provider="anthropic", model="claude-sonnet-4-20250514"),
        AnthropicConfig(api_key="test"),
        client=client,
    )


def anthropic_client(response=None, error=None):
    create = AsyncMock(return_value=response, side_effect=error)
    return SimpleNamespace(messages=SimpleNamespace(create=create))


def gemini_gateway(generate):
    return GeminiGateway(
        GatewayRole.STANDARD,
        ModelConfig(provider="gemini", model="gemini-2.5-flash"),
        GeminiConfig(api_key="test"),
        client=SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate))),
    )


def status_error(code):
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return anthropic.APIStatusError("status error", response=httpx.Response(code, request=request), body=None)


class TestGatewayResponse:
    def test_text_only_assistant_message(self):
        assert GatewayResponse(text="hi").assistant_message() == {"role": "assistant", "content": "hi"}

    def test_tool_assistant_message_keeps_text_and_calls(self):
        response = GatewayResponse(
            text="Let me check.",
            tool_invocations=[ToolInvocation(id="a", name="wb_list_countries", arguments={})],
        )
        message = response.assistant_message()
        assert message["content"] == [
            {"type": "text", "text": "Let me check."},
            {"type": "tool_use", "id": "a", "name": "wb_list_countries", "input": {}},
        ]


class TestAnthropicGateway:
    def test_tool_result_name_is_stripped(self):
        message = _to_anthropic_message(TOOL_HISTORY[2])
        assert "name" not in message["content"][0]
        assert message["content"][0]["tool_use_id"] == "t1"
        assert "name" in TOOL_HISTORY[2]["content"][0]

    async def test_parses_text_tool_calls_and_usage(self):
        response = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text="Checking the IMF."),
                SimpleNamespace(type="tool_use", id="tu_1", name="imf_get_weo_data", input={"indicator": "PCPIPCH"}),
            ],
            usage=SimpleNamespace(input_tokens=120, output_tokens=30),
            stop_reason="tool_use",
        )
        client = anthropic_client(response)
        gateway = anthropic_gateway(client)
        tools = [spec.to_api_dict() for spec in ALL_TOOLS]

        result = await gateway.generate(TOOL_HISTORY, "system prompt", tools)

        assert result.text == "Checking the IMF."
        assert result.tool_invocations == [ToolInvocation(id="tu_1", name="imf_get_weo_data", arguments={"indicator": "PCPIPCH"})]
        assert (result.input_tokens, result.output_tokens) == (120, 30)
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4-20250514"
        assert kwargs["system"] == "system prompt"
        assert kwargs["tools"] == tools
        assert "tool_choice" not in kwargs

    async def test_tools_omitted_when_disabled(self):
        response = SimpleNamespace(
            content=[SimpleNamespace(type="text", text="Final.")],
            usage=SimpleNamespace(input_tokens=1, output_tokens=1),
            stop_reason="end_turn",
        )
        client = anthropic_client(response)
        await anthropic_gateway(client).generate(TOOL_HISTORY[:1], "s", None)
        assert "tools" not in client.messages.create.await_args.kwargs

    async def test_summary_call_keeps_tools_but_forbids_calls(self):
        response = SimpleNamespace(
            content=[SimpleNamespace(type="text", text="Summary.")],
            usage=SimpleNamespace(input_tokens=1, output_tokens=1),
            stop_reason="end_turn",
        )
        client = anthropic_client(response)
        tools = [spec.to_api_dict() for spec in ALL_TOOLS]

        await anthropic_gateway(client).generate(TOOL_HISTORY, "s", tools, allow_tool_calls=False)

        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["tools"] == tools
        assert kwargs["tool_choice"] == {"type": "none"}

    @pytest.mark.parametrize("code", [503, 529])
    async def test_overload_is_transient(self, code):
        gateway = anthropic_gateway(anthropic_client(error=status_error(code)))
        with pytest.raises(TransientGatewayError) as info:
            await gateway.generate(TOOL_HISTORY[:1], "s")
        assert info.value.status_code == code
        assert info.value.provider == "anthropic"

    @pytest.mark.parametrize("code", [400, 401, 500])
    async def test_other_status_is_fatal(self, code):
        gateway = anthropic_gateway(anthropic_client(error=status_error(code)))
        with pytest.raises(GatewayError) as info:
            await gateway.generate(TOOL_HISTORY[:1], "s")
        assert not isinstance(info.value, TransientGatewayError)


class TestGeminiConversion:
    def test_roles_and_parts(self):
        contents = to_gemini_contents(TOOL_HISTORY)
        assert [c.role for c in contents] == ["user", "model", "user"]
        assert contents[0].parts[0].text == "GDP growth in Nigeria?"
        call = contents[1].parts[1].function_call
        assert (call.name, call.args) == ("imf_get_weo_data", {"indicator": "NGDP_RPCH"})
        fr = contents[2].parts[0].function_response
        assert fr.name == "imf_get_weo_data"
        assert fr.response == {"result": [{"country": "NGA", "year": 2024, "value": 3.1}]}

    def test_error_results_are_keyed_as_error(self):
        history = [
            {
                "role": "user",
                "content": [
                    {"type": "tool_result", "tool_use_id": "x", "name": "fao_search_items", "content": "Error: down", "is_error": True}
                ],
            }
        ]
        fr = to_gemini_contents(history)[0].parts[0].function_response
        assert fr.response == {"error": "Error: down"}

    def test_parse_function_calls_and_usage(self):
        response = SimpleNamespace(
            candidates=[
                SimpleNamespace(
                    content=SimpleNamespace(
                        parts=[
                            SimpleNamespace(text="Looking up.", function_call=None, thought=None),
                            SimpleNamespace(
                                text=None,
                                function_call=SimpleNamespace(id=None, name="owid_get_chart_data", args={"chart_slug": "life-expectancy"}),
                            ),
                        ]
                    )
                )
            ],
            usage_metadata=SimpleNamespace(prompt_token_count=200, candidates_token_count=15),
        )
        result = parse_gemini_response(response)
        assert result.text == "Looking up."
        assert len(result.tool_invocations) == 1
        inv = result.tool_invocations[0]
        assert inv.name == "owid_get_chart_data"
        assert inv.arguments == {"chart_slug": "life-expectancy"}
        assert inv.id
        assert (result.input_tokens, result.output_tokens) == (200, 15)

    def test_parse_empty_response(self):
        result = parse_gemini_response(SimpleNamespace(candidates=[], usage_metadata=None))
        assert result.text == ""
        assert result.tool_invocations == []
        assert (result.input_tokens, result.output_tokens) == (0, 0)

    def test_error_translation(self):
        assert isinstance(_gemini_error(SimpleNamespace(code=503, status="UNAVAILABLE")), TransientGatewayError)
        assert isinstance(_gemini_error(SimpleNamespace(code=None, status="UNAVAILABLE")), TransientGatewayError)
        fatal = _gemini_error(SimpleNamespace(code=400, status="INVALID_ARGUMENT"))
        assert not isinstance(fatal, TransientGatewayError)
        assert fatal.status_code == 400


class TestGeminiGateway:
    async def test_generate_sends_declarations(self):
        response = SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(text="Done.", function_call=None)]))],
            usage_metadata=SimpleNamespace(prompt_token_count=5, candidates_token_count=2),
        )
        generate = AsyncMock(return_value=response)
        client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))
        gateway = GeminiGateway(
            GatewayRole.STANDARD,
            ModelConfig(provider="gemini", model="gemini-2.5-flash", max_tokens=8192),
            GeminiConfig(api_key="test"),
            client=client,
        )
        tools = [spec.to_api_dict() for spec in ALL_TOOLS]

        result = await gateway.generate(TOOL_HISTORY[:1], "system prompt", tools)

        assert result.text == "Done."
        kwargs = generate.await_args.kwargs
        assert kwargs["model"] == "gemini-2.5-flash"
        config = kwargs["config"]
        assert config.system_instruction == "system prompt"
        assert config.max_output_tokens == 8192
        declarations = config.tools[0].function_declarations
        assert [d.name for d in declarations] == [s.name for s in ALL_TOOLS]

    async def test_summary_call_sets_function_calling_mode_none(self):
        response = SimpleNamespace(
            candidates=[SimpleNamespace(content=SimpleNamespace(parts=[SimpleNamespace(text="Summary.", function_call=None)]))],
            usage_metadata=None,
        )
        generate = AsyncMock(return_value=response)
        gateway = gemini_gateway(generate)
        tools = [spec.to_api_dict() for spec in ALL_TOOLS]

        await gateway.generate(TOOL_HISTORY, "s", tools, allow_tool_calls=False)
        config = generate.await_args.kwargs["config"]
        assert config.tools[0].function_declarations
        assert config.tool_config.function_calling_config.mode == types.FunctionCallingConfigMode.NONE

        await gateway.generate(TOOL_HISTORY[:1], "s", tools)
        assert generate.await_args.kwargs["config"].tool_config is None

    async def test_transport_timeout_is_a_fatal_gateway_error(self):
        gateway = gemini_gateway(AsyncMock(side_effect=httpx.ReadTimeout("timed out")))
        with pytest.raises(GatewayError) as info:
            await gateway.generate(TOOL_HISTORY[:1], "s")
        assert not isinstance(info.value, TransientGatewayError)
        assert info.value.provider == "gemini"
        assert isinstance(info.value.__cause__, httpx.ReadTimeout)
