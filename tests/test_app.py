import sys

import pytest

from conftest import FakeProvider, ScriptedGateway, text_response

from econchat.__main__ import main
from econchat.ai.gateways import AnthropicGateway, GeminiGateway
from econchat.ai.tools.definitions import ALL_TOOLS
from econchat.app import EconChatApp, load_provider
from econchat.config import AnthropicConfig, AppConfig, GeminiConfig, StorageConfig, ToolsConfig
from econchat.core.types import GatewayRole


def fake_gateways():
    return {role: ScriptedGateway(role, f"{role.value}-model") for role in GatewayRole}


class TestEconChatApp:
    async def test_answer_and_usage(self):
        gateways = fake_gateways()
        gateways[GatewayRole.STANDARD].script.append(text_response("GDP is output."))
        app = EconChatApp(AppConfig(), provider=FakeProvider(), gateways=gateways)
        await app.start()

        answer = await app.answer("What is GDP?")

        assert answer.answer_text == "GDP is output."
        assert app.usage().calls["standard"] == 1
        app.reset_usage()
        assert app.usage().total_cost == 0.0
        await app.stop()
        assert app.provider.closed

    async def test_sqlite_backend(self, tmp_path):
        config = AppConfig(storage=StorageConfig(backend="sqlite", db_path=str(tmp_path / "db" / "econchat.db")))
        gateways = fake_gateways()
        gateways[GatewayRole.STANDARD].script.extend([text_response("One."), text_response("Two.")])
        app = EconChatApp(config, provider=FakeProvider(), gateways=gateways)
        await app.start()

        await app.answer("What is GDP?", "s1")
        await app.answer("And inflation?", "s1")
        assert len(await app.conversations.history("s1")) == 4
        await app.reset_session("s1")
        assert await app.conversations.history("s1") == []

        await app.stop()
        assert (tmp_path / "db" / "econchat.db").exists()

    def test_enabled_tool_subset(self):
        config = AppConfig(tools=ToolsConfig(enabled=["imf_get_weo_data", "owid_get_chart_data"]))
        app = EconChatApp(config, provider=FakeProvider(), gateways=fake_gateways())
        assert app.tool_registry.names() == ["imf_get_weo_data", "owid_get_chart_data"]

    def test_all_tools_by_default(self):
        app = EconChatApp(AppConfig(), provider=FakeProvider(), gateways=fake_gateways())
        assert len(app.tool_registry) == len(ALL_TOOLS)

    def test_unknown_enabled_tool(self):
        config = AppConfig(tools=ToolsConfig(enabled=["imf_get_weo_data", "fred_get_series"]))
        with pytest.raises(ValueError, match="fred_get_series"):
            EconChatApp(config, provider=FakeProvider(), gateways=fake_gateways())

    def test_unknown_storage_backend(self):
        with pytest.raises(ValueError, match="redis"):
            EconChatApp(AppConfig(storage=StorageConfig(backend="redis")), provider=FakeProvider(), gateways=fake_gateways())

    def test_gateway_needs_provider_section(self):
        with pytest.raises(ValueError, match="anthropic"):
            EconChatApp(AppConfig(), provider=FakeProvider())

    def test_gateways_built_from_config(self):
        config = AppConfig(anthropic=AnthropicConfig(api_key="test"), gemini=GeminiConfig(api_key="test"))
        app = EconChatApp(config, provider=FakeProvider())
        assert isinstance(app.gateways[GatewayRole.PREMIUM], AnthropicGateway)
        assert isinstance(app.gateways[GatewayRole.STANDARD], GeminiGateway)
        assert app.gateways[GatewayRole.FALLBACK].model == "claude-sonnet-4-20250514"


class TestLoadProvider:
    def test_loads_factory(self):
        assert isinstance(load_provider("conftest:FakeProvider"), FakeProvider)

    @pytest.mark.parametrize("path", [None, "", "conftest", "conftest:"])
    def test_malformed_path(self, path):
        with pytest.raises(ValueError):
            load_provider(path)

    def test_wrong_type(self):
        with pytest.raises(TypeError):
            load_provider("collections:OrderedDict")


class TestCli:
    def test_tools_listing(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["econchat", "tools"])
        main()
        out = capsys.readouterr().out
        assert "World Bank" in out
        assert "comtrade_get_top_partners" in out

    def test_examples(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["econchat", "examples"])
        main()
        assert "Nigeria" in capsys.readouterr().out

    def test_missing_config_exits(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "argv", ["econchat", "config-check", "-c", str(tmp_path / "nope.yaml")])
        with pytest.raises(SystemExit) as info:
            main()
        assert info.value.code == 1
