"""CLI entry point for econchat."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from econchat.ai.tools.definitions import ALL_TOOLS, SOURCE_LABELS
from econchat.app import EconChatApp
from econchat.config import AppConfig, load_config
from econchat.core.types import GatewayRole, Tier
from econchat.errors import AnswerError
from econchat.log import setup_logging

EXAMPLE_QUERIES = (
    ("Growth", "What's Nigeria's GDP growth forecast for 2024-2026?"),
    ("Agriculture", "Compare wheat production in Egypt vs Morocco 2015-2023"),
    ("Trade", "Show Saudi Arabia's top 10 export partners in 2022"),
    ("Health", "How has life expectancy changed in Bangladesh since 2000?"),
    ("Economy", "Get inflation data for Argentina from IMF"),
    ("Diagnostics", "Run a debt sustainability analysis for Niger"),
)


def _add_config_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", default="config.yaml", help="Path to config file")
    parser.add_argument("-e", "--env", default=".env", help="Path to .env file")


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="econchat",
        description="Economic data assistant: tiered LLM routing over World Bank, IMF, FAO, Comtrade and OWID tools",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ask command
    ask_parser = subparsers.add_parser("ask", help="Answer a single question")
    ask_parser.add_argument("query", help="The question to answer")
    ask_parser.add_argument("--tier", choices=[t.value for t in Tier], help="Skip classification and force a tier")
    ask_parser.add_argument("--no-tools", action="store_true", help="Answer without calling data tools")
    ask_parser.add_argument("--session", default="cli", help="Session key for conversation history")
    ask_parser.add_argument("--json", action="store_true", help="Print the full structured answer as JSON")
    _add_config_args(ask_parser)

    # chat command
    chat_parser = subparsers.add_parser("chat", help="Interactive chat session")
    chat_parser.add_argument("--session", default="cli", help="Session key for conversation history")
    _add_config_args(chat_parser)

    # config-check command
    check_parser = subparsers.add_parser("config-check", help="Validate configuration")
    _add_config_args(check_parser)

    # model-info command
    model_parser = subparsers.add_parser("model-info", help="Show configured models and rates")
    _add_config_args(model_parser)

    subparsers.add_parser("tools", help="List the data tool catalog")
    subparsers.add_parser("examples", help="Show example questions")

    args = parser.parse_args()

    match args.command:
        case "ask":
            _ask(args)
        case "chat":
            _chat(args)
        case "config-check":
            _check_config(args.config, args.env)
        case "model-info":
            _model_info(args.config, args.env)
        case "tools":
            _list_tools()
        case "examples":
            _examples()
        case _:
            parser.print_help()


def _load(config_path: str, env_path: str) -> AppConfig:
    try:
        return load_config(config_path, env_path)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Copy config.example.yaml to config.yaml and fill in your API keys")
        sys.exit(1)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)


def _check_config(config_path: str, env_path: str) -> None:
    """Validate configuration and print summary."""
    config = _load(config_path, env_path)
    print(f"Configuration valid: {config_path}")
    print(f"  Data directory: {config.data_dir}")
    for role in GatewayRole:
        model = config.models.for_role(role)
        print(f"  {role.value:<9}: {model.provider} / {model.model}")
    print(f"  Anthropic key: {'set' if config.anthropic and config.anthropic.api_key else 'missing'}")
    print(f"  Gemini key   : {'set' if config.gemini and config.gemini.api_key else 'missing'}")
    print(f"  Tool provider: {config.tools.provider or '(not configured)'}")
    print(f"  Tools enabled: {', '.join(config.tools.enabled) if config.tools.enabled else 'all'}")
    print(f"  Storage: {config.storage.backend} ({config.storage.db_path})")


def _model_info(config_path: str, env_path: str) -> None:
    """Show model and pricing information for each gateway role."""
    config = _load(config_path, env_path)
    orch = config.orchestration

    print("AI Model Configuration")
    print("=" * 50)
    for role in GatewayRole:
        model = config.models.for_role(role)
        print(f"\n  Role: {role.value}")
        print(f"    Provider: {model.provider}")
        print(f"    Model   : {model.model}")
        print(f"    Tokens  : {model.max_tokens}")
        print(f"    Temp    : {model.temperature}")
        print(f"    Cost    : ${model.input_cost_per_mtok} in / ${model.output_cost_per_mtok} out per 1M tokens")
    print(f"\n  Tool iterations: {orch.max_tool_iterations}")
    print(f"  Retry          : {orch.retry_max_attempts} attempts, base delay {orch.retry_base_delay_ms}ms")
    print(f"  History cap    : {orch.max_history_messages} messages")
    print()


def _list_tools() -> None:
    current = None
    for spec in ALL_TOOLS:
        source = SOURCE_LABELS[spec.source_prefix]
        if source != current:
            print(f"\n{source}")
            current = source
        summary = spec.description.split(". ")[0]
        print(f"  {spec.name:<28} {summary}")
    print()


def _examples() -> None:
    for category, text in EXAMPLE_QUERIES:
        print(f"  [{category}] {text}")


def _ask(args: argparse.Namespace) -> None:
    config = _load(args.config, args.env)
    setup_logging(config.log_level, config.log_format)
    tier = Tier(args.tier) if args.tier else None

    async def _async_main() -> int:
        app = EconChatApp(config)
        await app.start()
        try:
            result = await app.answer(args.query, args.session, tier_override=tier, tools_enabled=not args.no_tools)
        except AnswerError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        finally:
            await app.stop()

        if args.json:
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(result.answer_text)
            print()
            print(f"[{result.tier_used.value} | {result.model_identifier} | ${result.estimated_cost:.4f} | {result.latency_ms}ms]")
            if result.sources:
                print(f"Sources: {', '.join(result.sources)}")
            for chart in result.charts:
                print(f"Chart: {chart.kind.value} - {chart.title}")
        return 0

    sys.exit(asyncio.run(_async_main()))


def _chat(args: argparse.Namespace) -> None:
    config = _load(args.config, args.env)
    setup_logging(config.log_level, config.log_format)

    async def _async_main() -> None:
        app = EconChatApp(config)
        await app.start()
        print("EconChat - type /reset, /usage, /model or /quit")
        try:
            while True:
                try:
                    line = await asyncio.to_thread(input, "> ")
                except EOFError:
                    break
                text = line.strip()
                if not text:
                    continue

                match text.lower():
                    case "/quit" | "/exit":
                        break
                    case "/reset":
                        await app.reset_session(args.session)
                        print("Session reset. Starting fresh.")
                        continue
                    case "/usage":
                        print(json.dumps(app.usage().to_dict(), indent=2))
                        continue
                    case "/model":
                        for role, gateway in app.gateways.items():
                            print(f"  {role.value:<9} {gateway.provider} / {gateway.model}")
                        continue

                try:
                    result = await app.answer(text, args.session)
                except AnswerError as e:
                    print(f"An error occurred: {e}")
                    continue
                print(result.answer_text)
                print(f"[{result.tier_used.value} | {result.model_identifier} | tools: {', '.join(result.tools_used) or '-'}]")
        finally:
            await app.stop()

    try:
        asyncio.run(_async_main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
