"""Configuration loader with YAML parsing, env-var interpolation, and Pydantic validation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from econchat.core.types import GatewayRole


class ModelConfig(BaseModel):
    provider: str  # "anthropic" | "gemini"
    model: str
    max_tokens: int = 4096
    temperature: float = 0.7
    input_cost_per_mtok: float = 0.0  # USD per million input tokens
    output_cost_per_mtok: float = 0.0


def _default_premium() -> ModelConfig:
    return ModelConfig(
        provider="anthropic",
        model="claude-opus-4-5-20251101",
        input_cost_per_mtok=15.0,
        output_cost_per_mtok=75.0,
    )


def _default_standard() -> ModelConfig:
    return ModelConfig(
        provider="gemini",
        model="gemini-2.5-flash",
        max_tokens=8192,
        input_cost_per_mtok=0.30,
        output_cost_per_mtok=2.50,
    )


def _default_fallback() -> ModelConfig:
    return ModelConfig(
        provider="anthropic",
        model="claude-sonnet-4-20250514",
        input_cost_per_mtok=3.0,
        output_cost_per_mtok=15.0,
    )


class ModelsConfig(BaseModel):
    premium: ModelConfig = Field(default_factory=_default_premium)
    standard: ModelConfig = Field(default_factory=_default_standard)
    fallback: ModelConfig = Field(default_factory=_default_fallback)

    def for_role(self, role: GatewayRole) -> ModelConfig:
        return getattr(self, role.value)


class AnthropicConfig(BaseModel):
    api_key: str
    base_url: Optional[str] = None
    timeout: int = 120


class GeminiConfig(BaseModel):
    api_key: str
    timeout: int = 120


class OrchestrationConfig(BaseModel):
    max_tool_iterations: int = 10
    max_history_messages: int = 20
    retry_max_attempts: int = 3
    retry_base_delay_ms: int = 1000
    tool_timeout: float = 30.0  # seconds, per Data Tool Provider call


class ToolsConfig(BaseModel):
    provider: Optional[str] = None  # "package.module:factory"
    enabled: list[str] = Field(default_factory=list)  # empty = every catalog tool


class StorageConfig(BaseModel):
    backend: str = "memory"  # "memory" | "sqlite"
    db_path: str = "./data/econchat.db"


class AppConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "console" | "json"
    data_dir: str = "./data"
    anthropic: Optional[AnthropicConfig] = None
    gemini: Optional[GeminiConfig] = None
    models: ModelsConfig = Field(default_factory=ModelsConfig)
    orchestration: OrchestrationConfig = Field(default_factory=OrchestrationConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)


_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


def _interpolate_env_vars(text: str, extra: dict[str, str] | None = None) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        if extra and var_name in extra:
            return extra[var_name]
        value = os.environ.get(var_name)
        if value is None:
            return match.group(0)
        return value

    return _ENV_VAR_PATTERN.sub(_replace, text)


def load_config(config_path: str | Path = "config.yaml", env_path: str | Path = ".env") -> AppConfig:
    """Load and validate configuration from YAML file with env-var interpolation."""
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    raw_text = config_file.read_text(encoding="utf-8")

    # data_dir may be referenced by other values, e.g. storage.db_path
    raw_data = yaml.safe_load(raw_text) or {}
    data_dir = _interpolate_env_vars(str(raw_data.get("data_dir", "./data")))

    interpolated = _interpolate_env_vars(raw_text, extra={"data_dir": data_dir})
    data = yaml.safe_load(interpolated) or {}

    return AppConfig(**data)
