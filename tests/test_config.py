import pytest
from pydantic import ValidationError

from econchat.config import AppConfig, load_config
from econchat.core.types import GatewayRole

CONFIG_YAML = """
data_dir: /tmp/econ
anthropic:
  api_key: ${TEST_ANTHROPIC_KEY}
gemini:
  api_key: ${TEST_GEMINI_KEY}
models:
  standard:
    provider: gemini
    model: gemini-2.5-pro
    input_cost_per_mtok: 1.25
    output_cost_per_mtok: 10.0
orchestration:
  max_tool_iterations: 5
storage:
  backend: sqlite
  db_path: ${data_dir}/econchat.db
"""


def write(tmp_path, text, name="config.yaml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    config = AppConfig()
    assert config.models.for_role(GatewayRole.PREMIUM).provider == "anthropic"
    assert config.models.for_role(GatewayRole.STANDARD).model == "gemini-2.5-flash"
    assert config.orchestration.max_tool_iterations == 10
    assert config.orchestration.max_history_messages == 20
    assert config.storage.backend == "memory"
    assert config.tools.enabled == []


def test_load_interpolates_env_and_data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("TEST_ANTHROPIC_KEY", "sk-ant-test")
    monkeypatch.setenv("TEST_GEMINI_KEY", "gm-test")
    config = load_config(write(tmp_path, CONFIG_YAML), env_path=tmp_path / "missing.env")

    assert config.anthropic.api_key == "sk-ant-test"
    assert config.gemini.api_key == "gm-test"
    assert config.storage.db_path == "/tmp/econ/econchat.db"
    assert config.models.standard.model == "gemini-2.5-pro"
    assert config.models.premium.model == "claude-opus-4-5-20251101"
    assert config.orchestration.max_tool_iterations == 5


def test_env_file_is_loaded(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_ENV_FILE_KEY", raising=False)
    env = write(tmp_path, "TEST_ENV_FILE_KEY=from-dotenv\n", name=".env")
    config = load_config(write(tmp_path, "anthropic:\n  api_key: ${TEST_ENV_FILE_KEY}\n"), env_path=env)
    assert config.anthropic.api_key == "from-dotenv"
    monkeypatch.delenv("TEST_ENV_FILE_KEY", raising=False)


def test_unset_variable_is_left_verbatim(tmp_path, monkeypatch):
    monkeypatch.delenv("TEST_NOT_SET", raising=False)
    config = load_config(write(tmp_path, "gemini:\n  api_key: ${TEST_NOT_SET}\n"), env_path=tmp_path / "none.env")
    assert config.gemini.api_key == "${TEST_NOT_SET}"


def test_empty_file_gives_defaults(tmp_path):
    config = load_config(write(tmp_path, ""), env_path=tmp_path / "none.env")
    assert config == AppConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml", env_path=tmp_path / "none.env")


def test_invalid_values(tmp_path):
    with pytest.raises(ValidationError):
        load_config(write(tmp_path, "orchestration:\n  max_tool_iterations: many\n"), env_path=tmp_path / "none.env")
