"""Tests for explain_server.config loading and environment overrides."""

import configparser
import logging

import pytest

from explain_server.config import (
    PROJECT_ROOT,
    LoggingSettings,
    ServerConfig,
    _load_from_ini,
    _parse_list,
    configure_logging,
    get_config_status,
    load_config,
    print_config_summary,
    reload_config,
)

_ENV_VARS = (
    "EXPLAIN_HOST",
    "EXPLAIN_PORT",
    "EXPLAIN_CORS_ORIGINS",
    "EXPLAIN_LOG_LEVEL",
    "EXPLAIN_MODEL",
    "EXPLAIN_MODEL_BASE_URL",
    "EXPLAIN_MODEL_TIMEOUT_SECONDS",
    "EXPLAIN_LENGTH_LIMIT",
    "EXPLAIN_FORMATTING_POLICY",
    "OPENAI_API_KEY",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
def test_server_env_overrides(monkeypatch):
    monkeypatch.setenv("EXPLAIN_HOST", "127.0.0.1")
    monkeypatch.setenv("EXPLAIN_PORT", "9100")
    monkeypatch.setenv("EXPLAIN_CORS_ORIGINS", "http://a.example, http://b.example")
    monkeypatch.setenv("EXPLAIN_LOG_LEVEL", "debug")

    cfg = load_config()

    assert cfg.server.host == "127.0.0.1"
    assert cfg.server.port == 9100
    assert cfg.security.cors_origins == ["http://a.example", "http://b.example"]
    assert cfg.logging.level == "DEBUG"


@pytest.mark.unit
def test_model_env_overrides(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setenv("EXPLAIN_MODEL", "gpt-test")
    monkeypatch.setenv("EXPLAIN_MODEL_BASE_URL", "http://proxy.example/v1/")
    monkeypatch.setenv("EXPLAIN_MODEL_TIMEOUT_SECONDS", "12.5")

    cfg = load_config()

    assert cfg.has_api_key
    assert cfg.model.api_key == "sk-env"
    assert cfg.model.model == "gpt-test"
    assert cfg.model.api_endpoint == "http://proxy.example/v1/chat/completions"
    assert cfg.model.timeout_seconds == 12.5


@pytest.mark.unit
def test_formatting_env_overrides(monkeypatch):
    monkeypatch.setenv("EXPLAIN_LENGTH_LIMIT", "640")
    monkeypatch.setenv("EXPLAIN_FORMATTING_POLICY", "policies/formatting.yaml")

    cfg = load_config()

    assert cfg.formatting.length_limit == 640
    assert cfg.formatting.policy_path == "policies/formatting.yaml"
    assert cfg.formatting.load_policy().length_limit == 640


@pytest.mark.unit
def test_no_api_key_without_env():
    assert load_config().has_api_key is False


@pytest.mark.unit
def test_ini_sections_loaded():
    parser = configparser.ConfigParser()
    parser.read_string(
        """
[server]
host = 127.0.0.2
port = 8100

[security]
cors_origins = http://one.example
cors_allow_methods = GET, POST

[logging]
level = warning
format = simple

[model]
model = gpt-ini
timeout_seconds = 9
temperature = 0.2
max_tokens = 300

[formatting]
length_limit = 800
policy_path = policies/formatting.yaml
"""
    )
    cfg = ServerConfig()
    _load_from_ini(parser, cfg)

    assert cfg.server.host == "127.0.0.2"
    assert cfg.server.port == 8100
    assert cfg.security.cors_origins == ["http://one.example"]
    assert cfg.security.cors_allow_methods == ["GET", "POST"]
    assert cfg.logging.level == "WARNING"
    assert cfg.logging.format == "simple"
    assert cfg.model.model == "gpt-ini"
    assert cfg.model.timeout_seconds == 9.0
    assert cfg.model.temperature == 0.2
    assert cfg.model.max_tokens == 300
    assert cfg.formatting.length_limit == 800
    assert cfg.formatting.policy_path == "policies/formatting.yaml"


@pytest.mark.unit
def test_ini_unknown_log_format_ignored():
    parser = configparser.ConfigParser()
    parser.read_string("[logging]\nformat = fancy\n")
    cfg = ServerConfig()
    _load_from_ini(parser, cfg)

    assert cfg.logging.format == "detailed"


@pytest.mark.unit
def test_parse_list():
    assert _parse_list(" a, b ,,c ") == ["a", "b", "c"]
    assert _parse_list("   ") == []


@pytest.mark.unit
def test_relative_policy_path_resolves_from_project_root():
    cfg = ServerConfig()
    cfg.formatting.policy_path = "policies/formatting.yaml"

    assert (PROJECT_ROOT / cfg.formatting.policy_path).exists()
    assert cfg.formatting.load_policy().length_limit == 1000


@pytest.mark.unit
def test_configure_logging():
    configure_logging(LoggingSettings(level="WARNING", format="simple"))

    assert logging.getLogger().level == logging.WARNING


@pytest.mark.unit
def test_config_status_never_includes_key(monkeypatch):
    monkeypatch.setattr("explain_server.config.config", ServerConfig())
    status = get_config_status()

    assert status["api_key_configured"] is False
    assert "api_key" not in status


@pytest.mark.unit
def test_print_config_summary(capsys):
    print_config_summary()
    output = capsys.readouterr().out

    assert "SERVER CONFIGURATION" in output
    assert "Model:" in output


@pytest.mark.unit
def test_reload_config_replaces_singleton(monkeypatch):
    import explain_server.config as config_module

    monkeypatch.setattr(config_module, "config", ServerConfig())
    monkeypatch.setenv("EXPLAIN_PORT", "9200")

    reloaded = reload_config()

    assert reloaded.server.port == 9200
    assert config_module.config is reloaded
