import json

import pytest
from pydantic import ValidationError

from searxng_bridge.config import DEFAULT_SEARXNG_URL, AppSettings, load_settings

ENV_KEYS = (
    "MCP_SX_URL",
    "MCP_SX_LOG",
    "MCP_SX_PORT",
    "MCP_SX_TIMEOUT",
    "MCP_SX_DELIVERY_ATTEMPTS",
    "MCP_SX_DELIVERY_RETRY_MS",
    "MCP_SX_CONFIG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # The default config file path is relative to the working directory.
    monkeypatch.chdir(tmp_path)


def test_defaults_without_env(tmp_path):
    settings = load_settings(config_path=tmp_path / "missing.json")
    assert settings.searxng_url == DEFAULT_SEARXNG_URL
    assert settings.log_level == "info"
    assert settings.request_timeout_s == 10.0
    assert settings.delivery_attempts == 3
    assert settings.delivery_retry_delay_s == pytest.approx(0.1)
    assert settings.channel_capacity == 100


def test_env_values_are_parsed(tmp_path, monkeypatch):
    monkeypatch.setenv("MCP_SX_URL", "http://searx.local:8080/")
    monkeypatch.setenv("MCP_SX_LOG", "WARN")
    monkeypatch.setenv("MCP_SX_PORT", "4000")
    monkeypatch.setenv("MCP_SX_TIMEOUT", "2.5")
    settings = load_settings(config_path=tmp_path / "missing.json")
    assert settings.searxng_url == "http://searx.local:8080"
    assert settings.log_level == "warning"
    assert settings.port == 4000
    assert settings.request_timeout_s == 2.5


def test_env_wins_over_config_file(tmp_path, monkeypatch):
    config_path = tmp_path / "bridge.json"
    config_path.write_text(json.dumps({"searxng_url": "http://file", "port": 5000}))
    monkeypatch.setenv("MCP_SX_URL", "http://env")
    settings = load_settings(config_path=config_path)
    assert settings.searxng_url == "http://env"
    assert settings.port == 5000


def test_config_path_from_env(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.json"
    config_path.write_text(json.dumps({"delivery_retry_delay_ms": 250}))
    monkeypatch.setenv("MCP_SX_CONFIG", str(config_path))
    settings = load_settings()
    assert settings.delivery_retry_delay_s == pytest.approx(0.25)


def test_broken_config_file_is_ignored(tmp_path):
    config_path = tmp_path / "broken.json"
    config_path.write_text("{not json")
    settings = load_settings(config_path=config_path)
    assert settings.searxng_url == DEFAULT_SEARXNG_URL


def test_unknown_log_level_falls_back_to_info():
    assert AppSettings(log_level="chatty").log_level == "info"


def test_delivery_attempts_must_be_positive():
    with pytest.raises(ValidationError):
        AppSettings(delivery_attempts=0)
