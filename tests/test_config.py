"""Tests for config/config_loader.py."""

from pathlib import Path

import pytest
import yaml

from config.config_loader import AppConfig, GatewayConfig, PromptsConfig, load_config, parse_model_list
from council.models import CouncilMember


@pytest.fixture(autouse=True)
def _clear_overrides(monkeypatch):
    for var in ("COUNCIL_MODELS", "CHAIRMAN_MODEL", "TITLE_MODEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def minimal_settings(tmp_path: Path) -> Path:
    """Write a minimal valid settings.yaml to a temp path."""
    settings = {
        "gateway": {
            "base_url": "https://openrouter.ai/api/v1",
            "api_key_env": "TEST_OPENROUTER_KEY",
            "timeout_sec": 120,
            "chairman_timeout_sec": 240,
            "title_timeout_sec": 30,
            "max_tokens": None,
        },
        "defaults": {
            "chairman": "google/gemini-3-pro-preview",
            "title_model": "google/gemini-2.5-flash",
            "output_dir": "./output",
            "council": [
                {"model": "openai/gpt-5.1-chat"},
                {"model": "anthropic/claude-sonnet-4.5", "system_prompt": "  Be terse.  "},
                "x-ai/grok-4",
            ],
        },
        "prompts": {
            "ranking": "Q: {question}\n{responses}",
            "synthesis": "Q: {question}\n{stage1}\n{stage2}",
            "title": "Title for: {question}",
        },
    }
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.dump(settings), encoding="utf-8")
    return path


def test_load_config_returns_app_config(minimal_settings):
    config = load_config(minimal_settings)
    assert isinstance(config, AppConfig)
    assert isinstance(config.gateway, GatewayConfig)
    assert isinstance(config.prompts, PromptsConfig)


def test_load_config_gateway(minimal_settings):
    config = load_config(minimal_settings)
    assert config.gateway.timeout_sec == 120
    assert config.gateway.chairman_timeout_sec > config.gateway.timeout_sec
    assert config.gateway.max_tokens is None


def test_load_config_council_members(minimal_settings):
    config = load_config(minimal_settings)
    assert config.defaults.council == [
        CouncilMember("openai/gpt-5.1-chat"),
        CouncilMember("anthropic/claude-sonnet-4.5", system_prompt="Be terse."),
        CouncilMember("x-ai/grok-4"),
    ]


def test_load_config_defaults(minimal_settings):
    config = load_config(minimal_settings)
    assert config.defaults.chairman == "google/gemini-3-pro-preview"
    assert config.defaults.title_model == "google/gemini-2.5-flash"
    assert isinstance(config.defaults.output_dir, Path)


def test_env_overrides_council_and_chairman(minimal_settings, monkeypatch):
    monkeypatch.setenv("COUNCIL_MODELS", "a/one, b/two,,")
    monkeypatch.setenv("CHAIRMAN_MODEL", "c/chair")
    monkeypatch.setenv("TITLE_MODEL", "d/title")
    config = load_config(minimal_settings)
    assert [m.model for m in config.defaults.council] == ["a/one", "b/two"]
    assert config.defaults.chairman == "c/chair"
    assert config.defaults.title_model == "d/title"


def test_load_config_missing_file():
    with pytest.raises(FileNotFoundError):
        load_config(Path("/nonexistent/settings.yaml"))


def test_shipped_settings_load():
    config = load_config()
    assert config.defaults.council
    assert "{responses}" in config.prompts.ranking
    assert "FINAL RANKING:" in config.prompts.ranking
    assert "{stage2}" in config.prompts.synthesis


def test_parse_model_list_strips_blanks():
    assert parse_model_list(" a/x ,, b/y ") == ["a/x", "b/y"]
