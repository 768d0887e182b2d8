"""Tests for configuration loading."""

import pytest

from redraft.config import Config, _find_config_file


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("NVIM_REDRAFT_PROVIDER", "NVIM_REDRAFT_MODEL", "NVIM_REDRAFT_BASE_URL",
                "NVIM_REDRAFT_MAX_TOKENS", "NVIM_REDRAFT_DEBUG", "NVIM_REDRAFT_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    cfg = Config({})
    assert cfg.PROVIDER == "openai"
    assert cfg.MODEL == ""
    assert cfg.DEBUG is False
    assert cfg.get_max_output_tokens() is None
    assert cfg.get_base_url("openai") is None


def test_yaml_values():
    cfg = Config({"provider": "Anthropic", "model": "claude-x", "max_output_tokens": 2048,
                  "debug": True, "log_file": "/tmp/redraft.log"})
    assert cfg.PROVIDER == "anthropic"
    assert cfg.MODEL == "claude-x"
    assert cfg.get_max_output_tokens() == 2048
    assert cfg.DEBUG is True
    assert cfg.LOG_FILE == "/tmp/redraft.log"


def test_env_beats_yaml(monkeypatch):
    monkeypatch.setenv("NVIM_REDRAFT_PROVIDER", "glm")
    monkeypatch.setenv("NVIM_REDRAFT_DEBUG", "1")
    cfg = Config({"provider": "anthropic", "debug": False})
    assert cfg.PROVIDER == "glm"
    assert cfg.DEBUG is True


def test_cli_overrides_beat_env(monkeypatch):
    monkeypatch.setenv("NVIM_REDRAFT_MODEL", "env-model")
    cfg = Config({})
    cfg.apply_overrides(provider="morph", model="cli-model", debug=False)
    assert cfg.PROVIDER == "morph"
    assert cfg.MODEL == "cli-model"
    assert cfg.DEBUG is False


def test_provider_base_urls():
    cfg = Config({"provider": "openai", "base_url": "http://proxy/v1",
                  "glm": {"base_url": "http://glm.local/v4"}})
    assert cfg.get_base_url("glm") == "http://glm.local/v4"
    assert cfg.get_base_url("openai") == "http://proxy/v1"
    assert cfg.get_base_url("anthropic") is None


def test_load_from_explicit_path(tmp_path):
    path = tmp_path / "redraft.yaml"
    path.write_text("provider: copilot\nmodel: gpt-4o\n")
    cfg = Config.load(str(path))
    assert cfg.PROVIDER == "copilot"
    assert cfg.MODEL == "gpt-4o"


def test_load_ignores_invalid_yaml(tmp_path):
    path = tmp_path / "redraft.yaml"
    path.write_text("provider: [unterminated\n")
    assert Config.load(str(path)).PROVIDER == "openai"


def test_find_config_file_in_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".redraft.yml").write_text("model: m\n")
    assert _find_config_file() == str(tmp_path / ".redraft.yml")
    assert _find_config_file(str(tmp_path / "missing.yaml")) is None


def test_invalid_max_tokens_falls_back(monkeypatch, capsys):
    monkeypatch.setenv("NVIM_REDRAFT_MAX_TOKENS", "lots")
    cfg = Config({})
    assert cfg.get_max_output_tokens() is None
    assert "[nvim-redraft] Invalid value for NVIM_REDRAFT_MAX_TOKENS: 'lots'" in capsys.readouterr().err


def test_invalid_yaml_max_tokens_falls_back(capsys):
    cfg = Config({"max_output_tokens": "plenty"})
    assert cfg.MAX_OUTPUT_TOKENS == 0
    assert "max_output_tokens" in capsys.readouterr().err
