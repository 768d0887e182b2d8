"""Tests for the line-oriented JSON server."""

import io
import json
from unittest.mock import MagicMock, patch

import pytest

from redraft.config import Config
from redraft.server import EditServer, main
from redraft.service import EditError


@pytest.fixture
def config(monkeypatch):
    for var in ("NVIM_REDRAFT_PROVIDER", "NVIM_REDRAFT_MODEL", "NVIM_REDRAFT_BASE_URL",
                "NVIM_REDRAFT_MAX_TOKENS", "NVIM_REDRAFT_DEBUG", "NVIM_REDRAFT_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    return Config({})


def _server(config, lines=""):
    return EditServer(config, stdin=io.StringIO(lines), stdout=io.StringIO())


def _edit(request_id=1, **params):
    params.setdefault("code", "x = 1")
    params.setdefault("instruction", "set x to 2")
    return {"id": request_id, "method": "edit", "params": params}


class TestHandleRequest:

    def test_unknown_method(self, config):
        response = _server(config).handle_request({"id": 7, "method": "explode", "params": {}})
        assert response == {"id": 7, "error": "Unknown method: explode"}

    @pytest.mark.parametrize("field", ["code", "instruction"])
    def test_missing_field(self, config, field):
        request = _edit()
        request["params"][field] = ""
        response = _server(config).handle_request(request)
        assert response == {"id": 1, "error": f"Missing required param: {field}"}

    def test_successful_edit(self, config):
        server = _server(config)
        service = MagicMock()
        service.edit.return_value = "x = 2"
        with patch.object(server, "get_service", return_value=service) as get_service:
            response = server.handle_request(_edit(systemPrompt="Be terse."))

        assert response == {"id": 1, "result": "x = 2"}
        get_service.assert_called_once_with(None, None)
        edit_request = service.edit.call_args.args[0]
        assert edit_request.code == "x = 1"
        assert edit_request.instruction == "set x to 2"
        assert edit_request.system_prompt == "Be terse."

    def test_edit_failure_becomes_error(self, config):
        server = _server(config)
        service = MagicMock()
        service.edit.side_effect = EditError("edit failed: boom")
        with patch.object(server, "get_service", return_value=service):
            response = server.handle_request(_edit())
        assert response == {"id": 1, "error": "edit failed: boom"}

    def test_missing_credential_becomes_error(self, config, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        response = _server(config).handle_request(_edit())
        assert response == {"id": 1, "error": "OPENAI_API_KEY environment variable is required"}

    def test_unknown_provider_becomes_error(self, config):
        response = _server(config).handle_request(_edit(provider="bogus"))
        assert response == {"id": 1, "error": "Unknown provider: bogus"}


class TestGetService:

    def test_default_provider_and_model(self, config, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        service = _server(config).get_service()
        assert service.provider.name == "OpenAI"
        assert service.provider.model == "gpt-4o-mini"

    def test_configured_model(self, config, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        config.MODEL = "gpt-4.1"
        assert _server(config).get_service().provider.model == "gpt-4.1"

    def test_per_request_provider_uses_its_default_model(self, config, monkeypatch):
        monkeypatch.setenv("ZAI_API_KEY", "zai-test")
        config.MODEL = "gpt-4.1"
        service = _server(config).get_service("glm")
        assert service.provider.model == "glm-4.5-airx"

    def test_services_are_cached(self, config, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        server = _server(config)
        assert server.get_service("openai", "gpt-4o") is server.get_service("openai", "gpt-4o")
        assert server.get_service("openai", "gpt-4o") is not server.get_service("openai", "o3")


class TestServe:

    def test_one_response_per_request_line(self, config):
        lines = "\n".join([
            json.dumps({"id": 1, "method": "ping"}),
            "",
            "not json",
            json.dumps([1, 2, 3]),
            json.dumps({"id": 2, "method": "status"}),
        ]) + "\n"
        server = _server(config, lines)
        server.serve()

        out = server.stdout.getvalue().splitlines()
        assert [json.loads(line) for line in out] == [
            {"id": 1, "error": "Unknown method: ping"},
            {"id": 2, "error": "Unknown method: status"},
        ]


def test_main_reports_startup_problem_and_serves(monkeypatch, capsys):
    monkeypatch.delenv("MORPH_API_KEY", raising=False)
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps({"id": 3, "method": "x"}) + "\n"))
    with patch("redraft.server.Config.load", return_value=Config({})):
        assert main(["--provider", "morph"]) == 0

    captured = capsys.readouterr()
    assert "[nvim-redraft] MORPH_API_KEY environment variable is required" in captured.err
    assert json.loads(captured.out) == {"id": 3, "error": "Unknown method: x"}
