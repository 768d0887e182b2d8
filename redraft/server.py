"""
Line-oriented JSON server and the ``redraft-server`` entry point.

Each stdin line carries one request; each response is one stdout line.
"""

import argparse
import json
import sys
from typing import IO

from .config import Config
from .llm.registry import create_provider, get_api_key, get_default_model
from .logger import log, setup_logger
from .service import EditRequest, EditService


class EditServer:
    """Dispatches ``edit`` requests to an :class:`EditService`.

    Services are cached per ``(provider, model)`` so a provider's cached
    auth state survives across requests.
    """

    def __init__(self, config: Config, stdin: IO[str] | None = None,
                 stdout: IO[str] | None = None):
        self.config = config
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._services: dict[tuple[str, str], EditService] = {}

    def get_service(self, provider: str | None = None, model: str | None = None) -> EditService:
        provider = (provider or self.config.PROVIDER).strip().lower()
        if not model:
            if provider == self.config.PROVIDER and self.config.MODEL:
                model = self.config.MODEL
            else:
                model = get_default_model(provider)

        key = (provider, model)
        service = self._services.get(key)
        if service is None:
            llm = create_provider(
                provider, get_api_key(provider), model,
                base_url=self.config.get_base_url(provider),
                max_output_tokens=self.config.get_max_output_tokens(),
            )
            service = EditService(llm)
            self._services[key] = service
            log.info(f"[Server] Initialized provider={provider} model={model}")
        return service

    def handle_request(self, request: dict) -> dict:
        request_id = request.get("id")
        method = request.get("method")
        if method != "edit":
            return {"id": request_id, "error": f"Unknown method: {method}"}

        params = request.get("params")
        if not isinstance(params, dict):
            return {"id": request_id, "error": "Missing params"}
        for field in ("code", "instruction"):
            value = params.get(field)
            if not isinstance(value, str) or not value.strip():
                return {"id": request_id, "error": f"Missing required param: {field}"}

        try:
            service = self.get_service(params.get("provider"), params.get("model"))
            result = service.edit(EditRequest(
                code=params["code"],
                instruction=params["instruction"],
                system_prompt=params.get("systemPrompt") or None,
            ))
        except Exception as e:
            log.error(f"[Server] Request {request_id} failed: {e}")
            return {"id": request_id, "error": str(e)}

        return {"id": request_id, "result": result}

    def handle_line(self, line: str) -> dict | None:
        """Parse one input line; returns None when no response can be sent."""
        line = line.strip()
        if not line:
            return None
        try:
            request = json.loads(line)
        except json.JSONDecodeError as e:
            log.error(f"[Server] Failed to parse request: {e}")
            return None
        if not isinstance(request, dict):
            log.error("[Server] Ignoring request that is not a JSON object")
            return None
        return self.handle_request(request)

    def send(self, response: dict) -> None:
        self.stdout.write(json.dumps(response) + "\n")
        self.stdout.flush()

    def serve(self) -> None:
        log.info("[Server] Listening on stdin")
        for line in self.stdin:
            response = self.handle_line(line)
            if response is not None:
                self.send(response)
        log.info("[Server] stdin closed, exiting")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="nvim-redraft LLM edit server")
    parser.add_argument("--provider", default=None,
                        help="The LLM provider to use (default: from config)")
    parser.add_argument("--model", default=None,
                        help="The model name to use (default: provider default)")
    parser.add_argument("--config", default=None,
                        help="Path to .redraft.yaml config file")
    parser.add_argument("--debug", action="store_true", default=None,
                        help="Write debug logs to --log-file")
    parser.add_argument("--log-file", default=None,
                        help="Debug log file path")
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    cfg.apply_overrides(provider=args.provider, model=args.model,
                        debug=args.debug, log_file=args.log_file)
    setup_logger(cfg.LOG_FILE, cfg.DEBUG)

    server = EditServer(cfg)
    # Surface configuration problems at start-up; requests still report them.
    try:
        server.get_service()
    except Exception as e:
        print(f"[nvim-redraft] {e}", file=sys.stderr)
        log.error(f"[Server] Default provider unavailable: {e}")

    server.serve()
    return 0


if __name__ == "__main__":
    sys.exit(main())
