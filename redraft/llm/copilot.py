"""
GitHub Copilot provider.

Copilot has no user-facing API key. The editor's Copilot plugin stores a
long-lived OAuth token on disk; that token is exchanged for a short-lived
bearer token, which is cached until shortly before it expires. Completions
are only served as an event stream.
"""

import json
import logging
import os
import threading
import time

import requests

from .base import ConfigurationError, LLMError, LLMProvider, ProviderHTTPError
from .sse import decode_response, openai_delta
from ..logger import log, log_content

TOKEN_URL = "https://api.github.com/copilot_internal/v2/token"
CHAT_URL = "https://api.githubcopilot.com/chat/completions"

EDITOR_HEADERS = {
    "Editor-Version": "Neovim/0.10.0",
    "Editor-Plugin-Version": "nvim-redraft/0.1.0",
    "Copilot-Integration-Id": "vscode-chat",
    "User-Agent": "nvim-redraft/0.1.0",
}

# Treat tokens as expired slightly early so a request never races the expiry.
EXPIRY_SKEW_SECONDS = 60


class CopilotAuthError(ConfigurationError):
    """Copilot credential could not be obtained.

    ``kind`` is one of ``not_authenticated``, ``corrupted``, ``incomplete`` or
    ``exchange_rejected``.
    """

    NOT_AUTHENTICATED = "not_authenticated"
    CORRUPTED = "corrupted"
    INCOMPLETE = "incomplete"
    EXCHANGE_REJECTED = "exchange_rejected"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind


def copilot_config_dir() -> str:
    base = os.getenv("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(base, "github-copilot")


def _auth_files(config_dir: str | None = None) -> list[str]:
    config_dir = config_dir or copilot_config_dir()
    paths = [os.path.join(config_dir, name) for name in ("apps.json", "hosts.json")]
    return [path for path in paths if os.path.isfile(path)]


def _github_token(data) -> str | None:
    if not isinstance(data, dict):
        return None
    for host, entry in data.items():
        if host != "github.com" and not str(host).startswith("github.com:"):
            continue
        token = entry.get("oauth_token") if isinstance(entry, dict) else None
        if token:
            return token
    return None


def read_oauth_token(config_dir: str | None = None) -> str:
    """Read the GitHub OAuth token written by the Copilot editor plugin.

    ``apps.json`` is checked before ``hosts.json``; the first github.com
    ``oauth_token`` found wins.
    """
    paths = _auth_files(config_dir)
    if not paths:
        raise CopilotAuthError(
            CopilotAuthError.NOT_AUTHENTICATED,
            f"Copilot is not authenticated: no apps.json or hosts.json in "
            f"{config_dir or copilot_config_dir()}. Run :Copilot auth in Neovim first.",
        )

    for path in paths:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CopilotAuthError(
                CopilotAuthError.CORRUPTED,
                f"Copilot auth file {path} is corrupted: {e}. Re-run :Copilot auth.",
            ) from e

        token = _github_token(data)
        if token:
            return token
        log.debug(f"[Copilot] No github.com oauth_token in {path}")

    raise CopilotAuthError(
        CopilotAuthError.INCOMPLETE,
        f"Copilot auth file {' / '.join(paths)} has no github.com oauth_token. "
        f"Re-run :Copilot auth.",
    )


class CopilotTokenManager:
    """Caches the short-lived Copilot bearer token.

    Two states: no token, or a cached token with an expiry. ``get_token``
    reuses the cached token until it expires; otherwise it performs one
    exchange. The lock makes concurrent refreshes single-flight.
    """

    def __init__(self, oauth_token: str | None = None, config_dir: str | None = None,
                 clock=time.time):
        self._oauth_token = oauth_token or None
        self._config_dir = config_dir
        self._clock = clock
        self._lock = threading.Lock()
        self._token: str | None = None
        self._expires_at = 0.0

    def get_token(self) -> str:
        with self._lock:
            if self._token and self._clock() < self._expires_at - EXPIRY_SKEW_SECONDS:
                return self._token
            self._token = None
            self._token, self._expires_at = self._exchange()
            return self._token

    def _exchange(self) -> tuple[str, float]:
        oauth_token = self._oauth_token or read_oauth_token(self._config_dir)
        log.debug("[Copilot] Exchanging OAuth token for a session token")

        headers = {"Authorization": f"token {oauth_token}", "Accept": "application/json"}
        headers.update(EDITOR_HEADERS)
        try:
            response = requests.get(TOKEN_URL, headers=headers)
        except requests.exceptions.RequestException as e:
            raise LLMError(f"Copilot token exchange failed: {e}") from e

        if not response.ok:
            raise CopilotAuthError(
                CopilotAuthError.EXCHANGE_REJECTED,
                f"Copilot token exchange rejected ({response.status_code}): "
                f"{response.text.strip()[:200]}. Check your Copilot subscription "
                f"or re-run :Copilot auth.",
            )

        try:
            data = response.json()
            token = data["token"]
            expires_at = float(data["expires_at"])
        except (ValueError, KeyError, TypeError) as e:
            raise CopilotAuthError(
                CopilotAuthError.EXCHANGE_REJECTED,
                f"Copilot token exchange returned an unexpected payload: {e}",
            ) from e

        log.info(f"[Copilot] Session token valid until {int(expires_at)}")
        return token, expires_at


class CopilotProvider(LLMProvider):

    name = "Copilot"
    supports_enhance = True

    def __init__(self, api_key: str, model: str, base_url: str | None = None,
                 max_output_tokens: int | None = None, config_dir: str | None = None):
        super().__init__(api_key, model, base_url, max_output_tokens)
        self.tokens = CopilotTokenManager(oauth_token=api_key, config_dir=config_dir)

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        log_content(logging.DEBUG, f"[Copilot] Request to {self.model}", user_prompt)

        token = self.tokens.get_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
        }
        headers.update(EDITOR_HEADERS)
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "stream": True,
        }
        if self.max_output_tokens:
            payload["max_tokens"] = self.max_output_tokens

        url = f"{self.base_url}/chat/completions" if self.base_url else CHAT_URL
        try:
            response = requests.post(url, headers=headers, json=payload, stream=True)
        except requests.exceptions.RequestException as e:
            raise LLMError(f"Copilot request failed: {e}") from e

        if not response.ok:
            try:
                body = response.text
            finally:
                response.close()
            raise ProviderHTTPError(self.name, response.status_code, body)

        try:
            result = decode_response(response, openai_delta, source="Copilot")
        except requests.exceptions.RequestException as e:
            raise LLMError(f"Copilot stream failed: {e}") from e
        log_content(logging.DEBUG, "[Copilot] Response", result)
        return result
