"""
Anthropic Claude provider — calls the Anthropic Messages API directly.
"""

import logging

import requests

from .base import LLMProvider, LLMError, ProviderHTTPError
from ..logger import log, log_content


class AnthropicProvider(LLMProvider):

    name = "Anthropic"
    supports_enhance = True
    ANTHROPIC_VERSION = "2023-06-01"
    DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
    DEFAULT_MAX_TOKENS = 4096

    def __init__(self, api_key: str, model: str, base_url: str | None = None,
                 max_output_tokens: int | None = None):
        super().__init__(api_key, model, base_url or self.DEFAULT_BASE_URL,
                         max_output_tokens or self.DEFAULT_MAX_TOKENS)

    def _headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.ANTHROPIC_VERSION,
        }

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        log_content(logging.DEBUG, f"[Anthropic] Request to {self.model}", user_prompt)

        payload = {
            "model": self.model,
            "max_tokens": self.max_output_tokens,
            "system": system_prompt,
            "messages": [
                {"role": "user", "content": user_prompt},
            ],
        }
        url = f"{self.base_url}/messages"
        try:
            response = requests.post(url, headers=self._headers(), json=payload)
        except requests.exceptions.RequestException as e:
            raise LLMError(f"Anthropic request failed: {e}") from e

        if not response.ok:
            raise ProviderHTTPError(self.name, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise LLMError(f"Anthropic returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise LLMError(f"Anthropic returned an unexpected payload: {type(data).__name__}")

        usage = data.get("usage") or {}
        log.debug(f"[Anthropic] Usage: prompt={usage.get('input_tokens')} "
                  f"completion={usage.get('output_tokens')}")

        # Extract text from content blocks
        content_blocks = data.get("content") or []
        response_text = "".join(
            block.get("text", "") for block in content_blocks
            if isinstance(block, dict) and block.get("type") == "text"
        )
        log_content(logging.DEBUG, "[Anthropic] Response", response_text)
        return response_text
