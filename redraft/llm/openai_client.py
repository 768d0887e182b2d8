"""
OpenAI-compatible providers — OpenAI itself, Z.ai GLM, and Morph, all spoken
to through the ``openai`` SDK's chat/completions call.
"""

import logging

import openai

from .base import LLMProvider, LLMError, ProviderHTTPError
from ..logger import log, log_content


class OpenAIProvider(LLMProvider):

    name = "OpenAI"
    supports_enhance = True
    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(self, api_key: str, model: str, base_url: str | None = None,
                 max_output_tokens: int | None = None):
        super().__init__(api_key, model, base_url or self.DEFAULT_BASE_URL,
                         max_output_tokens)
        self.client = openai.OpenAI(api_key=self.api_key, base_url=self.base_url,
                                    max_retries=0)

    def _messages(self, system_prompt: str, user_prompt: str) -> list[dict]:
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        log_content(logging.DEBUG, f"[{self.name}] Request to {self.model}", user_prompt)

        kwargs = {
            "model": self.model,
            "messages": self._messages(system_prompt, user_prompt),
        }
        if self.max_output_tokens:
            kwargs["max_tokens"] = self.max_output_tokens

        try:
            response = self.client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            raise ProviderHTTPError(self.name, e.status_code, e.response.text) from e
        except openai.OpenAIError as e:
            raise LLMError(f"{self.name} request failed: {e}") from e

        usage = getattr(response, "usage", None)
        if usage is not None:
            log.debug(f"[{self.name}] Usage: prompt={usage.prompt_tokens} "
                      f"completion={usage.completion_tokens}")

        choices = response.choices or []
        text = choices[0].message.content if choices else None
        log_content(logging.DEBUG, f"[{self.name}] Response", text or "")
        return text or ""


class GLMProvider(OpenAIProvider):

    name = "GLM"
    DEFAULT_BASE_URL = "https://api.z.ai/api/paas/v4"


class MorphProvider(OpenAIProvider):
    """Morph's apply model: takes the instruction and code in tagged form and
    answers with the merged code. It does not elaborate instructions."""

    name = "Morph"
    supports_enhance = False
    DEFAULT_BASE_URL = "https://api.morphllm.com/v1"

    def _edit_prompt(self, code: str, instruction: str) -> str:
        return f"<instruction>{instruction}</instruction>\n<code>{code}</code>"
