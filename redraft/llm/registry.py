"""
Provider registry — maps a provider id to its constructor, the environment
variable holding its credential, and its default model.

Adding a provider means adding one entry to each of the three tables.
"""

import os
from typing import Callable

from .anthropic_client import AnthropicProvider
from .base import LLMProvider, MissingCredentialError, UnknownProviderError
from .copilot import CopilotProvider, read_oauth_token
from .openai_client import GLMProvider, MorphProvider, OpenAIProvider


PROVIDERS: dict[str, Callable[..., LLMProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "glm": GLMProvider,
    "morph": MorphProvider,
    "copilot": CopilotProvider,
}

# Copilot's credential lives in the Copilot plugin's auth file, not the env.
PROVIDER_API_KEYS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "glm": "ZAI_API_KEY",
    "morph": "MORPH_API_KEY",
    "copilot": "",
}

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20241022",
    "glm": "glm-4.5-airx",
    "morph": "morph-v3-large",
    "copilot": "gpt-4o",
}


def _lookup(table: dict, provider: str):
    try:
        return table[provider]
    except KeyError:
        raise UnknownProviderError(provider) from None


def available_providers() -> list[str]:
    return sorted(PROVIDERS)


def create_provider(provider: str, api_key: str, model: str,
                    base_url: str | None = None,
                    max_output_tokens: int | None = None) -> LLMProvider:
    """Build a provider instance bound to one credential and one model."""
    factory = _lookup(PROVIDERS, provider)
    return factory(api_key, model, base_url=base_url,
                   max_output_tokens=max_output_tokens)


def get_api_key(provider: str) -> str:
    """Return the credential for *provider*.

    A missing credential is always an error. For Copilot this reads the OAuth
    token from its auth file and raises ``CopilotAuthError`` if unavailable.
    """
    env_var = _lookup(PROVIDER_API_KEYS, provider)
    if not env_var:
        return read_oauth_token()
    api_key = os.getenv(env_var)
    if not api_key:
        raise MissingCredentialError(env_var)
    return api_key


def get_default_model(provider: str) -> str:
    return _lookup(DEFAULT_MODELS, provider)
