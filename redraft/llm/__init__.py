from .base import (
    LLMProvider, LLMError, ConfigurationError, UnknownProviderError,
    MissingCredentialError, ProviderHTTPError, EmptyResponseError,
)
from .markdown import strip_markdown
from .openai_client import OpenAIProvider, GLMProvider, MorphProvider
from .anthropic_client import AnthropicProvider
from .copilot import CopilotProvider, CopilotAuthError
from .registry import (
    create_provider, get_api_key, get_default_model, available_providers,
    PROVIDERS, PROVIDER_API_KEYS, DEFAULT_MODELS,
)
