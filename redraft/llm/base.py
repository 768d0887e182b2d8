from abc import ABC, abstractmethod

from .markdown import strip_markdown


DEFAULT_SYSTEM_PROMPT = (
    "You are a code editing assistant. Apply the requested changes to the code "
    "and return only the modified code."
)

ENHANCE_SYSTEM_PROMPT = (
    "You rewrite terse code edit requests into one precise sentence. "
    "Reply with a single first-person sentence describing the change, "
    "for example: \"I will add input validation to the parse function.\" "
    "Do not include code."
)


# ── Error taxonomy ──


class LLMError(Exception):
    """Base class for every failure raised by a provider."""


class ConfigurationError(LLMError):
    """Provider cannot be built: unknown id, missing credential, bad auth file."""


class UnknownProviderError(ConfigurationError):

    def __init__(self, provider: str):
        super().__init__(f"Unknown provider: {provider}")
        self.provider = provider


class MissingCredentialError(ConfigurationError):

    def __init__(self, env_var: str):
        super().__init__(f"{env_var} environment variable is required")
        self.env_var = env_var


class ProviderHTTPError(LLMError):
    """Backend answered with a non-success HTTP status."""

    MAX_BODY = 500

    def __init__(self, provider: str, status: int, body: str = ""):
        excerpt = (body or "").strip()[:self.MAX_BODY]
        message = f"{provider} API error {status}"
        if excerpt:
            message += f": {excerpt}"
        super().__init__(message)
        self.status = status
        self.body = excerpt


class EmptyResponseError(LLMError):
    """Backend answered successfully but produced no usable content."""

    def __init__(self, provider: str):
        super().__init__(f"No response from {provider}")


class LLMProvider(ABC):
    """One backend service that can rewrite code.

    Subclasses implement :meth:`_complete`, a single model call returning
    raw text. Providers that can also elaborate an instruction set
    ``supports_enhance = True``; the edit service checks that flag rather
    than probing for methods.
    """

    name = "provider"
    supports_enhance = False

    def __init__(self, api_key: str, model: str, base_url: str | None = None,
                 max_output_tokens: int | None = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/") if base_url else None
        self.max_output_tokens = max_output_tokens

    # ── Public contract ──

    def apply_edit(self, code: str, instruction: str,
                   system_prompt: str | None = None) -> str:
        """Return *code* rewritten per *instruction*, fences stripped.

        Raises :class:`EmptyResponseError` rather than returning "".
        """
        raw = self._complete(system_prompt or DEFAULT_SYSTEM_PROMPT,
                             self._edit_prompt(code, instruction))
        return self._require_text(strip_markdown(raw or ""))

    def enhance_instruction(self, code: str, instruction: str) -> str:
        """Expand a terse *instruction* into one first-person sentence."""
        if not self.supports_enhance:
            raise ConfigurationError(f"{self.name} does not support instruction enhancement")
        prompt = (
            f"Code:\n{code}\n\n"
            f"Requested change: {instruction}\n\n"
            "Describe the change as a single first-person sentence."
        )
        raw = self._complete(ENHANCE_SYSTEM_PROMPT, prompt)
        return self._require_text((raw or "").strip())

    # ── Subclass hooks ──

    def _edit_prompt(self, code: str, instruction: str) -> str:
        return (
            f"Instruction: {instruction}\n\n"
            f"Code:\n{code}\n\n"
            "Return only the complete modified code."
        )

    @abstractmethod
    def _complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run one model call and return its raw text output."""

    def _require_text(self, text: str) -> str:
        if not text:
            raise EmptyResponseError(self.name)
        return text
