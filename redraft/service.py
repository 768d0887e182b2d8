"""
Edit service — runs one edit cycle against a single bound provider.
"""

from dataclasses import dataclass
from typing import Optional

from .llm.base import LLMProvider
from .logger import log


class EditError(Exception):
    """An edit cycle failed. The message always starts with ``edit failed:``."""


@dataclass(frozen=True)
class EditRequest:
    code: str
    instruction: str
    system_prompt: Optional[str] = None


class EditService:

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    def edit(self, request: EditRequest) -> str:
        """Return the rewritten code for *request*.

        When the provider supports it, the instruction is elaborated first;
        the elaborated sentence then drives the apply call. A failure at
        either step fails the whole request.
        """
        name = self.provider.name
        try:
            instruction = request.instruction
            if self.provider.supports_enhance:
                instruction = self.provider.enhance_instruction(request.code, instruction)
                log.info(f"[{name}] Enhanced instruction: {instruction}")

            result = self.provider.apply_edit(request.code, instruction,
                                              request.system_prompt)
        except Exception as e:
            log.error(f"[{name}] Edit failed: {e}")
            raise EditError(f"edit failed: {e}") from e

        log.info(f"[{name}] Edit produced {len(result)} chars")
        return result
