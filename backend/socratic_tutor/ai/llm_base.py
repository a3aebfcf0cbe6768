"""LLM provider interface and shared types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

LLMMessage = dict[str, str]


class LLMError(Exception):
    """Raised when an LLM provider fails unrecoverably.

    ``str(error)`` is the normalised, human-readable message shown to users.
    """
    pass


class LLMConfigurationError(LLMError):
    pass


class LLMAuthenticationError(LLMError):
    pass


class LLMRateLimitError(LLMError):
    pass


class LLMModelNotFoundError(LLMError):
    pass


@dataclass
class LLMUsage:
    """Token usage reported by the LLM API after a call completes."""
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(ABC):
    """Base class for chat-completion providers.

    After each generate() call completes, ``last_usage`` contains the token
    counts reported by the API. The tutor copies them into the reply's
    analytics event.
    """

    def __init__(self) -> None:
        self.last_usage: LLMUsage = LLMUsage()
        self.model_id: str = "unknown"

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        messages: list[LLMMessage],
        *,
        max_tokens: int = 200,
        temperature: float = 0.5,
        timeout: float = 15.0,
        json_mode: bool = False,
    ) -> str:
        """Return the completion text for ``system_prompt`` + ``messages``.

        Implementations raise ``LLMError`` (or a subclass) on failure and
        never retry on their own.
        """
        ...
