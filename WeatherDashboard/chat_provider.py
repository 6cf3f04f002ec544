"""Chat provider abstraction - allows swapping different language-model APIs."""
from abc import ABC, abstractmethod

from chat_data import ChatResult


class ChatProviderBase(ABC):
    """Abstract base class for language-model completion providers."""

    @abstractmethod
    def complete(self, prompt: str) -> ChatResult:
        """
        Generate a reply for a single-turn prompt.

        Implementations must not raise: every transport, HTTP or payload
        problem is reported as a ChatFailure.

        Args:
            prompt: Full prompt text, persona and user message included

        Returns:
            ChatSuccess with the generated text, or ChatFailure with a reason
        """
        pass


class ChatProviderError(Exception):
    """Raised inside a provider when a reply cannot be obtained; reported as ChatFailure."""
    pass
