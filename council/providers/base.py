"""Abstract base for chat-completion providers."""

from abc import ABC, abstractmethod

from council.models import ModelAnswer


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class ChatProvider(ABC):
    """Abstract base for chat-completion providers."""

    @abstractmethod
    def name(self) -> str:
        """Return the short provider name (e.g. 'openrouter')."""
        ...

    @abstractmethod
    async def complete(self, model: str, messages: list[dict[str, str]]) -> ModelAnswer:
        """Send one message list to one model.

        Args:
            model: Model identifier understood by the provider.
            messages: Ordered role/content dicts, system prompt first if any.

        Returns:
            ModelAnswer with content and metadata (never failed).

        Raises:
            ProviderError: On API failure or empty completion.
        """
        ...
