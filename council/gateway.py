"""Gateway client: one bounded call to one model, failures returned as data."""

import asyncio
import logging

from council.models import ModelAnswer
from council.providers.base import ChatProvider, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 120.0


def build_messages(
    messages: list[dict[str, str]],
    system_prompt: str | None = None,
) -> list[dict[str, str]]:
    """Return a new message list with the system prompt (if any) first."""
    built = [dict(m) for m in messages]
    if system_prompt:
        built.insert(0, {"role": "system", "content": system_prompt})
    return built


def failed_answer(model: str, error: str) -> ModelAnswer:
    return ModelAnswer(model=model, content="", failed=True, error=error)


class GatewayClient:
    """Wraps a ChatProvider with timeout enforcement.

    ``query`` never raises: transport errors, provider errors, empty
    completions and timeouts all come back as a failed ModelAnswer. Task
    cancellation is the one exception and always propagates.
    """

    def __init__(self, provider: ChatProvider, default_timeout: float = DEFAULT_TIMEOUT_SEC) -> None:
        self._provider = provider
        self.default_timeout = default_timeout

    @property
    def provider(self) -> ChatProvider:
        return self._provider

    async def query(
        self,
        model: str,
        messages: list[dict[str, str]],
        system_prompt: str | None = None,
        timeout: float | None = None,
    ) -> ModelAnswer:
        model = (model or "").strip()
        if not model:
            return failed_answer(model, "Model identifier cannot be empty")

        limit = timeout if timeout is not None else self.default_timeout
        payload = build_messages(messages, system_prompt)

        try:
            answer = await asyncio.wait_for(self._provider.complete(model, payload), timeout=limit)
        except TimeoutError:
            logger.warning("Model %s timed out after %ss", model, limit)
            return failed_answer(model, f"Request timed out after {limit}s")
        except ProviderError as exc:
            logger.warning("Model %s failed: %s", model, exc)
            return failed_answer(model, str(exc))
        except Exception as exc:
            logger.warning("Model %s unexpected failure: %s", model, exc)
            return failed_answer(model, f"Unexpected error: {exc}")

        if not answer.content:
            return failed_answer(model, "Empty response content")
        return answer
