"""OpenRouter provider using openai SDK (OpenAI-compatible API)."""

import logging
import os
import time

from openai import AsyncOpenAI

from config.config_loader import GatewayConfig
from council.models import ModelAnswer
from council.providers.base import ChatProvider, ProviderError

logger = logging.getLogger(__name__)

_PROVIDER_NAME = "openrouter"


class OpenRouterProvider(ChatProvider):
    """Any OpenAI-compatible chat-completion endpoint, OpenRouter by default."""

    def __init__(self, config: GatewayConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise ProviderError(_PROVIDER_NAME, f"Missing API key: {config.api_key_env}")
        # Timeouts are enforced by the gateway; one attempt per call.
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=config.base_url,
            max_retries=0,
            default_headers={"X-Title": "LLM Council"},
        )

    def name(self) -> str:
        return _PROVIDER_NAME

    async def complete(self, model: str, messages: list[dict[str, str]]) -> ModelAnswer:
        start = time.monotonic()
        kwargs = {"model": model, "messages": messages}
        if self._config.max_tokens:
            kwargs["max_tokens"] = self._config.max_tokens
        try:
            response = await self._client.chat.completions.create(**kwargs)
        except Exception as exc:
            raise ProviderError(_PROVIDER_NAME, f"API call failed for {model}: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(_PROVIDER_NAME, f"Empty response content from {model}")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.total_tokens

        reasoning = getattr(choice.message, "reasoning_details", None)

        logger.info("OpenRouter %s: %.2fs, %s tokens", model, latency, token_count)

        return ModelAnswer(
            model=model,
            content=choice.message.content,
            latency_sec=latency,
            token_count=token_count,
            reasoning_details=list(reasoning) if reasoning else None,
        )
