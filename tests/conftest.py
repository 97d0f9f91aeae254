"""Shared pytest fixtures."""

import asyncio
import inspect
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AppConfig, DefaultsConfig, GatewayConfig, PromptsConfig
from council.events import CouncilEvent
from council.gateway import GatewayClient
from council.models import CouncilMember, ModelAnswer
from council.pipeline import CouncilPipeline
from council.providers.base import ChatProvider


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        ranking="RANK: {question}\n\n{responses}\n\nFINAL RANKING:",
        synthesis="CHAIR: {question}\n\n{stage1}\n\n{stage2}",
        title="TITLE: {question}",
    )


@pytest.fixture
def sample_gateway_config() -> GatewayConfig:
    return GatewayConfig(
        base_url="https://openrouter.test/api/v1",
        api_key_env="TEST_OPENROUTER_KEY",
        timeout_sec=30,
        chairman_timeout_sec=60,
        title_timeout_sec=10,
        max_tokens=None,
    )


@pytest.fixture
def sample_members() -> list[CouncilMember]:
    return [
        CouncilMember("openai/gpt-5.1-chat"),
        CouncilMember("google/gemini-3-pro-preview"),
        CouncilMember("anthropic/claude-sonnet-4.5", system_prompt="You are a careful reviewer."),
    ]


@pytest.fixture
def sample_app_config(
    tmp_path: Path,
    sample_gateway_config: GatewayConfig,
    sample_prompts_config: PromptsConfig,
    sample_members: list[CouncilMember],
) -> AppConfig:
    return AppConfig(
        gateway=sample_gateway_config,
        defaults=DefaultsConfig(
            chairman="google/gemini-3-pro-preview",
            title_model="google/gemini-2.5-flash",
            output_dir=tmp_path / "output",
            council=sample_members,
        ),
        prompts=sample_prompts_config,
    )


def stage_of(messages: list[dict[str, str]]) -> str:
    """Classify a request by the prompt prefix used in sample_prompts_config."""
    text = messages[-1]["content"]
    for prefix, stage in (("RANK:", "rank"), ("CHAIR:", "chair"), ("TITLE:", "title")):
        if text.startswith(prefix):
            return stage
    return "answer"


class MockProvider(ChatProvider):
    """Test double ChatProvider.

    ``replies`` maps model id to a string, an exception to raise, or a
    (possibly async) callable taking the message list.
    """

    def __init__(self, replies: dict | None = None, default: str = "Mock response") -> None:
        self.replies = replies or {}
        self.default = default
        # Shadow the class method with an AsyncMock for call assertions.
        self.complete = AsyncMock(side_effect=self._respond)  # type: ignore[assignment]

    def name(self) -> str:
        return "mock"

    async def complete(self, model: str, messages: list[dict[str, str]]) -> ModelAnswer:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return await self._respond(model, messages)

    def _lookup(self, model: str, messages: list[dict[str, str]]):
        return self.replies.get(model, self.default)

    async def _respond(self, model: str, messages: list[dict[str, str]]) -> ModelAnswer:
        reply = self._lookup(model, messages)
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = reply(messages)
            if inspect.isawaitable(reply):
                reply = await reply
        return ModelAnswer(model=model, content=reply, latency_sec=0.01, token_count=7)

    def calls(self) -> list[tuple[str, list[dict[str, str]]]]:
        return [(c.args[0], c.args[1]) for c in self.complete.await_args_list]


class CouncilProvider(MockProvider):
    """MockProvider routing replies by pipeline stage, then by model."""

    def __init__(
        self,
        answers: dict | None = None,
        rankings: dict | None = None,
        chairman_reply="## Final\nThe council agrees.",
        title_reply="Council Title",
    ) -> None:
        super().__init__()
        self.by_stage = {
            "answer": answers or {},
            "rank": rankings or {},
        }
        self.chairman_reply = chairman_reply
        self.title_reply = title_reply

    def _lookup(self, model: str, messages: list[dict[str, str]]):
        stage = stage_of(messages)
        if stage == "chair":
            return self.chairman_reply
        if stage == "title":
            return self.title_reply
        default = f"Answer from {model}" if stage == "answer" else "FINAL RANKING:\n1. Response A"
        return self.by_stage[stage].get(model, default)

    def calls_for(self, stage: str) -> list[tuple[str, list[dict[str, str]]]]:
        return [(m, msgs) for m, msgs in self.calls() if stage_of(msgs) == stage]


async def hang(messages):
    await asyncio.sleep(9999)


class EventRecorder:
    """Sink that keeps every event for assertions."""

    def __init__(self) -> None:
        self.events: list[CouncilEvent] = []

    def __call__(self, event: CouncilEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> list[str]:
        return [e.type for e in self.events]


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def make_pipeline(sample_prompts_config, sample_members):
    def _make(provider: ChatProvider, timeout: float = 5.0, **kwargs) -> CouncilPipeline:
        return CouncilPipeline(
            gateway=GatewayClient(provider, default_timeout=timeout),
            prompts=sample_prompts_config,
            default_members=kwargs.pop("default_members", sample_members),
            default_chairman=kwargs.pop("default_chairman", "google/gemini-3-pro-preview"),
            title_model=kwargs.pop("title_model", "google/gemini-2.5-flash"),
            **kwargs,
        )

    return _make
