"""Stage 3: the chairman synthesizes the final answer."""

import logging

from config.config_loader import PromptsConfig
from council.errors import ChairmanError
from council.gateway import GatewayClient
from council.models import FinalAnswer, ModelAnswer, RankingResult

logger = logging.getLogger(__name__)


def _format_stage1(stage1: list[ModelAnswer]) -> str:
    return "\n\n".join(
        f"Model: {a.model}\nResponse: {a.content}" for a in stage1 if not a.failed
    )


def _format_stage2(rankings: list[RankingResult]) -> str:
    return "\n\n".join(f"Model: {r.model}\nRanking: {r.ranking_text}" for r in rankings)


def build_chairman_prompt(
    content: str,
    stage1: list[ModelAnswer],
    rankings: list[RankingResult],
    prompts: PromptsConfig,
) -> str:
    return prompts.synthesis.format(
        question=content,
        stage1=_format_stage1(stage1),
        stage2=_format_stage2(rankings),
    )


async def synthesize(
    gateway: GatewayClient,
    content: str,
    stage1: list[ModelAnswer],
    rankings: list[RankingResult],
    chairman: str,
    prompts: PromptsConfig,
    timeout: float | None = None,
) -> FinalAnswer:
    """Ask the chairman for the final answer.

    Raises:
        ChairmanError: If the chairman call fails, times out or returns
            empty content.
    """
    prompt = build_chairman_prompt(content, stage1, rankings, prompts)
    logger.info("Running synthesis via %s", chairman)

    answer = await gateway.query(chairman, [{"role": "user", "content": prompt}], timeout=timeout)
    if answer.failed:
        raise ChairmanError(chairman, answer.error or "unknown error")
    if not answer.content.strip():
        raise ChairmanError(chairman, "returned empty content")

    return FinalAnswer(
        model=chairman,
        content=answer.content,
        latency_sec=answer.latency_sec,
        token_count=answer.token_count,
    )
