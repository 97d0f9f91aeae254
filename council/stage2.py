"""Stage 2: anonymized peer ranking of the Stage 1 answers."""

import logging

from config.config_loader import PromptsConfig
from council.dispatch import DispatchTask, dispatch
from council.gateway import GatewayClient
from council.labels import LabelTable
from council.models import AnonymizedAnswer, CouncilMember, ModelAnswer, RankingResult, StageTwoResult
from council.ranking import parse_ranking_from_text

logger = logging.getLogger(__name__)


def format_anonymized(answers: list[AnonymizedAnswer]) -> str:
    """Render labeled answers without any model identity."""
    return "\n\n".join(f"{a.label}:\n{a.content}" for a in answers)


def build_ranking_prompt(content: str, answers: list[AnonymizedAnswer], prompts: PromptsConfig) -> str:
    return prompts.ranking.format(question=content, responses=format_anonymized(answers))


async def collect_rankings(
    gateway: GatewayClient,
    content: str,
    members: list[CouncilMember],
    stage1: list[ModelAnswer],
    prompts: PromptsConfig,
) -> StageTwoResult:
    """Have each member rank the anonymized Stage 1 answers.

    Args:
        gateway: Gateway used for the ranking calls.
        content: The original user question.
        members: Council members, aligned by index with ``stage1``.
        stage1: Stage 1 answers. Failed answers are neither labeled nor
            asked to rank.
        prompts: Prompt templates from config.

    Returns:
        StageTwoResult with rankings in member order and the label map.
    """
    pairs = [(m, a) for m, a in zip(members, stage1) if not a.failed]
    table = LabelTable([a for _, a in pairs])
    anonymized = table.anonymized()
    label_to_model = table.label_to_model()
    logger.debug("Stage 2 label map: %s", label_to_model)

    if not pairs:
        logger.warning("Stage 2: no successful answers to rank")
        return StageTwoResult(rankings=[], label_to_model=label_to_model, anonymized=anonymized)

    ranking_prompt = build_ranking_prompt(content, anonymized, prompts)
    tasks = [
        DispatchTask(
            model=m.model,
            messages=[{"role": "user", "content": ranking_prompt}],
            system_prompt=m.system_prompt,
        )
        for m, _ in pairs
    ]
    logger.info("Stage 2: %d rankers, %d anonymized answers", len(tasks), len(table))
    replies = await dispatch(gateway, tasks)

    rankings: list[RankingResult] = []
    for reply in replies:
        if reply.failed:
            continue
        parsed = parse_ranking_from_text(reply.content, table.labels)
        if len(parsed) < len(table):
            logger.info(
                "Ranking from %s names %d/%d labels", reply.model, len(parsed), len(table)
            )
        rankings.append(RankingResult(model=reply.model, ranking_text=reply.content, parsed_ranking=parsed))

    logger.info("Stage 2 complete: %d/%d rankings", len(rankings), len(tasks))
    return StageTwoResult(rankings=rankings, label_to_model=label_to_model, anonymized=anonymized)
