"""Parallel fan-out of gateway calls with order-preserving fan-in."""

import asyncio
import logging
from dataclasses import dataclass

from council.gateway import GatewayClient, failed_answer
from council.models import ModelAnswer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchTask:
    model: str
    messages: list[dict[str, str]]
    system_prompt: str | None = None
    timeout: float | None = None


async def dispatch(gateway: GatewayClient, tasks: list[DispatchTask]) -> list[ModelAnswer]:
    """Run every task concurrently and wait for all of them.

    Returns one answer per task, aligned by index with ``tasks`` so duplicate
    models keep separate results. A failing task never cancels its siblings.
    """
    if not tasks:
        return []

    results = await asyncio.gather(
        *(gateway.query(t.model, t.messages, t.system_prompt, t.timeout) for t in tasks),
        return_exceptions=True,
    )

    answers: list[ModelAnswer] = []
    for task, result in zip(tasks, results):
        if isinstance(result, asyncio.CancelledError):
            raise result
        if isinstance(result, BaseException):
            logger.warning("Dispatch of %s raised: %s", task.model, result)
            answers.append(failed_answer(task.model, f"Unexpected error: {result}"))
        else:
            answers.append(result)
    return answers


def answers_by_model(answers: list[ModelAnswer]) -> dict[str, ModelAnswer]:
    """Key answers by model id. The first answer for a duplicated model wins."""
    mapping: dict[str, ModelAnswer] = {}
    for answer in answers:
        mapping.setdefault(answer.model, answer)
    return mapping
