"""Stage 1: every council member answers the question independently."""

import logging

from council.dispatch import DispatchTask, dispatch
from council.errors import InputValidationError
from council.gateway import GatewayClient
from council.models import CouncilMember, ModelAnswer

logger = logging.getLogger(__name__)


async def collect_responses(
    gateway: GatewayClient,
    content: str,
    members: list[CouncilMember],
) -> list[ModelAnswer]:
    """Collect one answer per member, in member order.

    Failed calls are kept as ``failed`` answers so the output always has
    ``len(members)`` entries.

    Raises:
        InputValidationError: If content or members are empty. No call is made.
    """
    if not content or not content.strip():
        raise InputValidationError("Message content cannot be empty.")
    if not members:
        raise InputValidationError("At least one council model must be provided.")

    logger.info("Stage 1: querying %d council members", len(members))

    tasks = [
        DispatchTask(
            model=m.model,
            messages=[{"role": "user", "content": content}],
            system_prompt=m.system_prompt,
        )
        for m in members
    ]
    answers = await dispatch(gateway, tasks)

    succeeded = sum(1 for a in answers if not a.failed)
    if succeeded < len(answers):
        logger.warning("Stage 1: only %d/%d members answered", succeeded, len(answers))
    else:
        logger.info("Stage 1 complete: %d/%d members answered", succeeded, len(answers))
    return answers
