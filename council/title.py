"""Short conversation title from the first user message."""

import logging

from config.config_loader import PromptsConfig
from council.errors import TitleError
from council.gateway import GatewayClient

logger = logging.getLogger(__name__)

_MAX_TITLE_LEN = 50


def clean_title(raw: str) -> str:
    title = raw.strip().strip("\"'").strip()
    if len(title) > _MAX_TITLE_LEN:
        title = title[: _MAX_TITLE_LEN - 3] + "..."
    return title


async def generate_title(
    gateway: GatewayClient,
    content: str,
    model: str,
    prompts: PromptsConfig,
    timeout: float | None = None,
) -> str:
    """Generate a title for ``content``.

    Raises:
        TitleError: If the call fails or the reply is empty.
    """
    prompt = prompts.title.format(question=content)
    answer = await gateway.query(model, [{"role": "user", "content": prompt}], timeout=timeout)
    if answer.failed:
        raise TitleError(f"Title model {model} failed: {answer.error}")
    title = clean_title(answer.content)
    if not title:
        raise TitleError(f"Title model {model} returned an empty title")
    logger.debug("Generated title: %s", title)
    return title
