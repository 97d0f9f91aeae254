"""Pipeline sequencer: runs the three stages in order and emits progress events."""

import asyncio
import contextlib
import logging
import time
from typing import Protocol

from config.config_loader import AppConfig, PromptsConfig
from council.errors import CouncilError, InputValidationError, TitleError
from council.events import (
    Complete,
    ErrorEvent,
    EventSink,
    PipelineState,
    Stage1Complete,
    Stage1Start,
    Stage2Complete,
    Stage2Start,
    Stage3Complete,
    Stage3Start,
    TitleComplete,
)
from council.gateway import GatewayClient
from council.models import CouncilMember, CouncilResult
from council.ranking import calculate_aggregate_rankings
from council.stage1 import collect_responses
from council.stage2 import collect_rankings
from council.stage3 import synthesize
from council.title import generate_title

logger = logging.getLogger(__name__)


class ConversationStore(Protocol):
    """Receives each completed run for durable storage."""

    def append_run(self, result: CouncilResult) -> None: ...


def validate_request(
    content: str,
    members: list[CouncilMember] | None,
    chairman: str | None,
    default_members: list[CouncilMember],
    default_chairman: str,
) -> tuple[str, list[CouncilMember], str]:
    """Normalize a caller request, falling back to configured defaults.

    Raises:
        InputValidationError: Empty content or no usable council member.
    """
    content = (content or "").strip()
    if not content:
        raise InputValidationError("Message content cannot be empty.")

    source = members if members else default_members
    normalized = [
        CouncilMember(
            model=m.model.strip(),
            system_prompt=(m.system_prompt or "").strip() or None,
        )
        for m in source
        if m.model and m.model.strip()
    ]
    if not normalized:
        raise InputValidationError("At least one council model must be provided.")

    chairman = (chairman or "").strip() or default_chairman
    return content, normalized, chairman


async def _cancel(task: asyncio.Task | None) -> None:
    if task is None or task.done():
        return
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


class CouncilPipeline:
    """Runs Stage 1 -> Stage 2 -> Stage 3 for one message at a time.

    One instance may serve many runs sequentially; ``state`` reflects the
    most recent run.
    """

    def __init__(
        self,
        gateway: GatewayClient,
        prompts: PromptsConfig,
        default_members: list[CouncilMember],
        default_chairman: str,
        title_model: str | None = None,
        chairman_timeout: float | None = None,
        title_timeout: float | None = None,
    ) -> None:
        self._gateway = gateway
        self._prompts = prompts
        self._default_members = list(default_members)
        self._default_chairman = default_chairman
        self._title_model = title_model or default_chairman
        self._chairman_timeout = chairman_timeout
        self._title_timeout = title_timeout
        self.state = PipelineState.IDLE

    @classmethod
    def from_config(cls, gateway: GatewayClient, config: AppConfig) -> "CouncilPipeline":
        return cls(
            gateway=gateway,
            prompts=config.prompts,
            default_members=config.defaults.council,
            default_chairman=config.defaults.chairman,
            title_model=config.defaults.title_model,
            chairman_timeout=config.gateway.chairman_timeout_sec,
            title_timeout=config.gateway.title_timeout_sec,
        )

    async def _title_or_none(self, content: str) -> str | None:
        try:
            return await generate_title(
                self._gateway, content, self._title_model, self._prompts, timeout=self._title_timeout
            )
        except TitleError as exc:
            logger.warning("Title generation failed: %s", exc)
            return None
        except Exception as exc:
            logger.warning("Title generation raised unexpectedly: %s", exc)
            return None

    async def run(
        self,
        content: str,
        sink: EventSink,
        members: list[CouncilMember] | None = None,
        chairman: str | None = None,
        generate_title: bool = False,
        store: ConversationStore | None = None,
    ) -> CouncilResult:
        """Run the full deliberation for one user message.

        Args:
            content: The user's message.
            sink: Receives every progress event, in order.
            members: Council override; the configured council when empty.
            chairman: Chairman override; the configured chairman when blank.
            generate_title: Start title generation alongside the stages.
            store: Receives the accumulated result after ``complete``.

        Returns:
            CouncilResult with every stage's output.

        Raises:
            InputValidationError: Before any call or event, on a bad request.
            ChairmanError: Stage 3 failed; an ``error`` event was emitted.
            CouncilError: Every Stage 1 call failed; an ``error`` event was
                emitted.
            asyncio.CancelledError: The run was cancelled; nothing further is
                emitted or stored.
        """
        content, members, chairman = validate_request(
            content, members, chairman, self._default_members, self._default_chairman
        )
        start = time.monotonic()
        self.state = PipelineState.IDLE

        title_task: asyncio.Task | None = None
        if generate_title:
            title_task = asyncio.create_task(self._title_or_none(content))

        try:
            self.state = PipelineState.STAGE1_RUNNING
            sink(Stage1Start())
            stage1 = await collect_responses(self._gateway, content, members)
            self.state = PipelineState.STAGE1_DONE
            sink(Stage1Complete(data=stage1))
            if all(a.failed for a in stage1):
                raise CouncilError("All council members failed in Stage 1")

            self.state = PipelineState.STAGE2_RUNNING
            sink(Stage2Start())
            stage2 = await collect_rankings(self._gateway, content, members, stage1, self._prompts)
            aggregate = calculate_aggregate_rankings(stage2.rankings, stage2.label_to_model)
            self.state = PipelineState.STAGE2_DONE
            sink(
                Stage2Complete(
                    data=stage2.rankings,
                    label_to_model=stage2.label_to_model,
                    aggregate_rankings=aggregate,
                )
            )

            self.state = PipelineState.STAGE3_RUNNING
            sink(Stage3Start())
            final = await synthesize(
                self._gateway,
                content,
                stage1,
                stage2.rankings,
                chairman,
                self._prompts,
                timeout=self._chairman_timeout,
            )
            self.state = PipelineState.STAGE3_DONE
            sink(Stage3Complete(data=final))

            title = None
            if title_task is not None:
                title = await title_task
                if title:
                    sink(TitleComplete(title=title))
        except asyncio.CancelledError:
            self.state = PipelineState.CANCELLED
            await _cancel(title_task)
            logger.info("Council run cancelled")
            raise
        except Exception as exc:
            self.state = PipelineState.FAILED
            await _cancel(title_task)
            logger.error("Council run failed: %s", exc)
            sink(ErrorEvent(message=str(exc) or type(exc).__name__))
            raise

        self.state = PipelineState.COMPLETE
        sink(Complete())

        result = CouncilResult(
            content=content,
            members=members,
            chairman=chairman,
            stage1=stage1,
            stage2=stage2.rankings,
            label_to_model=stage2.label_to_model,
            aggregate_rankings=aggregate,
            stage3=final,
            title=title,
            duration_sec=time.monotonic() - start,
        )
        if store is not None:
            store.append_run(result)
        return result
