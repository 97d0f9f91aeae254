"""Progress events emitted by the pipeline, and its lifecycle states."""

import enum
from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar

from council.models import AggregateRankingEntry, FinalAnswer, ModelAnswer, RankingResult


class PipelineState(enum.Enum):
    IDLE = "idle"
    STAGE1_RUNNING = "stage1_running"
    STAGE1_DONE = "stage1_done"
    STAGE2_RUNNING = "stage2_running"
    STAGE2_DONE = "stage2_done"
    STAGE3_RUNNING = "stage3_running"
    STAGE3_DONE = "stage3_done"
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Stage1Start:
    type: ClassVar[str] = "stage1_start"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class Stage1Complete:
    type: ClassVar[str] = "stage1_complete"
    data: list[ModelAnswer]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": [asdict(a) for a in self.data]}


@dataclass(frozen=True)
class Stage2Start:
    type: ClassVar[str] = "stage2_start"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class Stage2Complete:
    type: ClassVar[str] = "stage2_complete"
    data: list[RankingResult]
    label_to_model: dict[str, str] = field(default_factory=dict)
    aggregate_rankings: list[AggregateRankingEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "data": [asdict(r) for r in self.data],
            "metadata": {
                "label_to_model": dict(self.label_to_model),
                "aggregate_rankings": [asdict(e) for e in self.aggregate_rankings],
            },
        }


@dataclass(frozen=True)
class Stage3Start:
    type: ClassVar[str] = "stage3_start"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class Stage3Complete:
    type: ClassVar[str] = "stage3_complete"
    data: FinalAnswer

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": asdict(self.data)}


@dataclass(frozen=True)
class TitleComplete:
    type: ClassVar[str] = "title_complete"
    title: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "data": {"title": self.title}}


@dataclass(frozen=True)
class Complete:
    type: ClassVar[str] = "complete"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class ErrorEvent:
    type: ClassVar[str] = "error"
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "message": self.message}


CouncilEvent = (
    Stage1Start
    | Stage1Complete
    | Stage2Start
    | Stage2Complete
    | Stage3Start
    | Stage3Complete
    | TitleComplete
    | Complete
    | ErrorEvent
)

EventSink = Callable[[CouncilEvent], None]
