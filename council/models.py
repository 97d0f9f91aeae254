"""Pure dataclasses for the council deliberation pipeline. No logic, no deps."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CouncilMember:
    model: str                       # provider model id, e.g. "openai/gpt-5.1-chat"
    system_prompt: str | None = None


@dataclass
class ModelAnswer:
    model: str
    content: str
    failed: bool = False
    error: str | None = None         # diagnostic when failed
    latency_sec: float = 0.0
    token_count: int | None = None
    reasoning_details: list | None = None  # provider reasoning trace, when returned

@dataclass
class AnonymizedAnswer:
    label: str                       # "Response A", "Response B", ...
    model: str
    content: str


@dataclass
class RankingResult:
    model: str                       # the ranker
    ranking_text: str
    parsed_ranking: list[str] = field(default_factory=list)


@dataclass
class AggregateRankingEntry:
    model: str
    label: str
    average_rank: float
    rankings_count: int


@dataclass
class FinalAnswer:
    model: str                       # the chairman
    content: str
    latency_sec: float = 0.0
    token_count: int | None = None


@dataclass
class StageTwoResult:
    rankings: list[RankingResult]
    label_to_model: dict[str, str]
    anonymized: list[AnonymizedAnswer] = field(default_factory=list)


@dataclass
class CouncilResult:
    content: str
    members: list[CouncilMember]
    chairman: str
    stage1: list[ModelAnswer]
    stage2: list[RankingResult]
    label_to_model: dict[str, str]
    aggregate_rankings: list[AggregateRankingEntry]
    stage3: FinalAnswer
    title: str | None = None
    duration_sec: float = 0.0
