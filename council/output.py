"""Rich console progress rendering and markdown transcript saving."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from council.events import (
    Complete,
    CouncilEvent,
    ErrorEvent,
    Stage1Complete,
    Stage1Start,
    Stage2Complete,
    Stage2Start,
    Stage3Complete,
    Stage3Start,
    TitleComplete,
)
from council.models import CouncilResult, ModelAnswer

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _answer_preview(answer: ModelAnswer, words: int = 50) -> str:
    """Return first N words of an answer."""
    all_words = answer.content.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _short_model(model: str) -> str:
    return model.split("/", 1)[1] if "/" in model else model


class ConsoleSink:
    """Renders pipeline events on a rich console as they arrive."""

    def __init__(self, out: Console | None = None) -> None:
        self._console = out or console

    def __call__(self, event: CouncilEvent) -> None:
        out = self._console
        if isinstance(event, Stage1Start):
            out.print(Rule("[bold cyan]Stage 1: Individual Responses[/bold cyan]"))
        elif isinstance(event, Stage1Complete):
            for answer in event.data:
                if answer.failed:
                    out.print(f"  [red]FAIL[/red] {answer.model}: {escape(answer.error or '')}")
                    continue
                out.print(
                    Panel(
                        Text(_answer_preview(answer)),
                        title=f"[bold]{answer.model}[/bold]",
                        subtitle=f"{answer.latency_sec:.1f}s",
                        border_style="dim",
                    )
                )
        elif isinstance(event, Stage2Start):
            out.print(Rule("[bold cyan]Stage 2: Peer Rankings[/bold cyan]"))
        elif isinstance(event, Stage2Complete):
            for ranking in event.data:
                order = " > ".join(
                    _short_model(event.label_to_model.get(label, label)) for label in ranking.parsed_ranking
                )
                out.print(f"  [bold]{ranking.model}[/bold]: {order or '[dim]no parseable ranking[/dim]'}")
            table = Table(title="Aggregate Rankings")
            table.add_column("#", justify="right")
            table.add_column("Model")
            table.add_column("Avg rank", justify="right")
            table.add_column("Votes", justify="right")
            for pos, entry in enumerate(event.aggregate_rankings, start=1):
                table.add_row(str(pos), entry.model, f"{entry.average_rank:.2f}", str(entry.rankings_count))
            out.print(table)
        elif isinstance(event, Stage3Start):
            out.print(Rule("[bold green]Stage 3: Chairman Synthesis[/bold green]"))
        elif isinstance(event, Stage3Complete):
            out.print(Text(f"Synthesized by: {event.data.model}", style="dim"))
            out.print(Markdown(event.data.content))
        elif isinstance(event, TitleComplete):
            out.print(Text(f"Title: {event.title}", style="dim"))
        elif isinstance(event, Complete):
            out.print(Rule(style="green"))
        elif isinstance(event, ErrorEvent):
            out.print(f"[bold red]Error:[/bold red] {escape(event.message)}")


class JsonLinesSink:
    """Writes each event as one JSON object per line."""

    def __init__(self, write=print) -> None:
        self._write = write

    def __call__(self, event: CouncilEvent) -> None:
        self._write(json.dumps(event.to_dict(), ensure_ascii=False))


def save_to_file(result: CouncilResult, output_dir: Path, slug_override: str | None = None) -> Path:
    """Save the full council transcript as a markdown file.

    Args:
        result: The completed CouncilResult.
        output_dir: Directory to save the file in.
        slug_override: If provided, use this as the filename stem instead of
            deriving one from the title or question text.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    if slug_override is not None:
        slug = slug_override
    else:
        slug = _slug(result.title or result.content)
    filepath = output_dir / f"{timestamp}_{slug}.md"

    heading = result.title or result.content[:80]
    answered = sum(1 for a in result.stage1 if not a.failed)
    lines: list[str] = [
        f"# LLM Council: {heading}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Council:** {', '.join(m.model for m in result.members)}",
        f"**Chairman:** {result.chairman}",
        f"**Answered:** {answered}/{len(result.stage1)}",
        f"**Duration:** {result.duration_sec:.1f}s",
        "",
        "## Question",
        "",
        result.content,
        "",
        "---",
        "",
        "## Stage 1: Individual Responses",
        "",
    ]

    for answer in result.stage1:
        lines.append(f"### {answer.model}")
        lines.append("")
        if answer.failed:
            lines.append(f"*Failed: {answer.error}*")
        else:
            lines.append(answer.content)
            lines.append("")
            lines.append(
                f"*Latency: {answer.latency_sec:.2f}s"
                + (f" | Tokens: {answer.token_count}" if answer.token_count else "")
                + "*"
            )
        lines.append("")

    lines += ["## Stage 2: Peer Rankings", ""]
    for ranking in result.stage2:
        lines.append(f"### {ranking.model}")
        lines.append("")
        lines.append(ranking.ranking_text)
        lines.append("")
        lines.append(f"*Parsed: {', '.join(ranking.parsed_ranking) or 'none'}*")
        lines.append("")

    if result.aggregate_rankings:
        lines += ["### Aggregate Rankings", "", "| # | Model | Label | Avg rank | Votes |", "|---|---|---|---|---|"]
        for pos, entry in enumerate(result.aggregate_rankings, start=1):
            lines.append(
                f"| {pos} | {entry.model} | {entry.label} | {entry.average_rank:.2f} | {entry.rankings_count} |"
            )
        lines.append("")

    lines += [
        f"## Stage 3: Final Answer (by {result.stage3.model})",
        "",
        result.stage3.content,
        "",
    ]

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Transcript saved to: %s", filepath)
    return filepath


class MarkdownTranscriptStore:
    """ConversationStore that writes each run as a markdown transcript."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.saved: list[Path] = []

    def append_run(self, result: CouncilResult) -> None:
        self.saved.append(save_to_file(result, self.output_dir))
