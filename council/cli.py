"""Click CLI: loads config, builds the gateway, runs one council deliberation."""

import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from config.config_loader import AppConfig, load_config, parse_model_list
from council.errors import CouncilError, InputValidationError
from council.events import EventSink
from council.gateway import GatewayClient
from council.models import CouncilMember
from council.output import ConsoleSink, JsonLinesSink, MarkdownTranscriptStore, console
from council.pipeline import CouncilPipeline
from council.providers.base import ProviderError
from council.providers.openrouter import OpenRouterProvider
from council.question_file import parse_question_file

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )


def _build_gateway(config: AppConfig) -> GatewayClient:
    provider = OpenRouterProvider(config.gateway)
    return GatewayClient(provider, default_timeout=config.gateway.timeout_sec)


def _resolve_members(models_arg: str | None, file_members: list[CouncilMember]) -> list[CouncilMember] | None:
    """--models beats frontmatter; None means the configured council."""
    if models_arg:
        return [CouncilMember(model=m) for m in parse_model_list(models_arg)]
    if file_members:
        return file_members
    return None


def _first_set(*values):
    for value in values:
        if value is not None:
            return value
    return None


@click.command()
@click.argument("question", required=False)
@click.option("--file", "question_file", type=click.Path(exists=True, dir_okay=False),
              help="Read question from .md file (frontmatter: models, chairman, title)")
@click.option("--models", default=None, help="Comma-separated council model ids, overrides config")
@click.option("--chairman", default=None, help="Chairman model id (default: from config)")
@click.option("--title/--no-title", "want_title", default=None,
              help="Generate a short title alongside the deliberation (default: on)")
@click.option("--output", "output_path", default=None, help="Transcript directory (default: from config)")
@click.option("--no-save", is_flag=True, default=False, help="Do not write a markdown transcript")
@click.option("--json", "json_lines", is_flag=True, default=False, help="Print events as JSON lines")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
def main(
    question: str | None,
    question_file: str | None,
    models: str | None,
    chairman: str | None,
    want_title: bool | None,
    output_path: str | None,
    no_save: bool,
    json_lines: bool,
    verbose: bool,
) -> None:
    """LLM Council -- several models answer, rank each other, a chairman decides.

    \b
    Examples:
      llm-council "Should we use REST or GraphQL?"
      llm-council "SQL or NoSQL?" --models openai/gpt-5.1-chat,x-ai/grok-4
      llm-council --file question.md --chairman anthropic/claude-sonnet-4.5
      llm-council "Monorepo vs polyrepo?" --json --no-save
    """
    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except FileNotFoundError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    file_members: list[CouncilMember] = []
    file_chairman: str | None = None
    file_title: bool | None = None
    if question_file:
        parsed = parse_question_file(Path(question_file))
        question_text = parsed.content
        file_members = parsed.members
        file_chairman = parsed.chairman
        file_title = parsed.title
    elif question:
        question_text = question
    else:
        console.print("[bold red]Error:[/bold red] Provide a QUESTION argument or --file.")
        sys.exit(1)

    try:
        gateway = _build_gateway(config)
    except ProviderError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}. Check API keys in .env.")
        sys.exit(1)

    pipeline = CouncilPipeline.from_config(gateway, config)
    sink: EventSink = JsonLinesSink(click.echo) if json_lines else ConsoleSink()
    store = None
    if not no_save:
        store = MarkdownTranscriptStore(Path(output_path) if output_path else config.defaults.output_dir)

    try:
        asyncio.run(
            pipeline.run(
                question_text,
                sink,
                members=_resolve_members(models, file_members),
                chairman=_first_set(chairman, file_chairman),
                generate_title=_first_set(want_title, file_title, True),
                store=store,
            )
        )
    except InputValidationError as exc:
        console.print(f"[bold red]Invalid request:[/bold red] {escape(str(exc))}")
        sys.exit(1)
    except CouncilError as exc:
        logger.debug("Run failed: %s", exc)
        sys.exit(1)

    if store is not None and store.saved and not json_lines:
        console.print(f"\n[dim]Saved to: {store.saved[-1]}[/dim]")


if __name__ == "__main__":
    main()
