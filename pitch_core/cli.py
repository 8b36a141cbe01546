"""Developer CLI for checking saved model output and generating rubrics."""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from .completion import CompletionClient
from .config import CompletionConfig
from .drafts import validate_rubric_draft
from .exceptions import JSONExtractionError, PitchCoachError
from .extraction import extract_json
from .logging_config import configure_from_env
from .models import RubricDraft, SamplingParams
from .pipeline import RubricPipeline
from .schema import Rejected

console = Console()

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_NO_JSON = 2


def render_draft(draft: RubricDraft) -> None:
    """Print a rubric draft as a criteria table."""
    console.print(f"\n[bold cyan]{draft.title}[/bold cyan]")
    if draft.description:
        console.print(f"[dim]{draft.description}[/dim]")
    if draft.target_duration_seconds is not None:
        console.print(f"Target duration: [yellow]{draft.target_duration_seconds:g}s[/yellow]")

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Criterion")
    table.add_column("Description")
    table.add_column("Weight", justify="right")
    for index, criterion in enumerate(draft.criteria, start=1):
        table.add_row(str(index), criterion.name, criterion.description, f"{criterion.weight:g}")
    console.print(table)

    if draft.guiding_questions:
        console.print("\n[bold]Guiding questions:[/bold]")
        for question in draft.guiding_questions:
            console.print(f"  - {question}")


def check(path: str) -> int:
    """Run extraction and validation over saved model output."""
    text = sys.stdin.read() if path == "-" else Path(path).read_text(encoding="utf-8")

    try:
        value = extract_json(text)
    except JSONExtractionError as e:
        console.print(f"[bold red]No JSON found:[/bold red] {e}")
        return EXIT_NO_JSON

    result = validate_rubric_draft(value)
    if isinstance(result, Rejected):
        console.print(f"[bold red]Rejected[/bold red] ({result.kind.value}): {result.reason}")
        return EXIT_REJECTED

    render_draft(result)
    console.print(f"\n[bold green]✓ Accepted[/bold green] with {len(result.criteria)} criteria")
    return EXIT_ACCEPTED


def generate(context: str, target_seconds: Optional[float], rubric_type: Optional[str]) -> int:
    """Run the copilot pipeline against the configured model."""
    config = CompletionConfig.from_env()
    console.print(f"Model: [yellow]{config.model}[/yellow]")

    pipeline = RubricPipeline(CompletionClient(config))
    sampling = SamplingParams(temperature=config.temperature, max_tokens=config.max_tokens)

    with console.status("Generating rubric..."):
        draft = asyncio.run(
            pipeline.copilot(
                context,
                target_length_seconds=target_seconds,
                rubric_type=rubric_type,
                sampling=sampling,
            )
        )

    render_draft(draft)
    return EXIT_ACCEPTED


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="pitch-rubric",
        description="Pitch rubric tools - validate model output and generate rubrics",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", help="Extract and validate a rubric draft from saved output")
    check_parser.add_argument("file", help="File containing raw model output, or - for stdin")

    generate_parser = subparsers.add_parser("generate", help="Generate a rubric from a pitch description")
    generate_parser.add_argument("--context", required=True, help="What the pitch is about and who it is for")
    generate_parser.add_argument("--target-seconds", type=float, default=None, help="Target pitch length")
    generate_parser.add_argument("--rubric-type", type=str, default=None, help="e.g. investor, demo day, sales")

    args = parser.parse_args(argv)
    configure_from_env(default_level="WARNING")

    try:
        if args.command == "check":
            return check(args.file)
        return generate(args.context, args.target_seconds, args.rubric_type)

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130

    except JSONExtractionError as e:
        console.print(f"\n[bold red]No JSON found:[/bold red] {e}")
        return EXIT_NO_JSON

    except OSError as e:
        console.print(f"\n[bold red]Error:[/bold red] {e}")
        return EXIT_REJECTED

    except PitchCoachError as e:
        console.print(f"\n[bold red]{e.category.value} error:[/bold red] {e}")
        return EXIT_REJECTED


if __name__ == "__main__":
    sys.exit(main())
