"""CLI entry point for the business card parser."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from bizcard.batch import BatchProcessor
from bizcard.errors import BusinessCardError
from bizcard.extractor.gemini import DEFAULT_MODEL, GeminiExtractor
from bizcard.parser import BusinessCardParser
from bizcard.preprocessing import detect_mime_type

app = typer.Typer(
    name="bizcard",
    help="Extract business card fields from images with Gemini.",
    add_completion=False,
)
console = Console()

ApiKeyOption = Annotated[
    str,
    typer.Option(
        "--api-key",
        envvar="GEMINI_API_KEY",
        help="Gemini API key (defaults to $GEMINI_API_KEY)",
        show_default=False,
    ),
]
FieldOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--field",
        "-f",
        help="Field to extract; repeat for several. Defaults to the standard set.",
    ),
]
ModelOption = Annotated[
    str,
    typer.Option(
        "--model",
        "-m",
        help="Gemini model name",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option(
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _create_parser(api_key: str, model: str) -> BusinessCardParser:
    """Create a parser backed by Gemini."""
    return BusinessCardParser(GeminiExtractor(api_key=api_key, model=model))


@app.command()
def parse(
    image_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the business card image",
            exists=True,
            readable=True,
            dir_okay=False,
        ),
    ],
    api_key: ApiKeyOption = "",
    fields: FieldOption = None,
    model: ModelOption = DEFAULT_MODEL,
    mime_type: Annotated[
        Optional[str],
        typer.Option(
            "--mime-type",
            help="Declared image mime type (detected from the file if omitted)",
        ),
    ] = None,
    output_json: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output raw JSON instead of formatted output",
        ),
    ] = False,
    verbose: VerboseOption = False,
):
    """Parse a business card image and print the extracted fields."""
    _configure_logging(verbose)
    try:
        parser = _create_parser(api_key, model)
        card = parser.parse_sync(
            image_path,
            fields or None,
            mime_type or detect_mime_type(image_path),
        )
    except (BusinessCardError, httpx.HTTPError, json.JSONDecodeError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if output_json:
        print(json.dumps(card, indent=2, ensure_ascii=False))
    else:
        _print_formatted(card)


def _print_formatted(card: dict) -> None:
    """Print extracted fields as a two-column table."""
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")

    for key, value in card.items():
        table.add_row(key, str(value) if value else "[dim]-[/dim]")

    console.print()
    console.print(table)
    console.print()


@app.command()
def batch(
    inputs: Annotated[
        list[Path],
        typer.Argument(
            help="Image files or directories to process",
        ),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output file path (JSON or CSV)",
        ),
    ],
    format: Annotated[
        str,
        typer.Option(
            "--format",
            "-F",
            help="Output format: json or csv",
        ),
    ] = "json",
    api_key: ApiKeyOption = "",
    fields: FieldOption = None,
    model: ModelOption = DEFAULT_MODEL,
    concurrency: Annotated[
        int,
        typer.Option(
            "--concurrency",
            "-c",
            min=1,
            help="Maximum number of concurrent requests",
        ),
    ] = 4,
    verbose: VerboseOption = False,
):
    """Process multiple business card images."""
    _configure_logging(verbose)

    # Validate format
    format = format.lower()
    if format not in ("json", "csv"):
        console.print(f"[red]Error:[/red] Invalid format '{format}'. Use 'json' or 'csv'.")
        raise typer.Exit(1)

    try:
        parser = _create_parser(api_key, model)
    except BusinessCardError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    processor = BatchProcessor(parser, concurrency=concurrency)

    # Collect images
    images = processor.collect_images(inputs)

    if not images:
        console.print("[yellow]Warning:[/yellow] No images found to process.")
        raise typer.Exit(0)

    console.print(f"Processing {len(images)} image(s)...")

    try:
        result = asyncio.run(processor.process(images, fields or None))
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    # Format output
    if format == "csv":
        content = processor.to_csv(result, fields or None)
    else:
        content = processor.to_json(result)

    output.write_text(content, encoding="utf-8")

    # Print summary
    console.print(
        f"[green]Done:[/green] {result.succeeded} succeeded, "
        f"{result.failed} failed, {result.total_time_ms:.1f}ms total"
    )
    console.print(f"Output: {output}")


@app.command()
def version():
    """Show version information."""
    from bizcard import __version__

    console.print(f"bizcard version {__version__}")


if __name__ == "__main__":
    app()
