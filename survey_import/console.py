#!/usr/bin/env python3
"""
Console preview for survey question files.

Parses a JSON, CSV or TSV file with the same pipeline the API uses and shows
the questions, column mappings, warnings and skipped rows as rich tables.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from survey_import.api.schemas.shared import ImportFileType, ImportResult
from survey_import.core.config import settings
from survey_import.core.logging_config import configure_logging
from survey_import.domain.imports.mapper import describe_confidence
from survey_import.domain.imports.orchestrator import (
    detect_file_type,
    parse_import,
    serialize_invalid_rows_to_csv,
)


class ImportPreviewConsole:
    """Renders an ImportResult to the terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_errors(self, result: ImportResult) -> None:
        error_panel = Panel(
            "\n".join(f"[red]✗ {escape(error)}[/red]" for error in result.errors),
            title="Import blocked",
            border_style="red"
        )
        self.console.print(error_panel)

    def print_questions(self, result: ImportResult) -> None:
        table = Table(title=f"Questions ({len(result.questions)})")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Text", style="white")
        table.add_column("Type", style="cyan")
        table.add_column("Options", style="white")
        table.add_column("Req.", justify="center")
        table.add_column("Range", justify="right")
        table.add_column("Points", justify="right")

        for question in result.questions:
            low = "" if question.min_value is None else str(question.min_value)
            high = "" if question.max_value is None else str(question.max_value)
            value_range = f"{low}-{high}" if (low or high) else ""
            table.add_row(
                question.id,
                escape(question.text),
                question.type.value,
                escape(" | ".join(question.options)),
                "[green]✓[/green]" if question.required else "",
                value_range,
                "" if question.points is None else str(question.points),
            )

        self.console.print(table)

    def print_column_mappings(self, result: ImportResult) -> None:
        if not result.column_mappings:
            return

        table = Table(title="Column Mappings")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Header", style="white")
        table.add_column("Field", style="cyan")
        table.add_column("Confidence", style="white")

        for mapping in result.column_mappings:
            table.add_row(
                str(mapping.header_index + 1),
                escape(mapping.header_text),
                mapping.target_field.value if mapping.target_field else "[dim]-[/dim]",
                describe_confidence(mapping.confidence),
            )

        self.console.print(table)

    def print_invalid_rows(self, result: ImportResult) -> None:
        if not result.invalid_rows:
            return

        table = Table(title="Skipped Rows")
        table.add_column("Row", style="dim", justify="right")
        table.add_column("Reason", style="yellow")
        table.add_column("Values", style="white")

        for invalid_row in result.invalid_rows:
            table.add_row(
                str(invalid_row.row_index),
                escape(invalid_row.reason),
                escape(" | ".join(invalid_row.raw_values)),
            )

        self.console.print(table)

    def print_warnings(self, result: ImportResult) -> None:
        if not result.warnings:
            return
        warning_panel = Panel(
            "\n".join(f"[yellow]• {escape(warning)}[/yellow]" for warning in result.warnings),
            title="Warnings",
            border_style="yellow"
        )
        self.console.print(warning_panel)

    def render(self, result: ImportResult) -> None:
        if result.title:
            self.console.print(f"[bold]{escape(result.title)}[/bold]")
        if result.description:
            self.console.print(f"[dim]{escape(result.description)}[/dim]")

        if result.is_fatal:
            self.print_errors(result)
            self.print_column_mappings(result)
            return

        self.print_column_mappings(result)
        self.print_questions(result)
        self.print_invalid_rows(result)
        self.print_warnings(result)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Preview a survey question import file")
    parser.add_argument("file", type=Path, help="JSON, CSV or TSV file to parse")
    parser.add_argument(
        "--type",
        dest="file_type",
        choices=[file_type.value for file_type in ImportFileType],
        help="Declared file type (default: detected from the file extension)",
    )
    parser.add_argument(
        "--export-invalid",
        type=Path,
        metavar="OUT.csv",
        help="Write skipped rows with their reasons to a CSV file",
    )
    parser.add_argument("--json", action="store_true", help="Print the raw ImportResult JSON instead of tables")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level (default: %(default)s)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    console = Console()

    try:
        content = args.file.read_bytes()
    except OSError as e:
        console.print(f"[red]Could not read {escape(str(args.file))}: {escape(str(e))}[/red]")
        return 2

    file_type = ImportFileType(args.file_type) if args.file_type else detect_file_type(args.file.name)

    try:
        result = parse_import(content, file_type)
    except UnicodeDecodeError:
        console.print("[red]Failed to parse file. Please check the format and try again.[/red]")
        return 2

    if args.json:
        console.print_json(result.model_dump_json(by_alias=True))
    else:
        ImportPreviewConsole(console).render(result)

    if args.export_invalid and result.invalid_rows:
        headers = [mapping.header_text for mapping in result.column_mappings]
        args.export_invalid.write_text(
            serialize_invalid_rows_to_csv(result.invalid_rows, headers), encoding="utf-8"
        )
        console.print(f"[dim]Wrote {len(result.invalid_rows)} skipped row(s) to {escape(str(args.export_invalid))}[/dim]")

    return 1 if result.is_fatal else 0


if __name__ == "__main__":
    sys.exit(main())
