"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI messages. Messages
go to stderr so rendered HTML written to stdout stays clean. Supports
verbosity levels and the --no-color flag.
"""

from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from src.parity_gate import MismatchReport
from src.render_pipeline import RenderDiagnostic


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console writing to stderr

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Rendered README.md")
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        self.verbosity = verbosity
        self.console = Console(
            stderr=True,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {escape(message)}", style="red")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(escape(message))

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def print_diagnostics(self, diagnostics: List[RenderDiagnostic]) -> None:
        """Display problems an export render recovered from."""
        for diagnostic in diagnostics:
            self.warning(f"{diagnostic.kind}: {diagnostic.message}")
            if diagnostic.report is not None and self.verbosity >= 1:
                self.print_mismatch(diagnostic.report)

    def print_mismatch(self, report: MismatchReport) -> None:
        """Display a mismatch report as a table of divergent segments.

        Args:
            report: MismatchReport from the parity gate
        """
        self.console.print(
            f"First difference at index {report.index} "
            f"(legacy {report.legacy_length} chars, native {report.candidate_length} chars, "
            f"delta {report.length_delta:+d})"
        )

        table = Table(title=f"{report.segment_count} divergent segment(s)", show_lines=True)
        table.add_column("#", justify="right")
        table.add_column("Legacy line:col")
        table.add_column("Legacy")
        table.add_column("Native line:col")
        table.add_column("Native")
        for segment in report.segments:
            table.add_row(
                str(segment.index),
                f"{segment.legacy_line}:{segment.legacy_column}",
                escape(segment.legacy_snippet),
                f"{segment.candidate_line}:{segment.candidate_column}",
                escape(segment.candidate_snippet),
            )
        self.console.print(table)

        if report.truncated:
            self.warning(f"Only the first {len(report.segments)} of {report.segment_count} segments are shown")
