"""Terminal output handling using Rich library.

This module provides the OutputHandler class for all CLI terminal output.
Uses Rich library for colored, formatted text.
Supports verbosity levels and --no-color flag.
"""

from rich.console import Console

from src.sync.models import SyncReport


class OutputHandler:
    """Handles all terminal output using Rich library.

    Attributes:
        verbosity: Verbosity level (0=summary, 1=info, 2=debug)
        console: Rich Console instance for output

    Example:
        >>> handler = OutputHandler(verbosity=1, no_color=False)
        >>> handler.success("Sync completed")
    """

    def __init__(self, verbosity: int = 0, no_color: bool = False):
        """Initialize output handler.

        Args:
            verbosity: Verbosity level (0=summary, 1=info, 2=debug)
            no_color: Disable color output if True
        """
        self.verbosity = verbosity
        self.console = Console(
            force_terminal=not no_color,
            no_color=no_color,
            highlight=False,
        )

    def success(self, message: str) -> None:
        """Display success message in green."""
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        """Display error message in red."""
        self.console.print(f"[red]✗[/red] {message}", style="red")

    def warning(self, message: str) -> None:
        """Display warning message in yellow."""
        self.console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")

    def info(self, message: str) -> None:
        """Display info message (only if verbosity >= 1)."""
        if self.verbosity >= 1:
            self.console.print(message)

    def debug(self, message: str) -> None:
        """Display debug message (only if verbosity >= 2)."""
        if self.verbosity >= 2:
            self.console.print(f"[dim]{message}[/dim]")

    def print(self, message: str) -> None:
        """Display message without formatting."""
        self.console.print(message)

    def print_summary(self, report: SyncReport) -> None:
        """Display sync summary with color coding.

        Args:
            report: Report of the completed sync pass
        """
        self.console.print("\n[bold]Sync Summary:[/bold]")

        if report.created:
            self.console.print(f"  [green]+[/green] Created: {len(report.created)} page(s)")

        if report.updated:
            self.console.print(f"  [blue]↻[/blue] Updated: {len(report.updated)} page(s)")

        if report.deleted:
            self.console.print(f"  [red]✗[/red] Deleted: {len(report.deleted)} page(s)")

        if report.skipped:
            self.console.print(f"  [dim]─[/dim] Unchanged: {len(report.skipped)} page(s)")

        if report.failed:
            self.console.print(f"  [red]⚡[/red] Failed: {len(report.failed)} page(s)")
            if self.verbosity >= 1:
                for page_id in report.failed:
                    self.console.print(f"    • {page_id}")

        # Overall status
        if report.fetched_count == 0 and not report.deleted:
            self.console.print("\n[yellow]No pages to sync[/yellow]")
        elif report.failed:
            self.console.print("\n[red]Sync completed with failures[/red]")
        elif report.write_count == 0 and not report.deleted:
            self.console.print("\n[green]Already in sync. No changes detected.[/green]")
        else:
            self.console.print("\n[green]Sync completed successfully[/green]")
