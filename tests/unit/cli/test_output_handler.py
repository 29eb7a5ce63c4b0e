"""Unit tests for cli.output module."""

from io import StringIO

from rich.console import Console

from src.cli.output import OutputHandler
from src.sync.models import SyncReport


def make_handler(verbosity=0):
    handler = OutputHandler(verbosity=verbosity, no_color=True)
    buffer = StringIO()
    handler.console = Console(file=buffer, no_color=True, highlight=False, width=120)
    return handler, buffer


class TestOutputHandlerMessages:
    """Test cases for message methods."""

    def test_info_hidden_at_verbosity_0(self):
        """info() prints nothing unless verbosity >= 1."""
        handler, buffer = make_handler(verbosity=0)
        handler.info("hidden")
        assert buffer.getvalue() == ""

    def test_info_and_debug_by_verbosity(self):
        handler, buffer = make_handler(verbosity=1)
        handler.info("shown")
        handler.debug("still hidden")

        assert "shown" in buffer.getvalue()
        assert "still hidden" not in buffer.getvalue()

    def test_success_error_warning_symbols(self):
        handler, buffer = make_handler()
        handler.success("done")
        handler.error("broken")
        handler.warning("careful")

        output = buffer.getvalue()
        assert "✓ done" in output
        assert "✗ broken" in output
        assert "⚠ careful" in output


class TestPrintSummary:
    """Test cases for OutputHandler.print_summary."""

    def test_successful_pass(self):
        handler, buffer = make_handler()
        report = SyncReport(created=['a', 'b'], updated=['c'], deleted=['d'], skipped=['e'], fetched_count=4)

        handler.print_summary(report)

        output = buffer.getvalue()
        assert "Sync Summary:" in output
        assert "Created: 2 page(s)" in output
        assert "Updated: 1 page(s)" in output
        assert "Deleted: 1 page(s)" in output
        assert "Unchanged: 1 page(s)" in output
        assert "Sync completed successfully" in output

    def test_no_changes(self):
        handler, buffer = make_handler()

        handler.print_summary(SyncReport(skipped=['a'], fetched_count=1))

        assert "Already in sync. No changes detected." in buffer.getvalue()

    def test_empty_database(self):
        handler, buffer = make_handler()

        handler.print_summary(SyncReport())

        assert "No pages to sync" in buffer.getvalue()

    def test_failures_listed_when_verbose(self):
        handler, buffer = make_handler(verbosity=1)

        handler.print_summary(SyncReport(created=['a'], failed=['bad-page'], fetched_count=2))

        output = buffer.getvalue()
        assert "Failed: 1 page(s)" in output
        assert "bad-page" in output
        assert "Sync completed with failures" in output
