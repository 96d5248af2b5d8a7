"""
Test cases for the console reporter
"""

import pytest
from rich.console import Console

from plcallgraph.graph.models import AmbiguousCall, CallGraphStats
from plcallgraph.report.console import ConsoleReporter


def make_stats():
    return CallGraphStats(
        files=2, definitions=5, call_candidates=9, resolved_edges=4,
        unresolved_calls=3, ignored_calls=1, ambiguous_calls=1, graph_nodes=6,
        start_nodes=1, visited_nodes=4, traversed_edges=3,
    )


class TestConsoleReporter:
    """Test rich console output"""

    def setup_method(self):
        """Set up a recording console"""
        self.console = Console(record=True, width=120)

    def test_default_console_on_stderr(self):
        """Test that the reporter writes to stderr when no console is given"""
        reporter = ConsoleReporter()
        assert reporter.console.stderr

    def test_summary(self):
        """Test the statistics table"""
        ConsoleReporter(console=self.console).print_summary(make_stats())
        text = self.console.export_text()

        assert "Files Scanned" in text
        assert "4/6" in text

    def test_ambiguous_listing(self):
        """Test one line per ambiguous call with its candidate files"""
        calls = [AmbiguousCall(caller="a.pl:foo", callee="shared", candidate_files=["b.pl", "c.pl"])]
        ConsoleReporter(console=self.console).print_ambiguous(calls)
        text = self.console.export_text()

        assert "a.pl:foo" in text
        assert "b.pl, c.pl" in text

    def test_quiet_keeps_errors(self):
        """Test that quiet mode hides the summary but not errors"""
        reporter = ConsoleReporter(quiet=True, console=self.console)
        reporter.print_summary(make_stats())
        reporter.print_error("Cannot read x.pl: gone")
        text = self.console.export_text()

        assert "Files Scanned" not in text
        assert "Cannot read x.pl" in text


if __name__ == "__main__":
    pytest.main([__file__])
