"""
Console reporter for terminal output with colors and formatting
"""

from typing import List, Optional
from rich.console import Console
from rich.table import Table
from rich import box

from ..graph.models import AmbiguousCall, CallGraphStats


class ConsoleReporter:
    """Rich console reporter for call graph runs"""

    def __init__(self, use_colors: bool = True, quiet: bool = False, console: Optional[Console] = None):
        self.console = console or Console(force_terminal=use_colors, stderr=True)
        self.quiet = quiet

    def print_summary(self, stats: CallGraphStats) -> None:
        """Print statistics of a run"""
        if self.quiet:
            return

        table = Table(title="📊 Call Graph Summary", box=box.ROUNDED)
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right")

        table.add_row("Files Scanned", str(stats.files))
        table.add_row("Subroutines Defined", str(stats.definitions))
        table.add_row("Call Candidates", str(stats.call_candidates))
        table.add_row("", "")  # Separator
        table.add_row("Resolved Edges", str(stats.resolved_edges))
        table.add_row("Unresolved Calls", str(stats.unresolved_calls))
        table.add_row("Ignored Calls", str(stats.ignored_calls))
        table.add_row("Ambiguous Calls", str(stats.ambiguous_calls))
        table.add_row("", "")
        table.add_row("Start Nodes", str(stats.start_nodes))
        table.add_row("Nodes Plotted", f"{stats.visited_nodes}/{stats.graph_nodes}")
        table.add_row("Edges Plotted", str(stats.traversed_edges))

        self.console.print(table)

    def print_ambiguous(self, ambiguous_calls: List[AmbiguousCall]) -> None:
        """Print calls dropped because the callee is defined in several files"""
        if not ambiguous_calls:
            self.console.print("\n✅ [green]No ambiguous calls[/green]")
            return

        self.console.print(f"\n⚠️  [bold yellow]Ambiguous Calls ({len(ambiguous_calls)})[/bold yellow]")
        for call in ambiguous_calls:
            files = ", ".join(call.candidate_files)
            self.console.print(f"   {call.caller} → {call.callee}() [dim]defined in {files}[/dim]")

    def print_output(self, format: str, path: str) -> None:
        """Print where the graph was written"""
        if not self.quiet:
            self.console.print(f"📁 {format} graph written to {path}")

    def print_error(self, message: str) -> None:
        """Print an error, even in quiet mode"""
        self.console.print(f"❌ [bold red]Error:[/bold red] {message}")
