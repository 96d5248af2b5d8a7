"""
End-to-end pipeline: scan, resolve, traverse
"""

from typing import Iterable

from pydantic import BaseModel

from .config import GraphConfig
from .graph.analyzer import ReachabilityAnalyzer
from .graph.builder import CallGraphBuilder
from .graph.models import CallGraph, CallGraphStats, TraversalResult
from .parsing.scanner import PerlScanner, ScanResult


class PipelineResult(BaseModel):
    """Output of every stage of one run"""
    scan: ScanResult
    call_graph: CallGraph
    traversal: TraversalResult
    stats: CallGraphStats


def run_pipeline(file_paths: Iterable[str], config: GraphConfig) -> PipelineResult:
    """Scan the files in order and extract the subgraph reachable from the start nodes"""
    scanner = PerlScanner(strip_paths=config.strip_paths, body_extent=config.body_extent)
    scan = scanner.scan_files(file_paths)

    builder = CallGraphBuilder(ignore_patterns=config.ignore_regexes)
    call_graph = builder.build(scan.definitions, scan.calls)

    analyzer = ReachabilityAnalyzer(call_graph)
    traversal = analyzer.analyze(pattern=config.start_regex)

    return PipelineResult(
        scan=scan,
        call_graph=call_graph,
        traversal=traversal,
        stats=CallGraphStats.from_run(scan, call_graph, traversal),
    )
