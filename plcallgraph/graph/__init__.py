"""
Call graph resolution, traversal and export
"""

from .builder import CallGraphBuilder
from .analyzer import ReachabilityAnalyzer
from .exporter import GraphExporter
from .models import CallGraph, TraversalResult, GraphExportOptions, GraphExportFormat

__all__ = ["CallGraphBuilder", "ReachabilityAnalyzer", "GraphExporter", "CallGraph", "TraversalResult",
           "GraphExportOptions", "GraphExportFormat"]
