"""
Reachability analysis for call graphs
"""

import logging
import re
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from .models import CallGraph, TraversalResult

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Direction in which a visited node keeps expanding"""
    UP = "up"        # toward callers
    DOWN = "down"    # toward callees


class ReachabilityAnalyzer:
    """Selects start nodes and extracts the subgraph reachable from them"""

    def __init__(self, call_graph: CallGraph):
        self.call_graph = call_graph

    def select_start_nodes(self, pattern: Optional[re.Pattern] = None) -> List[str]:
        """Nodes matching the pattern, or every node without a known caller"""
        if pattern is not None:
            return sorted(node for node in self.call_graph.nodes if pattern.search(node))
        return self.call_graph.get_root_functions()

    def analyze(self, start_nodes: Optional[List[str]] = None,
                pattern: Optional[re.Pattern] = None) -> TraversalResult:
        """Walk callers and callees of each start node, sharing one visited set"""
        if start_nodes is None:
            start_nodes = self.select_start_nodes(pattern)

        result = TraversalResult()
        # A start node reached earlier still fans out both ways; only its
        # neighbours are guarded by the visited set.
        for node in sorted(start_nodes):
            result.visited.add(node)
            result.add_start(node)
            self._expand(node, Direction.UP, result)
            self._expand(node, Direction.DOWN, result)

        logger.debug("Traversal from %d start nodes visited %d nodes and %d edges",
                     len(result.start_nodes), len(result.visited), len(result.edges))
        return result

    def _expand(self, origin: str, direction: Direction, result: TraversalResult) -> None:
        """Depth-first expansion in one direction using an explicit stack"""
        stack: List[Tuple[str, Iterator[str]]] = [(origin, iter(self._neighbours(origin, direction)))]

        while stack:
            node, neighbours = stack[-1]
            neighbour = next(neighbours, None)
            if neighbour is None:
                stack.pop()
                continue

            result.edges.add(self._edge(node, neighbour, direction))
            if neighbour not in result.visited:
                result.visited.add(neighbour)
                stack.append((neighbour, iter(self._neighbours(neighbour, direction))))

    def _neighbours(self, node: str, direction: Direction) -> List[str]:
        if direction == Direction.UP:
            return self.call_graph.get_callers(node)
        return self.call_graph.get_callees(node)

    @staticmethod
    def _edge(node: str, neighbour: str, direction: Direction) -> Tuple[str, str]:
        if direction == Direction.UP:
            return (neighbour, node)
        return (node, neighbour)
