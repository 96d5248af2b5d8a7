"""
Data models for call graph representation
"""

from typing import Any, Dict, List, Set, Optional, Tuple
from pydantic import BaseModel, Field, PrivateAttr
from enum import Enum


MAIN_SCOPE = "main"


def qualify(file: str, name: str) -> str:
    """Build the qualified identifier of a subroutine"""
    return f"{file}:{name}"


def split_qualified(node_id: str) -> Tuple[str, str]:
    """Split a qualified identifier into (file, name)"""
    file, _, name = node_id.rpartition(':')
    return file, name


class Definition(BaseModel):
    """A subroutine declaration found by the scanner"""
    name: str = Field(..., description="Subroutine name")
    file: str = Field(..., description="Normalized source file name")
    line: int = Field(..., description="Line number of the declaration")
    implicit: bool = Field(default=False, description="Top-level scope of a file, not a real declaration")

    @property
    def qualified_name(self) -> str:
        return qualify(self.file, self.name)


class CallCandidate(BaseModel):
    """Something that looks like a call, attributed to the enclosing subroutine"""
    caller: str = Field(..., description="Calling subroutine name")
    file: str = Field(..., description="File containing the call")
    callee: str = Field(..., description="Called name")
    count: int = Field(default=1, description="Number of occurrences")


class AmbiguousCall(BaseModel):
    """A call whose target is defined in several other files"""
    caller: str = Field(..., description="Qualified caller identifier")
    callee: str = Field(..., description="Called subroutine name")
    candidate_files: List[str] = Field(..., description="Files defining the callee")


class CallGraph(BaseModel):
    """Resolved call graph with mirrored invokes / invoked-by indexes"""
    definitions: Dict[str, Definition] = Field(default_factory=dict, description="Definitions by qualified name")
    invokes: Dict[str, Dict[str, int]] = Field(default_factory=dict, description="caller -> callee -> weight")
    invoked_by: Dict[str, Dict[str, int]] = Field(default_factory=dict, description="callee -> caller -> weight")
    external_calls: Dict[str, int] = Field(default_factory=dict, description="Unresolved call counts by name")
    ignored_calls: Dict[str, int] = Field(default_factory=dict, description="Ignored call counts by name")
    ambiguous_calls: List[AmbiguousCall] = Field(default_factory=list, description="Dropped ambiguous calls")

    def add_edge(self, caller: str, callee: str, weight: int = 1) -> None:
        """Insert an edge into both indexes"""
        forward = self.invokes.setdefault(caller, {})
        forward[callee] = forward.get(callee, 0) + weight
        backward = self.invoked_by.setdefault(callee, {})
        backward[caller] = backward.get(caller, 0) + weight

    @property
    def nodes(self) -> Set[str]:
        return set(self.invokes) | set(self.invoked_by)

    @property
    def edge_count(self) -> int:
        return sum(len(callees) for callees in self.invokes.values())

    def get_callers(self, node_id: str) -> List[str]:
        """Get nodes that call the specified node, sorted"""
        return sorted(self.invoked_by.get(node_id, {}))

    def get_callees(self, node_id: str) -> List[str]:
        """Get nodes called by the specified node, sorted"""
        return sorted(self.invokes.get(node_id, {}))

    def get_root_functions(self) -> List[str]:
        """Get nodes that are never called by others"""
        return sorted(node for node in self.nodes if not self.invoked_by.get(node))


class TraversalResult(BaseModel):
    """Induced subgraph reached from the start nodes"""
    start_nodes: List[str] = Field(default_factory=list, description="Start nodes in traversal order")
    visited: Set[str] = Field(default_factory=set, description="All visited nodes")
    edges: Set[Tuple[str, str]] = Field(default_factory=set, description="Traversed edges")

    _start_set: Set[str] = PrivateAttr(default_factory=set)

    def model_post_init(self, __context: Any) -> None:
        self._start_set = set(self.start_nodes)

    def add_start(self, node_id: str) -> None:
        """Tag a node as a start node, keeping first-seen order"""
        if node_id not in self._start_set:
            self._start_set.add(node_id)
            self.start_nodes.append(node_id)

    def is_start(self, node_id: str) -> bool:
        return node_id in self._start_set


class GraphExportFormat(str, Enum):
    """Textual export formats handled without the graphviz backend"""
    DOT = "dot"
    JSON = "json"


class GraphExportOptions(BaseModel):
    """Options for graph export"""
    format: str = Field(default=GraphExportFormat.DOT.value, description="Requested format")
    clustering: bool = Field(default=False, description="Group subroutines by file")
    graph_name: str = Field(default="perl_call_graph", description="Name of the DOT digraph")


class CallGraphStats(BaseModel):
    """Statistics about a run"""
    files: int = Field(..., description="Files scanned")
    definitions: int = Field(..., description="Subroutine declarations found")
    call_candidates: int = Field(..., description="Distinct call candidates")
    resolved_edges: int = Field(..., description="Edges in the resolved graph")
    unresolved_calls: int = Field(..., description="Calls to names without a definition")
    ignored_calls: int = Field(..., description="Calls dropped by ignore patterns")
    ambiguous_calls: int = Field(..., description="Calls dropped as ambiguous")
    graph_nodes: int = Field(..., description="Nodes in the resolved graph")
    start_nodes: int = Field(default=0, description="Start nodes selected")
    visited_nodes: int = Field(default=0, description="Nodes in the induced subgraph")
    traversed_edges: int = Field(default=0, description="Edges in the induced subgraph")

    @classmethod
    def from_run(cls, scan, graph: CallGraph,
                 traversal: Optional[TraversalResult] = None) -> 'CallGraphStats':
        """Create statistics from scan, resolution and traversal results"""
        return cls(
            files=len(scan.files),
            definitions=len([d for d in scan.definitions if not d.implicit]),
            call_candidates=len(scan.calls),
            resolved_edges=graph.edge_count,
            unresolved_calls=sum(graph.external_calls.values()),
            ignored_calls=sum(graph.ignored_calls.values()),
            ambiguous_calls=len(graph.ambiguous_calls),
            graph_nodes=len(graph.nodes),
            start_nodes=len(traversal.start_nodes) if traversal else 0,
            visited_nodes=len(traversal.visited) if traversal else 0,
            traversed_edges=len(traversal.edges) if traversal else 0,
        )
