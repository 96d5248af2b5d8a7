"""
Call graph construction: matches call candidates with definitions
"""

import logging
import re
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from .models import AmbiguousCall, CallCandidate, CallGraph, Definition, qualify

logger = logging.getLogger(__name__)


class CallGraphBuilder:
    """Resolves call candidates against definitions across files

    For each candidate the callee is looked up in this order:

    1. no definition anywhere: unresolved (builtins, modules, while/for...)
    2. callee matches an ignore pattern: dropped
    3. defined in the caller's own file: resolved there
    4. defined in exactly one other file: resolved cross-file
    5. defined in several other files: ambiguous, dropped
    """

    def __init__(self, ignore_patterns: Optional[Iterable[re.Pattern]] = None):
        self.ignore_patterns = list(ignore_patterns or [])

    def build(self, definitions: Iterable[Definition], calls: Iterable[CallCandidate]) -> CallGraph:
        """Build the resolved call graph"""
        graph = CallGraph()
        defining_files = self._index_definitions(definitions, graph)
        external: Dict[str, int] = defaultdict(int)
        ignored: Dict[str, int] = defaultdict(int)

        for call in calls:
            files = defining_files.get(call.callee)
            if not files:
                external[call.callee] += call.count
                continue

            if self._is_ignored(call.callee):
                ignored[call.callee] += call.count
                continue

            caller = qualify(call.file, call.caller)
            target_file = self._resolve_file(call, files)
            if target_file is None:
                graph.ambiguous_calls.append(AmbiguousCall(
                    caller=caller,
                    callee=call.callee,
                    candidate_files=files,
                ))
                logger.debug("Ambiguous call %s -> %s() defined in %s",
                             caller, call.callee, ", ".join(files))
                continue

            graph.add_edge(caller, qualify(target_file, call.callee), call.count)

        graph.external_calls = dict(external)
        graph.ignored_calls = dict(ignored)
        graph.ambiguous_calls.sort(key=lambda a: (a.caller, a.callee))

        logger.debug("Resolved %d edges, %d unresolved names, %d ambiguous calls",
                     graph.edge_count, len(graph.external_calls), len(graph.ambiguous_calls))
        return graph

    def _index_definitions(self, definitions: Iterable[Definition],
                           graph: CallGraph) -> Dict[str, List[str]]:
        """Record definitions on the graph and map callable names to sorted files"""
        files_by_name: Dict[str, set] = defaultdict(set)
        for definition in definitions:
            graph.definitions[definition.qualified_name] = definition
            if not definition.implicit:
                files_by_name[definition.name].add(definition.file)
        return {name: sorted(files) for name, files in files_by_name.items()}

    def _resolve_file(self, call: CallCandidate, files: List[str]) -> Optional[str]:
        """Pick the file defining the callee, or None when ambiguous"""
        if call.file in files:
            return call.file
        if len(files) == 1:
            return files[0]
        return None

    def _is_ignored(self, name: str) -> bool:
        return any(pattern.search(name) for pattern in self.ignore_patterns)
