"""
Graph export functionality for DOT, JSON and graphviz-rendered images
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import graphviz

from ..errors import RenderBackendUnavailable
from .models import CallGraph, GraphExportFormat, GraphExportOptions, TraversalResult, split_qualified

logger = logging.getLogger(__name__)

# Tried in order after the requested format fails; DOT text always works
FALLBACK_FORMATS = ["svg", "png", "dot"]

NODE_COLUMN = 40


class GraphExporter:
    """Exports the subgraph reached by a traversal"""

    def __init__(self, call_graph: CallGraph, traversal: TraversalResult):
        self.call_graph = call_graph
        self.traversal = traversal

    def to_dot(self, options: GraphExportOptions) -> str:
        """Serialize the induced subgraph as a GraphViz DOT document"""
        lines = [
            f'digraph "{_escape_dot_id(options.graph_name)}"',
            '    {',
            '',
            '    rankdir     = LR;   // layout from left to right',
            '    concentrate = true; // concentrate overlapping lines',
            '    ratio       = 0.7;',
            '    fontsize    = 24;',
            '',
            '    node [ shape=Mrecord ];',
            '',
            '',
            '    // nodes',
        ]

        indent = ' ' * (8 if options.clustering else 4)
        cluster_file = None
        for node_id in sorted(self.traversal.visited):
            file, name = split_qualified(node_id)

            if options.clustering and file != cluster_file:
                if cluster_file is not None:
                    lines.append('        }')
                cluster_file = file
                lines.extend(self._cluster_header(file))

            attrs = [f'label = "{self._node_label(file, name, options)}"']
            if self.traversal.is_start(node_id):
                attrs.append('color = green')

            quoted = f'"{_escape_dot_id(node_id)}"'
            lines.append(f'{indent}{quoted:<{NODE_COLUMN}} [{", ".join(attrs)}];')

        if options.clustering and cluster_file is not None:
            lines.append('        }')

        lines.extend(['', '', '    // edges'])
        for caller, callee in sorted(self.traversal.edges):
            quoted = f'"{_escape_dot_id(caller)}"'
            lines.append(f'    {quoted:<{NODE_COLUMN}} -> "{_escape_dot_id(callee)}";')

        lines.extend(['', '    }', ''])
        return '\n'.join(lines)

    def _cluster_header(self, file: str) -> List[str]:
        label = _escape_dot_id(file)
        return [
            '',
            f'    subgraph "cluster_{label}"',
            '        {',
            f'        label     = "{label}";',
            '        style     = "bold";',
            '        fontname  = "Times-Bold";',
            '        fontsize  = 48;',
            '        fontcolor = "red";',
            '',
        ]

    @staticmethod
    def _node_label(file: str, name: str, options: GraphExportOptions) -> str:
        if options.clustering:
            return _escape_dot_id(name)
        return f'{_escape_record(file)} | {_escape_record(name)}'

    def to_json(self, options: GraphExportOptions) -> str:
        """Serialize the induced subgraph as JSON"""
        nodes = []
        for node_id in sorted(self.traversal.visited):
            file, name = split_qualified(node_id)
            definition = self.call_graph.definitions.get(node_id)
            nodes.append({
                'id': node_id,
                'file': file,
                'name': name,
                'line': definition.line if definition else None,
                'is_start': self.traversal.is_start(node_id),
            })

        edges = [
            {
                'source': caller,
                'target': callee,
                'weight': self.call_graph.invokes.get(caller, {}).get(callee, 0),
            }
            for caller, callee in sorted(self.traversal.edges)
        ]

        graph_data = {
            'metadata': {
                'graph_name': options.graph_name,
                'clustering': options.clustering,
            },
            'statistics': {
                'total_nodes': len(nodes),
                'total_edges': len(edges),
                'start_nodes': len(self.traversal.start_nodes),
            },
            'nodes': nodes,
            'edges': edges,
        }
        return json.dumps(graph_data, indent=2) + '\n'

    def render(self, format: str, options: GraphExportOptions) -> bytes:
        """Render a single format; image formats go through the graphviz backend"""
        if format in ("dot", "gv"):
            return self.to_dot(options).encode('utf-8')
        if format == GraphExportFormat.JSON.value:
            return self.to_json(options).encode('utf-8')

        if format not in graphviz.FORMATS:
            raise RenderBackendUnavailable(format, "format not supported by graphviz")

        source = graphviz.Source(self.to_dot(options))
        try:
            return source.pipe(format=format)
        except graphviz.ExecutableNotFound:
            raise RenderBackendUnavailable(format, "graphviz 'dot' executable not found")
        except graphviz.CalledProcessError as e:
            raise RenderBackendUnavailable(format, f"graphviz exited with status {e.returncode}")

    def render_with_fallback(self, options: GraphExportOptions) -> Tuple[str, bytes]:
        """Render the requested format, falling back until something succeeds"""
        chain = fallback_chain(options.format)
        for format in chain:
            try:
                return format, self.render(format, options)
            except RenderBackendUnavailable as e:
                logger.warning("%s; falling back to the next format", e)
        raise RenderBackendUnavailable(options.format, "no usable format")

    def export(self, output_file: str, options: GraphExportOptions) -> Tuple[str, str]:
        """Write the graph to a file; returns (format written, path written)"""
        format, data = self.render_with_fallback(options)
        path = Path(output_file)
        if format != options.format:
            path = path.with_suffix(f'.{format}')

        path.write_bytes(data)
        logger.info("Wrote %s graph to %s", format, path)
        return format, str(path)


def fallback_chain(format: str) -> List[str]:
    """Requested format first, then the fallbacks not yet listed"""
    chain = [format]
    chain.extend(f for f in FALLBACK_FORMATS if f not in chain)
    return chain


def derive_output_path(destination: str, fmt: str, start_pattern: Optional[str] = None,
                       now: Optional[datetime] = None) -> str:
    """Use a file destination directly; derive a file name inside a directory"""
    path = Path(destination)
    if not (path.is_dir() or destination.endswith(('/', '\\'))):
        return destination

    base = None
    if start_pattern:
        base = '_'.join(re.findall(r'[A-Za-z0-9_-]+', start_pattern))
    if not base:
        base = (now or datetime.now()).strftime('%Y%m%d-%H%M%S')

    return str(path / f'{base}.callgraph.{fmt}')


def _escape_dot_id(text: str) -> str:
    """Escape text for quoted DOT identifiers"""
    return text.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')


_RECORD_SPECIAL = re.compile(r'([|{}<>\s])')


def _escape_record(text: str) -> str:
    """Escape record-label field separators"""
    return _RECORD_SPECIAL.sub(r'\\\1', _escape_dot_id(text))
