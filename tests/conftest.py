"""
Shared fixtures for call graph tests
"""

import pytest

from plcallgraph.config import BodyExtent
from plcallgraph.parsing.scanner import PerlScanner


@pytest.fixture
def scan_sources():
    """Scan {file name: source text} mappings in insertion order"""
    def _scan(sources, strip_paths=True, body_extent=BodyExtent.COLUMN_ZERO):
        scanner = PerlScanner(strip_paths=strip_paths, body_extent=body_extent)
        for file_name, code in sources.items():
            scanner.scan_lines(file_name, code.strip('\n').splitlines())
        return scanner.result()
    return _scan


@pytest.fixture
def write_sources(tmp_path):
    """Write {file name: source text} mappings to disk and return the paths"""
    def _write(sources):
        paths = []
        for file_name, code in sources.items():
            path = tmp_path / file_name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(code.strip('\n') + '\n')
            paths.append(str(path))
        return paths
    return _write
