"""
Line-oriented scanner for Perl subroutine definitions and calls
"""

import logging
import re
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..config import BodyExtent
from ..errors import InputError
from ..graph.models import MAIN_SCOPE, CallCandidate, Definition
from . import line_utils

logger = logging.getLogger(__name__)


class ScanState(BaseModel):
    """Running context threaded through scan_line"""
    model_config = ConfigDict(frozen=True)

    file: str = Field(..., description="Normalized current file name")
    subroutine: str = Field(default=MAIN_SCOPE, description="Enclosing subroutine")
    in_pod: bool = Field(default=False, description="Inside a POD block")
    after_end: bool = Field(default=False, description="Past __END__ / __DATA__")
    body_open: bool = Field(default=False, description="Opening brace of the body seen")
    depth: int = Field(default=0, description="Brace depth inside the current body")


class LineEvents(BaseModel):
    """Records produced by one line"""
    definition: Optional[Definition] = None
    caller: str = MAIN_SCOPE
    calls: List[str] = Field(default_factory=list)


class ScanResult(BaseModel):
    """Everything the scanner found across all files"""
    files: List[str] = Field(default_factory=list, description="Normalized file names, in scan order")
    definitions: List[Definition] = Field(default_factory=list, description="Subroutine definitions")
    calls: List[CallCandidate] = Field(default_factory=list, description="Call candidates with counts")

    def defined_names(self) -> Dict[str, List[str]]:
        """Map each explicitly defined name to the sorted files defining it"""
        names: Dict[str, List[str]] = {}
        for definition in self.definitions:
            if not definition.implicit:
                names.setdefault(definition.name, []).append(definition.file)
        return {name: sorted(set(files)) for name, files in names.items()}


def normalize_file_name(file_path: str, strip_paths: bool = True) -> str:
    """Identity of a source file: base name only, or the path as given"""
    if strip_paths:
        return re.sub(r'.*[\\/]', '', file_path)
    return file_path


def scan_line(state: ScanState, line: str, line_number: int,
              body_extent: BodyExtent = BodyExtent.COLUMN_ZERO) -> Tuple[ScanState, LineEvents]:
    """Apply the per-line policy and return the next state with the line's records"""
    events = LineEvents(caller=state.subroutine)

    if state.after_end:
        return state, events

    if state.in_pod:
        if line_utils.POD_END.match(line):
            state = state.model_copy(update={'in_pod': False})
        return state, events

    if line_utils.END_MARKER.match(line):
        return state.model_copy(update={'after_end': True}), events

    if line_utils.POD_START.match(line):
        if not line_utils.POD_END.match(line):
            state = state.model_copy(update={'in_pod': True})
        return state, events

    if line_utils.SKIP_LINE.match(line):
        return state, events

    name = line_utils.match_declaration(line)
    if name:
        events.definition = Definition(name=name, file=state.file, line=line_number)
        update = {'subroutine': name, 'body_open': False, 'depth': 0}
        if body_extent == BodyExtent.BRACE_DEPTH:
            depth = line_utils.brace_delta(line)
            update.update({'body_open': depth > 0, 'depth': max(depth, 0)})
        return state.model_copy(update=update), events

    if body_extent == BodyExtent.COLUMN_ZERO:
        if line_utils.BODY_END.match(line):
            return state.model_copy(update={'subroutine': MAIN_SCOPE}), events
        events.calls = line_utils.find_calls(line)
        return state, events

    # Brace depth: calls on the closing line still belong to the body
    events.calls = line_utils.find_calls(line)
    if state.subroutine == MAIN_SCOPE:
        return state, events

    depth = state.depth + line_utils.brace_delta(line)
    if depth > 0:
        return state.model_copy(update={'body_open': True, 'depth': depth}), events
    if state.body_open or depth < 0:
        return state.model_copy(update={'subroutine': MAIN_SCOPE, 'body_open': False, 'depth': 0}), events
    return state, events


class PerlScanner:
    """Collects definitions and call candidates from an ordered list of files"""

    def __init__(self, strip_paths: bool = True,
                 body_extent: BodyExtent = BodyExtent.COLUMN_ZERO):
        self.strip_paths = strip_paths
        self.body_extent = body_extent
        self._files: List[str] = []
        self._definitions: Dict[Tuple[str, str], Definition] = {}
        self._calls: Counter = Counter()

    def scan_files(self, file_paths: Iterable[str]) -> ScanResult:
        """Scan every file in order; any unreadable file aborts the scan"""
        for file_path in file_paths:
            self.scan_file(file_path)
        return self.result()

    def scan_file(self, file_path: str) -> None:
        """Scan a single file from disk"""
        try:
            with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
                self.scan_lines(file_path, f)
        except OSError as e:
            raise InputError(file_path, e.strerror or str(e)) from e

    def scan_lines(self, file_path: str, lines: Iterable[str]) -> None:
        """Scan the lines of one file; context and numbering start fresh"""
        file = normalize_file_name(file_path, self.strip_paths)
        if file not in self._files:
            self._files.append(file)
        self._define(Definition(name=MAIN_SCOPE, file=file, line=0, implicit=True))

        state = ScanState(file=file)
        line_count = 0
        for line_number, raw_line in enumerate(lines, start=1):
            line_count = line_number
            state, events = scan_line(state, raw_line.rstrip('\r\n'), line_number, self.body_extent)
            if events.definition:
                self._define(events.definition)
            for callee in events.calls:
                self._calls[(events.caller, file, callee)] += 1

        logger.debug("Scanned %s: %d lines", file, line_count)

    def result(self) -> ScanResult:
        definitions = sorted(self._definitions.values(), key=lambda d: (d.file, d.name))
        calls = [
            CallCandidate(caller=caller, file=file, callee=callee, count=count)
            for (caller, file, callee), count in sorted(self._calls.items())
        ]
        return ScanResult(files=list(self._files), definitions=definitions, calls=calls)

    def _define(self, definition: Definition) -> None:
        key = (definition.file, definition.name)
        existing = self._definitions.get(key)
        if definition.implicit and existing is not None:
            return
        self._definitions[key] = definition
