"""
Exceptions raised by the call graph pipeline
"""


class CallGraphError(Exception):
    """Base class for call graph errors"""


class InputError(CallGraphError):
    """A source file could not be opened or read"""

    def __init__(self, file_path: str, reason: str):
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Cannot read {file_path}: {reason}")


class RenderBackendUnavailable(CallGraphError):
    """The graphviz backend cannot produce the requested format"""

    def __init__(self, format: str, reason: str):
        self.format = format
        self.reason = reason
        super().__init__(f"Cannot render '{format}': {reason}")
