"""
Run configuration for the call graph pipeline
"""

import re
from enum import Enum
from pathlib import Path
from typing import List, Optional, Dict, Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class BodyExtent(str, Enum):
    """Heuristics for finding where a subroutine body ends"""
    COLUMN_ZERO = "column-zero"    # any line starting with '}'
    BRACE_DEPTH = "brace-depth"    # count unquoted braces


class GraphConfig(BaseModel):
    """Pre-parsed configuration consumed by the pipeline"""
    model_config = ConfigDict(extra="forbid")

    start: Optional[str] = Field(None, description="Regex selecting start nodes")
    ignore: List[str] = Field(default_factory=list, description="Regexes of callee names to drop")
    cluster: bool = Field(default=False, description="Group subroutines by file")
    strip_paths: bool = Field(default=True, description="Identify files by base name only")
    body_extent: BodyExtent = Field(default=BodyExtent.COLUMN_ZERO, description="Body end heuristic")
    formats: List[str] = Field(default_factory=lambda: ["dot"], description="Requested output formats")
    output: Optional[str] = Field(None, description="Output file or directory")
    report_ambiguous: bool = Field(default=False, description="Report ambiguous callees")

    @field_validator('start')
    @classmethod
    def _check_start(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            _compile(value)
        return value

    @field_validator('ignore')
    @classmethod
    def _check_ignore(cls, value: List[str]) -> List[str]:
        for pattern in value:
            _compile(pattern)
        return value

    @field_validator('formats')
    @classmethod
    def _normalize_formats(cls, value: List[str]) -> List[str]:
        formats = [f.strip().lower().lstrip('.') for f in value if f.strip()]
        return formats or ["dot"]

    @property
    def start_regex(self) -> Optional[re.Pattern]:
        if self.start is None:
            return None
        return re.compile(self.start, re.IGNORECASE)

    @property
    def ignore_regexes(self) -> List[re.Pattern]:
        return [re.compile(pattern) for pattern in self.ignore]

    @classmethod
    def from_yaml(cls, file_path: str) -> 'GraphConfig':
        """Load configuration from a YAML mapping"""
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {file_path} must be a mapping")

        return cls(**data)

    def merged(self, overrides: Dict[str, Any]) -> 'GraphConfig':
        """Return a copy with the non-None overrides applied and validated"""
        data = self.model_dump()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return GraphConfig(**data)


def _compile(pattern: str) -> re.Pattern:
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValueError(f"Invalid regular expression {pattern!r}: {e}")


def load_config(config_file: Optional[str] = None, **overrides: Any) -> GraphConfig:
    """Build a configuration from an optional YAML file and CLI overrides"""
    if config_file and Path(config_file).exists():
        base = GraphConfig.from_yaml(config_file)
    elif config_file:
        raise FileNotFoundError(f"Configuration file not found: {config_file}")
    else:
        base = GraphConfig()

    return base.merged(overrides)
