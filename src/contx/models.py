# src/contx/models.py
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple


class OutputFormat(str, Enum):
    PLAINTEXT = "plaintext"
    MARKDOWN = "markdown"
    XML = "xml"


@dataclass(frozen=True)
class FileRecord:
    """Immutable (path, content) pair produced for every collected file."""
    rel_path: str
    content: str


@dataclass(frozen=True)
class Selection:
    """The items the user picked, plus the workspace they belong to."""
    paths: Tuple[Path, ...]
    workspace_root: Optional[Path]


@dataclass(frozen=True)
class CostEstimate:
    token_count: int
    cost_usd: float


@dataclass(frozen=True)
class RunConfiguration:
    """Snapshot of every setting used by a single invocation."""
    use_gitignore: bool
    max_depth: int
    exclude_patterns: Tuple[str, ...]
    output_format: OutputFormat
    max_file_size: int
    include_project_tree: bool
    compress_code: bool
    remove_comments: bool
    llm_model: str
    max_tokens: Optional[int]
    enable_token_warning: bool
    enable_token_counting: bool
    order: Optional[str]
