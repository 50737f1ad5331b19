# src/contx/core/tree.py
import logging
import os
from pathlib import Path
from typing import List

from contx.core.ignore import IgnoreMatcher

logger = logging.getLogger(__name__)


def list_directory(directory: Path) -> List[str]:
    """Entry names of a directory, sorted so output does not depend on the OS."""
    return sorted(os.listdir(directory))


def render_project_tree(root_dir: Path, matcher: IgnoreMatcher, max_depth: int, cancel_event=None) -> str:
    """
    Generates an indented text tree of root_dir, down to max_depth levels.
    With max_depth=0 only the immediate children of root_dir are listed.
    Once cancel_event is set, no further entries are added.
    """
    lines: List[str] = []

    def _cancelled() -> bool:
        return cancel_event is not None and cancel_event.is_set()

    def _render_recursive(directory: Path, depth: int, prefix: str):
        if depth > max_depth or _cancelled():
            return
        try:
            names = list_directory(directory)
        except OSError as e:
            logger.error("Error reading directory %s: %s", directory, e)
            return

        entries = []
        for name in names:
            path = directory / name
            is_dir = path.is_dir()
            rel_path = path.relative_to(root_dir)
            if matcher.is_excluded(rel_path, is_directory=is_dir):
                logger.debug("Tree: excluded %s", rel_path.as_posix())
                continue
            entries.append((name, path, is_dir))

        for i, (name, path, is_dir) in enumerate(entries):
            if _cancelled():
                return
            is_last = i == len(entries) - 1
            connector = "└── " if is_last else "├── "
            lines.append(f"{prefix}{connector}{name}")

            if is_dir:
                new_prefix = prefix + ("    " if is_last else "│   ")
                _render_recursive(path, depth + 1, new_prefix)

    _render_recursive(root_dir, 0, "")
    return "".join(f"{line}\n" for line in lines)
