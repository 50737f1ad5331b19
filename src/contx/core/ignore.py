# src/contx/core/ignore.py
import logging
from pathlib import Path, PurePath
from typing import Iterable, List, Optional, Union

import pathspec

from contx.config import DOT_FILE_PATTERN

logger = logging.getLogger(__name__)


class IgnoreMatcher:
    """
    Answers "is this path excluded?" for paths relative to the workspace root.
    Rules use the gitignore dialect, so a later '!pattern' can re-include a path.
    """

    def __init__(self, patterns: Iterable[str]):
        self.patterns: List[str] = list(patterns)
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", self.patterns)

    def is_excluded(self, relative_path: Union[str, PurePath], is_directory: bool = False) -> bool:
        # Always match on forward slashes, whatever the host OS uses
        rel = relative_path.as_posix() if isinstance(relative_path, PurePath) else str(relative_path).replace("\\", "/")
        rel = rel.strip("/")
        if not rel or rel == ".":
            return False
        # Directory-only rules such as "build/" need the trailing slash
        if is_directory:
            rel += "/"
        return self._spec.match_file(rel)


def load_gitignore(workspace_root: Path) -> Optional[str]:
    """
    Returns the text of <workspace_root>/.gitignore, or None if it is
    missing or unreadable. Never raises.
    """
    gitignore_file = workspace_root / ".gitignore"
    try:
        with open(gitignore_file, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.info(".gitignore not found or not readable: %s", e)
        return None


def build_matcher(exclude_patterns: Iterable[str], gitignore_text: Optional[str] = None) -> IgnoreMatcher:
    """
    Combines the configured exclude patterns, the implicit dot-file rule and
    the optional .gitignore content into one matcher.
    """
    lines = [p for p in exclude_patterns if p.strip()]
    if gitignore_text:
        lines.extend(gitignore_text.splitlines())
    # Last, so no negation rule can bring a dot file back
    lines.append(DOT_FILE_PATTERN)

    try:
        return IgnoreMatcher(lines)
    except ValueError as e:
        # A single malformed line must not take the whole run down
        logger.error("Error parsing ignore rules, retrying line by line: %s", e)
        return IgnoreMatcher(_valid_lines(lines))


def _valid_lines(lines: List[str]) -> List[str]:
    valid = []
    for line in lines:
        try:
            pathspec.PathSpec.from_lines("gitwildmatch", [line])
        except ValueError as e:
            logger.warning("Dropping invalid ignore pattern %r: %s", line, e)
            continue
        valid.append(line)
    return valid
