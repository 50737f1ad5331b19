# src/contx/core/scanner.py
import codecs
import logging
import os
import re
from pathlib import Path
from typing import List, Optional, Set

from contx.core.ignore import IgnoreMatcher
from contx.core.transform import TransformMode, apply_transforms
from contx.core.tree import list_directory
from contx.models import FileRecord, RunConfiguration

logger = logging.getLogger(__name__)

OVERSIZE_PLACEHOLDER = (
    "[File content not included. Size ({size} bytes) exceeds the maximum allowed size ({limit} bytes)]"
)
BINARY_PLACEHOLDER = "[Binary file content not included]"
ERROR_PLACEHOLDER = "[Error reading file: {message}]"

SNIFF_BYTES = 1024

# C0 controls other than tab, LF and CR; none of them may appear in an XML 1.0 document
_CONTROL_BYTES = re.compile(rb"[\x00-\x08\x0b\x0c\x0e-\x1f]")


def is_binary_content(chunk: bytes) -> bool:
    """
    Sniffs bytes of a file: any control byte besides tab, LF and CR means binary.
    """
    if chunk.startswith(codecs.BOM_UTF8):
        chunk = chunk[len(codecs.BOM_UTF8):]
    return _CONTROL_BYTES.search(chunk) is not None


class FileCollector:
    def __init__(
        self,
        workspace_root: Path,
        matcher: IgnoreMatcher,
        max_file_size: int,
        compress_code: bool = False,
        remove_comments: bool = False,
        cancel_event=None,
    ):
        self.workspace_root = workspace_root
        self.matcher = matcher
        self.max_file_size = max_file_size
        self.transform_mode = TransformMode.from_flags(remove_comments, compress_code)
        # Anything with an is_set() method, e.g. threading.Event
        self.cancel_event = cancel_event
        self.cancelled = False

    @classmethod
    def from_config(cls, workspace_root: Path, matcher: IgnoreMatcher, config: RunConfiguration, cancel_event=None):
        return cls(
            workspace_root,
            matcher,
            config.max_file_size,
            compress_code=config.compress_code,
            remove_comments=config.remove_comments,
            cancel_event=cancel_event,
        )

    def _should_stop(self) -> bool:
        if not self.cancelled and self.cancel_event is not None and self.cancel_event.is_set():
            logger.info("Cancellation requested, no further files will be collected")
            self.cancelled = True
        return self.cancelled

    def _rel_path(self, path: Path) -> str:
        return os.path.relpath(path, self.workspace_root).replace(os.sep, "/")

    def collect(self, item_path: Path) -> List[FileRecord]:
        """Collects a selected item, recursing if it is a directory."""
        if item_path.is_dir():
            return self.collect_directory(item_path)
        record = self.collect_file(item_path)
        return [record] if record is not None else []

    def collect_file(self, file_path: Path) -> Optional[FileRecord]:
        """
        Produces the record for a single file, or None when it is excluded.
        Exactly one of: the text, the oversize notice, the binary notice,
        the error notice.
        """
        if self._should_stop():
            return None

        rel_path = self._rel_path(file_path)
        if self.matcher.is_excluded(rel_path):
            logger.debug("Excluded %s", rel_path)
            return None

        try:
            size = file_path.stat().st_size
            if size > self.max_file_size:
                logger.debug("Oversized %s (%d bytes)", rel_path, size)
                return FileRecord(
                    rel_path=rel_path,
                    content=OVERSIZE_PLACEHOLDER.format(size=size, limit=self.max_file_size),
                )

            with file_path.open("rb") as f:
                chunk = f.read(SNIFF_BYTES)
                if is_binary_content(chunk):
                    logger.debug("Binary %s", rel_path)
                    return FileRecord(rel_path=rel_path, content=BINARY_PLACEHOLDER)
                rest = f.read()
                if is_binary_content(rest):
                    logger.debug("Binary %s (past the first %d bytes)", rel_path, SNIFF_BYTES)
                    return FileRecord(rel_path=rel_path, content=BINARY_PLACEHOLDER)
                data = chunk + rest
        except OSError as e:
            logger.error("Error processing file %s: %s", rel_path, e)
            return FileRecord(rel_path=rel_path, content=ERROR_PLACEHOLDER.format(message=e))

        # Decode bytes directly so line endings reach the output untouched
        content = data.decode("utf-8", errors="replace")
        if self.transform_mode is not TransformMode.NONE:
            content = apply_transforms(content, self.transform_mode)
        return FileRecord(rel_path=rel_path, content=content)

    def collect_directory(self, dir_path: Path) -> List[FileRecord]:
        """
        Walks dir_path depth-first: entries in name order, each subdirectory
        fully collected before its next sibling.
        """
        records: List[FileRecord] = []
        self._walk(dir_path, records, set())
        return records

    def _walk(self, directory: Path, records: List[FileRecord], active: Set[str]):
        if self._should_stop():
            return

        real_dir = os.path.realpath(directory)
        if real_dir in active:
            logger.warning("Skipping %s: symlink loop back to %s", self._rel_path(directory), real_dir)
            return

        try:
            names = list_directory(directory)
        except OSError as e:
            logger.error("Error processing directory %s: %s", directory, e)
            return

        active.add(real_dir)
        for name in names:
            if self._should_stop():
                break
            path = directory / name
            is_dir = path.is_dir()
            rel_path = self._rel_path(path)
            if self.matcher.is_excluded(rel_path, is_directory=is_dir):
                logger.debug("Excluded %s", rel_path)
                continue

            if is_dir:
                self._walk(path, records, active)
            else:
                record = self.collect_file(path)
                if record is not None:
                    records.append(record)
        active.discard(real_dir)
