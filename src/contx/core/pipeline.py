# src/contx/core/pipeline.py
import logging
import os
from pathlib import Path
from typing import List

from contx.core.formatter import format_output
from contx.core.ignore import build_matcher, load_gitignore
from contx.core.scanner import FileCollector
from contx.core.tree import render_project_tree
from contx.exceptions import CollectionCancelled, SelectionError
from contx.models import FileRecord, RunConfiguration, Selection

logger = logging.getLogger(__name__)


def validate_selection(selection: Selection) -> Path:
    """Returns the resolved workspace root, or raises SelectionError."""
    if not selection.paths:
        raise SelectionError("Please select one or more files or folders in the explorer.")
    if selection.workspace_root is None or not selection.workspace_root.is_dir():
        raise SelectionError("Unable to determine workspace folder.")

    root = Path(os.path.abspath(selection.workspace_root))
    for item in selection.paths:
        resolved = Path(os.path.abspath(item))
        if resolved != root and root not in resolved.parents:
            raise SelectionError(f"'{item}' is not inside the workspace folder '{root}'.")
    return root


def run_collection(selection: Selection, config: RunConfiguration, cancel_event=None) -> str:
    """
    Builds the snapshot for one user action: tree, file records, formatting.
    Only selection problems raise; filesystem problems degrade to placeholders.
    """
    root = validate_selection(selection)

    gitignore_text = load_gitignore(root) if config.use_gitignore else None
    matcher = build_matcher(config.exclude_patterns, gitignore_text)

    tree = None
    if config.include_project_tree:
        tree = render_project_tree(root, matcher, config.max_depth, cancel_event=cancel_event)
    if cancel_event is not None and cancel_event.is_set():
        raise CollectionCancelled([])

    collector = FileCollector.from_config(root, matcher, config, cancel_event=cancel_event)
    records: List[FileRecord] = []
    for item in selection.paths:
        records.extend(collector.collect(Path(os.path.abspath(item))))
        if collector.cancelled:
            raise CollectionCancelled(records)

    logger.info("Collected %d file(s) from %d selected item(s)", len(records), len(selection.paths))
    return format_output(config.output_format, tree, records, config.order)
