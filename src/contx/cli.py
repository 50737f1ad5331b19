# src/contx/cli.py
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict

import pyperclip

from contx.command import Severity, copy_to_clipboard
from contx.config import DEFAULT_SETTINGS, build_run_configuration, load_settings
from contx.exceptions import SettingsError
from contx.models import OutputFormat, Selection


def create_arg_parser():
    parser = argparse.ArgumentParser(
        prog="contx",
        description="Copy file and folder contents, with the project tree, to the clipboard as LLM context.",
    )
    parser.add_argument("paths", type=Path, nargs="*", help="Files or directories to copy (default: the workspace root)")
    parser.add_argument("--root", type=Path, default=None, help="Workspace root (default: current directory)")
    parser.add_argument("--settings", type=Path, default=None, help="JSON file with contx settings")

    parser.add_argument("-f", "--format", dest="outputFormat", choices=[f.value for f in OutputFormat], help="Output format")
    parser.add_argument("--max-depth", dest="maxDepth", type=int, help="Maximum depth of the project tree")
    parser.add_argument("--exclude", action="append", metavar="PATTERN", help="Extra exclude pattern (repeatable)")
    parser.add_argument("--max-file-size", dest="maxFileSize", type=int, metavar="BYTES", help="Largest file to include")
    parser.add_argument("--no-tree", dest="includeProjectTree", action="store_const", const=False, help="Omit the project tree")
    parser.add_argument("--no-gitignore", dest="ignoreGitIgnore", action="store_const", const=False, help="Do not apply .gitignore rules")
    parser.add_argument("--compress", dest="compressCode", action="store_const", const=True, help="Trim lines and drop empty ones")
    parser.add_argument("--remove-comments", dest="removeComments", action="store_const", const=True, help="Strip // and /* */ comments")

    parser.add_argument("--model", dest="llmModel", help="LLM model for token count and cost estimation")
    parser.add_argument("--max-tokens", dest="maxTokens", type=int, help="Warn above this many tokens (0 disables)")
    parser.add_argument("--count-tokens", dest="enableTokenCounting", action="store_const", const=True, help="Estimate tokens and cost (needs network on first use)")
    parser.add_argument("--no-token-warning", dest="enableTokenWarning", action="store_const", const=False, help="Never warn about the token limit")

    order_group = parser.add_mutually_exclusive_group()
    order_group.add_argument("--order", dest="executeOrder", help="Instruction appended after the file contents")
    order_group.add_argument("--no-order", action="store_true", help="Do not append any instruction")

    output_group = parser.add_mutually_exclusive_group()
    output_group.add_argument("-o", "--output", type=Path, default=None, help="Write to this file instead of the clipboard")
    output_group.add_argument("--stdout", action="store_true", help="Print to stdout instead of the clipboard")

    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    return parser


def collect_settings(args: argparse.Namespace) -> Dict[str, Any]:
    """Settings file first, then any command-line overrides on top."""
    settings: Dict[str, Any] = load_settings(args.settings) if args.settings else {}
    for key in DEFAULT_SETTINGS:
        value = getattr(args, key, None)
        if value is not None:
            settings[key] = value

    if args.exclude:
        base = settings.get("excludePatterns", settings.get("contx.excludePatterns"))
        if base is None:
            base = DEFAULT_SETTINGS["excludePatterns"]
        settings.pop("contx.excludePatterns", None)
        settings["excludePatterns"] = list(base) + args.exclude
    if args.no_order:
        settings.pop("contx.executeOrder", None)
        settings["executeOrder"] = None
    return settings


def main():
    parser = create_arg_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = build_run_configuration(collect_settings(args))
    except SettingsError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    root = (args.root or Path(os.getcwd())).absolute()
    paths = [p.absolute() for p in args.paths] or [root]
    selection = Selection(paths=tuple(paths), workspace_root=root)

    if args.output:
        destination = str(args.output)

        def sink(text: str):
            with open(args.output, "w", encoding="utf-8", newline="") as f:
                f.write(text)
    elif args.stdout:
        destination = "stdout"

        def sink(text: str):
            sys.stdout.write(text)
            sys.stdout.write("\n")
    else:
        destination = "clipboard"
        sink = pyperclip.copy

    failed = False

    def notify(message: str, severity: Severity):
        nonlocal failed
        if severity is Severity.ERROR:
            failed = True
        # Keep stdout clean when it carries the snapshot itself
        stream = sys.stdout if severity is Severity.INFO and not args.stdout else sys.stderr
        print(message, file=stream)

    try:
        copy_to_clipboard(selection, config, sink, notify, destination=destination)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)

    if failed:
        sys.exit(1)


if __name__ == "__main__":
    main()
