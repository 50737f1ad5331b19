# src/contx/core/formatter.py
import re
from pathlib import PurePosixPath
from typing import Callable, Dict, List, Optional, Sequence, Union

from contx.models import FileRecord, OutputFormat

_XML_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "'": "&apos;",
    '"': "&quot;",
})

XML_INDENT = "    "

# Characters XML 1.0 cannot carry at all, not even as character references
_XML_ILLEGAL = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff\ud800-\udfff]")


def escape_xml(text: str) -> str:
    """Escapes the five XML special characters, one character at a time."""
    return text.translate(_XML_ESCAPES)


def _cdata(text: str) -> str:
    # "]]>" would close the section early, so split it across two sections.
    # Parsers turn a raw CR into LF, so CR goes between sections as a reference.
    text = _XML_ILLEGAL.sub("\ufffd", text)
    text = text.replace("]]>", "]]]]><![CDATA[>").replace("\r", "]]>&#13;<![CDATA[")
    return "<![CDATA[" + text + "]]>"


def _indent(text: str, indent: str) -> str:
    return "\n".join(indent + line for line in text.split("\n"))


def _language_tag(rel_path: str) -> str:
    return PurePosixPath(rel_path).suffix[1:]


def format_plaintext(tree: Optional[str], records: Sequence[FileRecord], order: Optional[str]) -> str:
    parts: List[str] = []
    if tree:
        parts.append("Project Structure:\n\n" + tree + "\n\n")
    parts.append("File Contents:\n\n")
    for record in records:
        parts.append(f"File: {record.rel_path}\n\n{record.content}\n\n")
    if order:
        parts.append("Execute Order:\n" + order + "\n")
    return "".join(parts)


def format_markdown(tree: Optional[str], records: Sequence[FileRecord], order: Optional[str]) -> str:
    parts: List[str] = []
    if tree:
        if not tree.endswith("\n"):
            tree += "\n"
        parts.append("# Project Structure\n\n```\n" + tree + "```\n\n")
    parts.append("# File Contents\n\n")
    for record in records:
        language = _language_tag(record.rel_path)
        parts.append(f"## {record.rel_path}\n\n```{language}\n{record.content}\n```\n\n")
    if order:
        parts.append("# Execute Order\n```\n" + order + "\n```\n")
    return "".join(parts)


def format_xml(tree: Optional[str], records: Sequence[FileRecord], order: Optional[str]) -> str:
    """
    Wraps everything in a single <contx> element. File bodies go into CDATA
    sections unescaped; only the path attribute, the tree and the order
    text are escaped.
    """
    parts: List[str] = ['<?xml version="1.0" encoding="UTF-8"?>\n<contx>\n']

    if tree:
        parts.append("  <project_structure>\n")
        parts.append(_indent(escape_xml(tree.rstrip("\n")), XML_INDENT) + "\n")
        parts.append("  </project_structure>\n\n")

    parts.append("  <file_contents>\n")
    for record in records:
        parts.append(f'    <file path="{escape_xml(record.rel_path)}">\n')
        parts.append(f"      {_cdata(record.content)}\n")
        parts.append("    </file>\n")
    parts.append("  </file_contents>\n")

    if order:
        parts.append("  <execute_order>\n")
        parts.append(_indent(escape_xml(order), XML_INDENT))
        parts.append("\n  </execute_order>\n\n")

    parts.append("</contx>")
    return "".join(parts)


FORMATTERS: Dict[OutputFormat, Callable[[Optional[str], Sequence[FileRecord], Optional[str]], str]] = {
    OutputFormat.PLAINTEXT: format_plaintext,
    OutputFormat.MARKDOWN: format_markdown,
    OutputFormat.XML: format_xml,
}


def format_output(
    output_format: Union[OutputFormat, str],
    tree: Optional[str],
    records: Sequence[FileRecord],
    order: Optional[str] = None,
) -> str:
    """Renders the snapshot; unknown formats fall back to plaintext."""
    try:
        output_format = OutputFormat(output_format)
    except ValueError:
        output_format = OutputFormat.PLAINTEXT
    return FORMATTERS[output_format](tree, records, order)
