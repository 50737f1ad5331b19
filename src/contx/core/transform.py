# src/contx/core/transform.py
"""
Lexical content transforms applied to collected files.

Comment stripping is a regex over the raw text, not a parser: it does not
know which language a file is written in, and it will also eat comment-like
sequences that sit inside string literals (e.g. "http://example.com").
"""
import re
from enum import Enum

_COMMENT_RE = re.compile(r"//.*|/\*[\s\S]*?\*/")


class TransformMode(Enum):
    NONE = "none"
    STRIP_COMMENTS = "strip-comments"
    COMPRESS = "compress"
    BOTH = "both"

    @classmethod
    def from_flags(cls, remove_comments: bool, compress_code: bool) -> "TransformMode":
        if remove_comments and compress_code:
            return cls.BOTH
        if remove_comments:
            return cls.STRIP_COMMENTS
        if compress_code:
            return cls.COMPRESS
        return cls.NONE


def strip_comments(text: str) -> str:
    """Removes '// ...' line comments and '/* ... */' block comments."""
    return _COMMENT_RE.sub("", text)


def compress_whitespace(text: str) -> str:
    """Trims every line and drops the ones left empty."""
    lines = (line.strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


def apply_transforms(text: str, mode: TransformMode) -> str:
    # Comments go first, so lines emptied by stripping are then compressed away
    if mode in (TransformMode.STRIP_COMMENTS, TransformMode.BOTH):
        text = strip_comments(text)
    if mode in (TransformMode.COMPRESS, TransformMode.BOTH):
        text = compress_whitespace(text)
    return text
