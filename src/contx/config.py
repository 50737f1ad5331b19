# src/contx/config.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping

from contx.exceptions import SettingsError
from contx.models import OutputFormat, RunConfiguration

logger = logging.getLogger(__name__)

SETTINGS_PREFIX = "contx."

# Dot files are always excluded, whatever the user configures.
DOT_FILE_PATTERN = ".*"

DEFAULT_EXCLUDE_PATTERNS = [
    "node_modules",
    "*.log",
]

DEFAULT_MAX_FILE_SIZE = 1024 * 1024  # 1MB

DEFAULT_ORDER = (
    "Please review the 'File Contents' provided above. Add comprehensive comments "
    "to explain the functionality of each function and key code blocks. Additionally, "
    "suggest any improvements or optimizations to enhance the code quality, "
    "performance, or maintainability."
)

MODEL_MAX_TOKENS = {
    "gpt-4": 8192,
    "gpt-4o": 128000,
    "gpt-4o-mini": 128000,
    "claude-3-5-sonnet-20240620": 200000,
    "claude-3-opus-20240229": 200000,
}

# USD per one million input tokens
MODEL_INPUT_PRICES = {
    "gpt-4": 30.0,
    "gpt-4o": 5.0,
    "gpt-4o-mini": 0.15,
    "claude-3-5-sonnet-20240620": 3.0,
    "claude-3-opus-20240229": 15.0,
}

DEFAULT_SETTINGS: Dict[str, Any] = {
    "ignoreGitIgnore": True,
    "maxDepth": 5,
    "excludePatterns": list(DEFAULT_EXCLUDE_PATTERNS),
    "outputFormat": OutputFormat.PLAINTEXT.value,
    "maxFileSize": DEFAULT_MAX_FILE_SIZE,
    "includeProjectTree": True,
    "compressCode": False,
    "removeComments": False,
    "llmModel": "gpt-4o",
    "maxTokens": None,
    "enableTokenWarning": True,
    "enableTokenCounting": False,
    "executeOrder": DEFAULT_ORDER,
}


def _expect_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise SettingsError(f"Setting '{key}' must be true or false, got {value!r}")
    return value


def _expect_int(key: str, value: Any, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise SettingsError(f"Setting '{key}' must be an integer >= {minimum}, got {value!r}")
    return value


def normalize_settings(settings: Mapping[str, Any]) -> Dict[str, Any]:
    """Merges user settings over the defaults, stripping the 'contx.' prefix."""
    merged = dict(DEFAULT_SETTINGS)
    for raw_key, value in settings.items():
        key = raw_key[len(SETTINGS_PREFIX):] if raw_key.startswith(SETTINGS_PREFIX) else raw_key
        if key not in DEFAULT_SETTINGS:
            logger.warning("Ignoring unknown setting '%s'", raw_key)
            continue
        merged[key] = value
    return merged


def build_run_configuration(settings: Mapping[str, Any]) -> RunConfiguration:
    """
    Validates host settings and freezes them into a RunConfiguration.
    Missing keys take the defaults from DEFAULT_SETTINGS.
    """
    s = normalize_settings(settings)

    patterns = s["excludePatterns"]
    if patterns is None:
        patterns = []
    if isinstance(patterns, str) or not all(isinstance(p, str) for p in patterns):
        raise SettingsError("Setting 'excludePatterns' must be a list of strings")

    try:
        output_format = OutputFormat(s["outputFormat"])
    except ValueError:
        choices = ", ".join(f.value for f in OutputFormat)
        raise SettingsError(f"Setting 'outputFormat' must be one of: {choices}")

    max_file_size = s["maxFileSize"]
    if max_file_size is None:
        max_file_size = DEFAULT_MAX_FILE_SIZE

    model = s["llmModel"]
    if model not in MODEL_MAX_TOKENS:
        raise SettingsError(
            f"Unknown llmModel '{model}'. Known models: {', '.join(MODEL_MAX_TOKENS)}"
        )

    max_tokens = s["maxTokens"]
    if max_tokens is not None:
        max_tokens = _expect_int("maxTokens", max_tokens, 0)

    order = s["executeOrder"]
    if order is not None and not isinstance(order, str):
        raise SettingsError("Setting 'executeOrder' must be a string or null")

    return RunConfiguration(
        use_gitignore=_expect_bool("ignoreGitIgnore", s["ignoreGitIgnore"]),
        max_depth=_expect_int("maxDepth", s["maxDepth"], 0),
        exclude_patterns=tuple(patterns),
        output_format=output_format,
        max_file_size=_expect_int("maxFileSize", max_file_size, 1),
        include_project_tree=_expect_bool("includeProjectTree", s["includeProjectTree"]),
        compress_code=_expect_bool("compressCode", s["compressCode"]),
        remove_comments=_expect_bool("removeComments", s["removeComments"]),
        llm_model=model,
        max_tokens=max_tokens,
        enable_token_warning=_expect_bool("enableTokenWarning", s["enableTokenWarning"]),
        enable_token_counting=_expect_bool("enableTokenCounting", s["enableTokenCounting"]),
        order=order or None,
    )


def load_settings(settings_file: Path) -> Dict[str, Any]:
    """Reads a JSON settings file (flat object of setting keys)."""
    try:
        with open(settings_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise SettingsError(f"Could not read settings file '{settings_file}': {e}")

    if not isinstance(data, dict):
        raise SettingsError(f"Settings file '{settings_file}' must contain a JSON object")
    return data
