# tests/test_config.py
import json
from dataclasses import FrozenInstanceError

import pytest

from contx.config import DEFAULT_ORDER, build_run_configuration, load_settings
from contx.exceptions import SettingsError
from contx.models import OutputFormat


def test_defaults():
    config = build_run_configuration({})

    assert config.use_gitignore is True
    assert config.max_depth == 5
    assert config.exclude_patterns == ("node_modules", "*.log")
    assert config.output_format is OutputFormat.PLAINTEXT
    assert config.max_file_size == 1048576
    assert config.include_project_tree is True
    assert config.compress_code is False
    assert config.remove_comments is False
    assert config.llm_model == "gpt-4o"
    assert config.max_tokens is None
    assert config.enable_token_warning is True
    assert config.enable_token_counting is False
    assert config.order == DEFAULT_ORDER


def test_prefixed_and_bare_keys():
    config = build_run_configuration({"contx.maxDepth": 2, "outputFormat": "xml"})
    assert config.max_depth == 2
    assert config.output_format is OutputFormat.XML


def test_unknown_keys_are_ignored():
    assert build_run_configuration({"contx.colour": "blue"}) == build_run_configuration({})


def test_configuration_is_frozen():
    config = build_run_configuration({})
    with pytest.raises(FrozenInstanceError):
        config.max_depth = 9


def test_empty_order_means_no_order():
    assert build_run_configuration({"executeOrder": ""}).order is None
    assert build_run_configuration({"executeOrder": None}).order is None


def test_null_file_size_uses_default():
    assert build_run_configuration({"maxFileSize": None}).max_file_size == 1048576


@pytest.mark.parametrize("settings", [
    {"outputFormat": "html"},
    {"llmModel": "gpt-2"},
    {"maxDepth": -1},
    {"maxDepth": True},
    {"maxFileSize": 0},
    {"maxTokens": -5},
    {"compressCode": "yes"},
    {"excludePatterns": "node_modules"},
    {"excludePatterns": ["ok", 3]},
    {"executeOrder": 42},
])
def test_invalid_settings_raise(settings):
    with pytest.raises(SettingsError):
        build_run_configuration(settings)


def test_load_settings(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text(json.dumps({"contx.removeComments": True}), encoding="utf-8")
    assert load_settings(settings_file) == {"contx.removeComments": True}


def test_load_settings_rejects_non_objects(tmp_path):
    settings_file = tmp_path / "settings.json"
    settings_file.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SettingsError):
        load_settings(settings_file)


def test_load_settings_missing_file(tmp_path):
    with pytest.raises(SettingsError, match="Could not read"):
        load_settings(tmp_path / "nope.json")
