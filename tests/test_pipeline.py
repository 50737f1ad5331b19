# tests/test_pipeline.py
import threading
import xml.etree.ElementTree as ET

import pytest

import contx.core.tree as tree_module
from contx.config import DEFAULT_ORDER
from contx.core.pipeline import run_collection, validate_selection
from contx.core.scanner import BINARY_PLACEHOLDER
from contx.exceptions import CollectionCancelled, SelectionError
from contx.models import Selection


def select(root, *relative):
    paths = tuple(root / r for r in relative) if relative else (root,)
    return Selection(paths=paths, workspace_root=root)


def test_default_run_on_whole_workspace(sample_project, make_config):
    out = run_collection(select(sample_project), make_config())

    assert out.startswith("Project Structure:\n\n├── a.txt\n└── src\n")
    assert "File: a.txt\n\nhello a\n" in out
    assert "File: src/util/deep.py" in out
    assert ".env" not in out
    assert "debug.log" not in out
    assert "node_modules" not in out
    assert out.endswith("Execute Order:\n" + DEFAULT_ORDER + "\n")


def test_scenario_dot_file_left_out(tmp_path, make_config):
    (tmp_path / "a.txt").write_text("0123456789")
    (tmp_path / ".env").write_text("KEY=1")

    out = run_collection(select(tmp_path), make_config())
    assert "a.txt" in out
    assert ".env" not in out


def test_max_depth_zero_tree(sample_project, make_config):
    out = run_collection(select(sample_project, "a.txt"), make_config(maxDepth=0))
    tree_part = out.split("File Contents:")[0]

    assert "└── src" in tree_part
    assert "main.py" not in tree_part


def test_tree_can_be_disabled(sample_project, make_config):
    out = run_collection(select(sample_project, "a.txt"), make_config(includeProjectTree=False, executeOrder=None))
    assert out == "File Contents:\n\nFile: a.txt\n\nhello a\n\n\n"


def test_selection_order_is_kept(sample_project, make_config):
    config = make_config(includeProjectTree=False, executeOrder=None)
    out = run_collection(select(sample_project, "src/util", "a.txt"), config)
    assert out.index("File: src/util/deep.py") < out.index("File: a.txt")


def test_gitignore_applied_only_when_enabled(sample_project, make_config):
    (sample_project / ".gitignore").write_text("src/util/\n", encoding="utf-8")

    with_gitignore = run_collection(select(sample_project), make_config())
    without_gitignore = run_collection(select(sample_project), make_config(ignoreGitIgnore=False))

    assert "deep.py" not in with_gitignore
    assert "deep.py" in without_gitignore
    assert ".gitignore" not in without_gitignore


def test_output_formats(sample_project, make_config):
    md = run_collection(select(sample_project, "src/main.py"), make_config(outputFormat="markdown"))
    xml = run_collection(select(sample_project, "src/main.py"), make_config(outputFormat="xml"))

    assert "## src/main.py\n\n```py\nprint('main')\n\n```" in md
    assert '<file path="src/main.py">' in xml


def test_runs_are_deterministic(sample_project, make_config):
    config = make_config(outputFormat="xml", removeComments=True)
    assert run_collection(select(sample_project), config) == run_collection(select(sample_project), config)


def test_empty_selection_is_fatal(tmp_path, make_config):
    with pytest.raises(SelectionError, match="select one or more"):
        run_collection(Selection(paths=(), workspace_root=tmp_path), make_config())


def test_missing_workspace_is_fatal(tmp_path, make_config):
    with pytest.raises(SelectionError, match="workspace folder"):
        run_collection(Selection(paths=(tmp_path,), workspace_root=None), make_config())


def test_item_outside_workspace_is_fatal(tmp_path):
    workspace = tmp_path / "ws"
    workspace.mkdir()
    with pytest.raises(SelectionError, match="not inside"):
        validate_selection(Selection(paths=(tmp_path / "other.txt",), workspace_root=workspace))


def test_missing_selected_file_becomes_error_placeholder(tmp_path, make_config):
    out = run_collection(select(tmp_path, "gone.txt"), make_config(includeProjectTree=False))
    assert "File: gone.txt\n\n[Error reading file: " in out


def test_cancelled_run_raises_with_partial_records(sample_project, make_config):
    event = threading.Event()
    event.set()
    with pytest.raises(CollectionCancelled) as excinfo:
        run_collection(select(sample_project), make_config(), cancel_event=event)
    assert excinfo.value.records == []


def test_cancel_during_tree_skips_collection(sample_project, make_config, monkeypatch):
    event = threading.Event()
    real_list = tree_module.list_directory

    def list_then_cancel(directory):
        event.set()
        return real_list(directory)

    monkeypatch.setattr(tree_module, "list_directory", list_then_cancel)
    with pytest.raises(CollectionCancelled) as excinfo:
        run_collection(select(sample_project), make_config(), cancel_event=event)
    assert excinfo.value.records == []


def test_xml_run_with_control_bytes_and_crlf_parses(tmp_path, make_config):
    (tmp_path / "page.c").write_bytes(b"int a;\n\x0c\nint b;\n")
    (tmp_path / "win.txt").write_bytes(b"one\r\ntwo\r\n")

    out = run_collection(select(tmp_path), make_config(outputFormat="xml", includeProjectTree=False))
    files = ET.fromstring(out.encode("utf-8")).find("file_contents").findall("file")

    assert [f.get("path") for f in files] == ["page.c", "win.txt"]
    assert files[0].text.strip() == BINARY_PLACEHOLDER
    assert files[1].text[len("\n      "):-len("\n    ")] == "one\r\ntwo\r\n"
