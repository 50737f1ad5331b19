# tests/conftest.py
import pytest

from contx.config import build_run_configuration


@pytest.fixture
def make_config():
    """Builds a RunConfiguration from setting overrides on top of the defaults."""
    def _make(**overrides):
        return build_run_configuration(overrides)
    return _make


@pytest.fixture
def sample_project(tmp_path):
    """
    project/
      a.txt, .env, debug.log, node_modules/dep.js,
      src/main.py, src/util/deep.py
    """
    (tmp_path / "a.txt").write_text("hello a\n", encoding="utf-8")
    (tmp_path / ".env").write_text("X=1\n", encoding="utf-8")
    (tmp_path / "debug.log").write_text("log line\n", encoding="utf-8")

    node_modules = tmp_path / "node_modules"
    node_modules.mkdir()
    (node_modules / "dep.js").write_text("module.exports = 1;\n", encoding="utf-8")

    src = tmp_path / "src"
    src.mkdir()
    (src / "main.py").write_text("print('main')\n", encoding="utf-8")
    util = src / "util"
    util.mkdir()
    (util / "deep.py").write_text("DEEP = True\n", encoding="utf-8")
    return tmp_path
