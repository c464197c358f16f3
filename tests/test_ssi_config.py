"""
Тесты загрузки конфигурации движка из ssi.yaml.
"""

import textwrap

import pytest

from ssi.config import ConfigLoadError, SsiConfig, load_config
from ssi.config.typed import load_typed
from tests.infrastructure.file_utils import write


def _cfg(tmp_path, text):
    return write(tmp_path / "ssi.yaml", textwrap.dedent(text).strip() + "\n")


def test_defaults_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config() == SsiConfig()


def test_file_in_cwd(tmp_path, monkeypatch):
    _cfg(tmp_path, """
    errmsg: "[error]"
    timefmt: "%Y"
    document_root: www
    exec_enabled: false
    exec_timeout: 5
    max_include_depth: 4
    """)
    monkeypatch.chdir(tmp_path)
    cfg = load_config()
    assert cfg.errmsg == "[error]"
    assert cfg.timefmt == "%Y"
    assert cfg.document_root == "www"
    assert cfg.exec_enabled is False
    assert cfg.exec_timeout == 5.0
    assert isinstance(cfg.exec_timeout, float)
    assert cfg.max_include_depth == 4
    assert cfg.root_path() == (tmp_path / "www").resolve()


def test_explicit_path(tmp_path):
    path = write(tmp_path / "conf" / "engine.yaml", "encoding: latin-1\n")
    assert load_config(path).encoding == "latin-1"


def test_explicit_missing_path(tmp_path):
    with pytest.raises(ConfigLoadError, match="not found"):
        load_config(tmp_path / "missing.yaml")


def test_empty_file_gives_defaults(tmp_path):
    path = write(tmp_path / "ssi.yaml", "")
    assert load_config(path) == SsiConfig()


@pytest.mark.parametrize("text,message", [
    ("unknown_key: 1", "unknown key"),
    ("exec_enabled: 'yes'", "expected bool"),
    ("max_include_depth: true", "got bool"),
    ("errmsg: 3", "expected str"),
    ("- a\n- b", "mapping"),
])
def test_invalid_config(tmp_path, text, message):
    path = write(tmp_path / "ssi.yaml", text + "\n")
    with pytest.raises(ConfigLoadError, match=message):
        load_config(path)


@pytest.mark.parametrize("value,expected", [("1", True), ("yes", True), ("0", False), ("", False)])
def test_trace_from_env(tmp_path, monkeypatch, value, expected):
    monkeypatch.setenv("SSI_TRACE", value)
    path = write(tmp_path / "ssi.yaml", "errmsg: x\n")
    assert load_config(path).trace is expected


def test_config_error_is_value_error():
    with pytest.raises(ValueError):
        load_typed(SsiConfig, {"exec_timeout": "soon"})


def test_with_overrides_skips_none():
    cfg = SsiConfig()
    assert cfg.with_overrides(document_root=None) is cfg
    assert cfg.with_overrides(document_root="www", errmsg=None).document_root == "www"
