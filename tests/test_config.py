"""Tests for appmod_csv/config.py"""

import textwrap
from pathlib import Path

import pytest

from appmod_csv.config import (
    Config,
    ConfigError,
    generate_template,
    load,
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("APPMOD_TARGET", raising=False)
    monkeypatch.delenv("APPMOD_EXCEL", raising=False)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def write_config(tmp_path: Path, content: str) -> Path:
    p = tmp_path / "appmod-config.yaml"
    p.write_text(textwrap.dedent(content), encoding="utf-8")
    return p


VALID_YAML = """\
    defaults:
      target: "AppService.Linux"
      excel: true
    """


# ---------------------------------------------------------------------------
# load() — happy path
# ---------------------------------------------------------------------------

def test_load_valid_config(tmp_path):
    p = write_config(tmp_path, VALID_YAML)
    config = load(str(p))
    assert config == Config(target="AppService.Linux", excel=True)


def test_load_empty_file(tmp_path):
    p = write_config(tmp_path, "")
    assert load(str(p)) == Config()


# ---------------------------------------------------------------------------
# load() — missing file
# ---------------------------------------------------------------------------

def test_load_missing_optional_file(tmp_path):
    assert load(str(tmp_path / "no-such-file.yaml")) == Config()


def test_load_missing_required_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load(str(tmp_path / "no-such-file.yaml"), required=True)


# ---------------------------------------------------------------------------
# load() — invalid content
# ---------------------------------------------------------------------------

def test_load_malformed_yaml(tmp_path):
    p = write_config(tmp_path, "defaults: [unclosed\n")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load(str(p))


def test_load_non_mapping_root(tmp_path):
    p = write_config(tmp_path, "- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load(str(p))


def test_load_wrong_excel_type(tmp_path):
    p = write_config(tmp_path, """\
        defaults:
          excel: "sometimes"
        """)
    with pytest.raises(ConfigError, match="defaults.excel"):
        load(str(p))


def test_load_empty_target(tmp_path):
    p = write_config(tmp_path, """\
        defaults:
          target: ""
        """)
    with pytest.raises(ConfigError, match="defaults.target"):
        load(str(p))


# ---------------------------------------------------------------------------
# load() — environment variable overrides
# ---------------------------------------------------------------------------

def test_env_target_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("APPMOD_TARGET", "AppService.Windows")
    assert load(str(p)).target == "AppService.Windows"


def test_env_excel_overrides_config(tmp_path, monkeypatch):
    p = write_config(tmp_path, VALID_YAML)
    monkeypatch.setenv("APPMOD_EXCEL", "off")
    assert load(str(p)).excel is False


def test_env_vars_without_file(tmp_path, monkeypatch):
    monkeypatch.setenv("APPMOD_TARGET", "AKS.Linux")
    monkeypatch.setenv("APPMOD_EXCEL", "YES")
    config = load(str(tmp_path / "absent.yaml"))
    assert config == Config(target="AKS.Linux", excel=True)


def test_env_excel_invalid_value(monkeypatch, tmp_path):
    monkeypatch.setenv("APPMOD_EXCEL", "maybe")
    with pytest.raises(ConfigError, match="APPMOD_EXCEL"):
        load(str(tmp_path / "absent.yaml"))


# ---------------------------------------------------------------------------
# generate_template()
# ---------------------------------------------------------------------------

def test_generate_template_creates_loadable_file(tmp_path):
    out = tmp_path / "appmod-config.yaml"
    generate_template(str(out))
    assert out.exists()
    assert "defaults:" in out.read_text()
    assert load(str(out)) == Config(target="AppService.Linux", excel=False)


def test_generate_template_refuses_to_overwrite(tmp_path):
    out = tmp_path / "appmod-config.yaml"
    out.write_text("existing content")
    with pytest.raises(ConfigError, match="already exists"):
        generate_template(str(out))


def test_generate_template_unwritable_path(tmp_path):
    out = tmp_path / "no-such-dir" / "appmod-config.yaml"
    with pytest.raises(ConfigError, match="Could not write"):
        generate_template(str(out))
