"""
Tests for xtpl.yaml loading, variables files and variable layering.
"""

from pathlib import Path

import pytest

from xtpl.config import (
    XtplConfig,
    collect_variables,
    load_config,
    load_variables_file,
    parse_var_assignments,
)
from xtpl.errors import ConfigError

from tests.infrastructure import write


class TestLoadConfig:

    def test_defaults_without_file(self, tmp_path):
        cfg = load_config(root=tmp_path)
        assert cfg.path is None
        assert cfg.variables == {}
        assert cfg.output_encoding == "utf-8"
        assert cfg.encodings_by_suffix == {".reg": "utf-16"}

    def test_full_file(self, tmp_path):
        write(tmp_path / "xtpl.yaml", """\
variables:
  Name: demo
  Port: 8080
  Debug: true
  Empty:
variable_files: [vars/common.yaml]
env_case_sensitive: false
output_encoding: latin-1
encodings_by_suffix:
  cmd: cp1252
template_suffixes: [".in"]
""")
        cfg = load_config(root=tmp_path)

        assert cfg.path == tmp_path / "xtpl.yaml"
        assert cfg.variables == {"Name": "demo", "Port": "8080", "Debug": "true", "Empty": ""}
        assert cfg.variable_files == [tmp_path / "vars/common.yaml"]
        assert cfg.env_case_sensitive is False
        assert cfg.output_encoding == "latin-1"
        assert cfg.encodings_by_suffix == {".reg": "utf-16", ".cmd": "cp1252"}
        assert cfg.template_suffixes == [".in"]

    def test_explicit_path_must_exist(self, tmp_path):
        with pytest.raises(ConfigError) as exc:
            load_config(tmp_path / "missing.yaml")
        assert "File not found" in str(exc.value)

    def test_unknown_key(self, tmp_path):
        p = write(tmp_path / "xtpl.yaml", "variabels: {}\n")
        with pytest.raises(ConfigError) as exc:
            load_config(p)
        assert "variabels" in str(exc.value)

    @pytest.mark.parametrize("content,needle", [
        ("- a\n- b\n", "must be a mapping"),
        ("variables: [1, 2]\n", "'variables' must be a mapping"),
        ("variables:\n  A: [1]\n", "must be scalars"),
        ("output_encoding: no-such-codec\n", "unknown encoding"),
        ("env_case_sensitive: maybe\n", "env_case_sensitive"),
        ("variables: {a: 1\n", "Invalid YAML"),
    ])
    def test_invalid_content(self, tmp_path, content, needle):
        p = write(tmp_path / "xtpl.yaml", content)
        with pytest.raises(ConfigError) as exc:
            load_config(p)
        assert needle in str(exc.value)


class TestOutputPolicy:

    def test_encoding_precedence(self):
        cfg = XtplConfig()
        assert cfg.output_encoding_for(Path("a.reg")) == "utf-16"
        assert cfg.output_encoding_for(Path("a.REG")) == "utf-16"
        assert cfg.output_encoding_for(Path("a.txt")) == "utf-8"
        assert cfg.output_encoding_for(Path("a.reg"), "utf-8") == "utf-8"

    def test_explicit_encoding_is_validated(self):
        with pytest.raises(ConfigError):
            XtplConfig().output_encoding_for(Path("a.txt"), "no-such-codec")

    def test_non_text_encoding_is_rejected(self):
        with pytest.raises(ConfigError) as exc:
            XtplConfig().output_encoding_for(Path("a.txt"), "rot13")
        assert "not a text encoding" in str(exc.value)

    def test_output_path_strips_template_suffix(self):
        cfg = XtplConfig()
        assert cfg.output_path_for(Path("d/foo.reg.template")) == Path("d/foo.reg")
        assert cfg.output_path_for(Path("app.config.tpl")) == Path("app.config")

    def test_output_path_without_suffix(self):
        with pytest.raises(ConfigError) as exc:
            XtplConfig().output_path_for(Path("foo.txt"))
        assert "explicit -o" in str(exc.value)


class TestVariables:

    def test_assignments(self):
        assert parse_var_assignments(["A=1", "B=x=y", "C="]) == {"A": "1", "B": "x=y", "C": ""}

    @pytest.mark.parametrize("bad", ["novalue", "=x"])
    def test_bad_assignment(self, bad):
        with pytest.raises(ConfigError):
            parse_var_assignments([bad])

    def test_variables_file_forms(self, tmp_path):
        flat = write(tmp_path / "flat.yaml", "A: 1\nB: two\n")
        nested = write(tmp_path / "nested.yaml", "variables:\n  A: nested\n")
        assert load_variables_file(flat) == {"A": "1", "B": "two"}
        assert load_variables_file(nested) == {"A": "nested"}

    def test_layer_order(self, tmp_path):
        """config < config variable_files < --vars-file < --var."""
        write(tmp_path / "common.yaml", "A: common\nB: common\nC: common\n")
        write(tmp_path / "extra.yaml", "B: extra\nC: extra\n")
        write(tmp_path / "xtpl.yaml", "variables:\n  A: config\n  Z: config\nvariable_files: [common.yaml]\n")

        cfg = load_config(root=tmp_path)
        merged = collect_variables(cfg, [tmp_path / "extra.yaml"], ["C=cli"])

        assert merged == {"A": "common", "B": "extra", "C": "cli", "Z": "config"}
