"""
Command-line tests, run in a subprocess like a user would.
"""

from importlib import metadata

import xtpl.version as version_mod
from xtpl.cli import describe_filters
from xtpl.jsonic import dumps
from xtpl.version import DEV_VERSION, tool_version

from tests.infrastructure import jload, run_cli, write


class TestExpandCommand:

    def test_default_output_name(self, tmp_path):
        write(tmp_path / "greet.txt.tpl", "Hello {{ var.Name }}!\r\n")

        cp = run_cli(tmp_path, "expand", "greet.txt.tpl", "--var", "Name=World")

        assert cp.returncode == 0, cp.stderr
        assert (tmp_path / "greet.txt").read_bytes() == b"Hello World!\r\n"

    def test_stdout(self, tmp_path):
        write(tmp_path / "t.tpl", "{{ var.A | upper }}")
        cp = run_cli(tmp_path, "expand", "t.tpl", "-o", "-", "--var", "A=shout")
        assert cp.returncode == 0, cp.stderr
        assert cp.stdout == "SHOUT"
        assert not (tmp_path / "t").exists()

    def test_explicit_output_file(self, tmp_path):
        write(tmp_path / "in.tpl", "{{ var.A }}")
        cp = run_cli(tmp_path, "expand", "in.tpl", "-o", "out/result.txt", "--var", "A=1")
        assert cp.returncode == 0, cp.stderr
        assert (tmp_path / "out" / "result.txt").read_text(encoding="utf-8") == "1"

    def test_several_templates_into_directory(self, tmp_path):
        write(tmp_path / "a.txt.tpl", "a={{ var.X }}")
        write(tmp_path / "b.txt.tpl", "b={{ var.X }}")
        cp = run_cli(tmp_path, "expand", "a.txt.tpl", "b.txt.tpl", "-o", "gen", "--var", "X=1")
        assert cp.returncode == 0, cp.stderr
        assert (tmp_path / "gen" / "a.txt").read_text(encoding="utf-8") == "a=1"
        assert (tmp_path / "gen" / "b.txt").read_text(encoding="utf-8") == "b=1"

    def test_environment_reference(self, tmp_path):
        write(tmp_path / "e.tpl", "{{ env.XTPL_CLI_TEST | lower }}")
        cp = run_cli(tmp_path, "expand", "e.tpl", "-o", "-", env_extra={"XTPL_CLI_TEST": "FROM-ENV"})
        assert cp.returncode == 0, cp.stderr
        assert cp.stdout == "from-env"

    def test_reg_files_are_utf16(self, tmp_path):
        write(tmp_path / "settings.reg.template",
              'Windows Registry Editor Version 5.00\r\n\r\n"Path"="{{ var.P | regesc }}"\r\n')
        cp = run_cli(tmp_path, "expand", "settings.reg.template", "--var", "P=C:\\Tools")
        assert cp.returncode == 0, cp.stderr

        data = (tmp_path / "settings.reg").read_bytes()
        assert data.startswith(b"\xff\xfe") or data.startswith(b"\xfe\xff")
        assert data.decode("utf-16").endswith('"Path"="C:\\\\Tools"\r\n')

    def test_encoding_override(self, tmp_path):
        write(tmp_path / "x.reg.tpl", "{{ var.A }}")
        cp = run_cli(tmp_path, "expand", "x.reg.tpl", "--encoding", "latin-1", "--var", "A=é")
        assert cp.returncode == 0, cp.stderr
        assert (tmp_path / "x.reg").read_bytes() == b"\xe9"

    def test_config_file_and_override(self, tmp_path):
        write(tmp_path / "xtpl.yaml", "variables:\n  Name: config\n  Other: cfg\n")
        write(tmp_path / "vars.yaml", "Other: file\n")
        write(tmp_path / "t.tpl", "{{ var.Name }} {{ var.Other }}")

        cp = run_cli(tmp_path, "expand", "t.tpl", "-o", "-", "--var", "Name=cli")
        assert cp.stdout == "cli cfg"

        cp = run_cli(tmp_path, "expand", "t.tpl", "-o", "-", "--vars-file", "vars.yaml")
        assert cp.stdout == "config file"


class TestErrors:

    def test_undefined_variable(self, tmp_path):
        write(tmp_path / "t.txt.tpl", "ok\n{{ var.Missing }}\n")

        cp = run_cli(tmp_path, "expand", "t.txt.tpl")

        assert cp.returncode == 2
        assert "resolution error: undefined variable 'Missing'" in cp.stderr
        assert "t.txt.tpl:2:4" in cp.stderr
        assert "Traceback" not in cp.stderr
        assert not (tmp_path / "t.txt").exists()

    def test_keep_going(self, tmp_path):
        write(tmp_path / "good.txt.tpl", "{{ var.A }}")
        write(tmp_path / "bad.txt.tpl", "{{ var.A | nosuchfilter }}")

        cp = run_cli(tmp_path, "expand", "bad.txt.tpl", "good.txt.tpl", "--keep-going", "--var", "A=1")

        assert cp.returncode == 1
        assert "unknown filter 'nosuchfilter'" in cp.stderr
        assert (tmp_path / "good.txt").read_text(encoding="utf-8") == "1"
        assert not (tmp_path / "bad.txt").exists()

    def test_stops_at_first_failure_without_keep_going(self, tmp_path):
        write(tmp_path / "bad.txt.tpl", "{{ var.Missing }}")
        write(tmp_path / "good.txt.tpl", "fine")
        cp = run_cli(tmp_path, "expand", "bad.txt.tpl", "good.txt.tpl")
        assert cp.returncode == 2
        assert not (tmp_path / "good.txt").exists()

    def test_cannot_derive_output_name(self, tmp_path):
        write(tmp_path / "plain.txt", "x")
        cp = run_cli(tmp_path, "expand", "plain.txt")
        assert cp.returncode == 2
        assert "Cannot derive output name" in cp.stderr

    def test_refuses_to_overwrite_template(self, tmp_path):
        write(tmp_path / "t.tpl", "x")
        cp = run_cli(tmp_path, "expand", "t.tpl", "-o", "t.tpl")
        assert cp.returncode == 2
        assert "Refusing to overwrite" in cp.stderr

    def test_stdout_with_several_templates(self, tmp_path):
        write(tmp_path / "a.tpl", "a")
        write(tmp_path / "b.tpl", "b")
        cp = run_cli(tmp_path, "expand", "a.tpl", "b.tpl", "-o", "-")
        assert cp.returncode == 2
        assert "single template" in cp.stderr

    def test_stdout_unencodable(self, tmp_path):
        """Text that the requested stdout encoding cannot hold is reported, not a traceback."""
        write(tmp_path / "t.tpl", "{{ var.A }}")
        cp = run_cli(tmp_path, "expand", "t.tpl", "-o", "-", "--encoding", "ascii", "--var", "A=é")
        assert cp.returncode == 2
        assert "cannot be encoded as ascii" in cp.stderr
        assert "Traceback" not in cp.stderr
        assert cp.stdout == ""

    def test_directory_as_template(self, tmp_path):
        (tmp_path / "folder.tpl").mkdir()
        cp = run_cli(tmp_path, "expand", "folder.tpl", "-o", "-")
        assert cp.returncode == 2
        assert "Cannot read template" in cp.stderr
        assert "Traceback" not in cp.stderr

    def test_bad_var_syntax(self, tmp_path):
        write(tmp_path / "t.tpl", "x")
        cp = run_cli(tmp_path, "expand", "t.tpl", "--var", "oops")
        assert cp.returncode == 2
        assert "Expected NAME=VALUE" in cp.stderr


class TestListFilters:

    def test_json(self, tmp_path):
        cp = run_cli(tmp_path, "list", "filters")
        assert cp.returncode == 0, cp.stderr

        data = jload(cp.stdout)
        by_name = {f["name"]: f for f in data["filters"]}
        assert by_name["replace"]["minArgs"] == 2
        assert by_name["replace"]["maxArgs"] == 2
        assert by_name["replace"]["usage"] == "replace:<old>:<new>"
        assert by_name["gunzip"]["accepts"] == "bytes"
        assert by_name["encode"]["minArgs"] == 0

    def test_version(self, tmp_path):
        cp = run_cli(tmp_path, "--version")
        assert cp.returncode == 0
        assert cp.stdout.startswith("xtpl ")

    def test_output_ends_with_newline(self, tmp_path):
        cp = run_cli(tmp_path, "list", "filters")
        assert cp.stdout.endswith("}\n")


class TestJsonOutput:

    def test_model_dumped_with_aliases(self, registry):
        text = dumps(describe_filters(registry))
        assert text.endswith("\n")
        first = jload(text)["filters"][0]
        assert {"minArgs", "maxArgs"} <= set(first)
        assert "min_args" not in first

    def test_non_ascii_kept(self):
        assert dumps({"name": "Grüße"}) == '{"name": "Grüße"}\n'


class TestVersion:

    def test_source_checkout(self, monkeypatch):
        """Without installed metadata the development version is reported."""
        def missing(name):
            raise metadata.PackageNotFoundError(name)

        monkeypatch.setattr(version_mod.metadata, "version", missing)
        assert tool_version() == DEV_VERSION

    def test_installed(self, monkeypatch):
        monkeypatch.setattr(version_mod.metadata, "version", lambda name: "1.2.3")
        assert tool_version() == "1.2.3"
