"""Tests for variable/environment resolution."""

import pytest

from xtpl.errors import ResolutionError
from xtpl.template.nodes import EnvironmentRef, ParsedPlaceholder, VariableRef
from xtpl.template.resolver import EnvironmentView, HeadResolver, VariableTable


class TestVariableTable:

    def test_case_sensitive(self):
        table = VariableTable({"Name": "a"})
        assert table["Name"] == "a"
        assert "name" not in table

    def test_copy_on_construction(self):
        """Later changes to the source mapping do not leak in."""
        source = {"A": "1"}
        table = VariableTable(source)
        source["A"] = "2"
        source["B"] = "3"
        assert dict(table) == {"A": "1"}

    def test_values_must_be_strings(self):
        with pytest.raises(TypeError):
            VariableTable({"A": 1})


class TestEnvironmentView:

    def test_case_sensitive_lookup(self):
        env = EnvironmentView({"Path": "x"}, case_sensitive=True)
        assert env["Path"] == "x"
        assert "PATH" not in env

    def test_case_insensitive_lookup(self):
        env = EnvironmentView({"Path": "x"}, case_sensitive=False)
        assert env["PATH"] == "x"
        assert env["path"] == "x"
        assert "pAtH" in env

    def test_snapshot_of_process_environment(self, monkeypatch):
        """Without an explicit mapping the process environment is copied."""
        monkeypatch.setenv("XTPL_TEST_SNAPSHOT", "before")
        env = EnvironmentView(case_sensitive=True)
        monkeypatch.setenv("XTPL_TEST_SNAPSHOT", "after")
        assert env["XTPL_TEST_SNAPSHOT"] == "before"

    def test_platform_default(self, monkeypatch):
        """case_sensitive=None follows the platform convention."""
        import xtpl.template.resolver as resolver_mod
        monkeypatch.setattr(resolver_mod.os, "name", "nt")
        assert EnvironmentView({}).case_sensitive is False
        monkeypatch.setattr(resolver_mod.os, "name", "posix")
        assert EnvironmentView({}).case_sensitive is True


class TestHeadResolver:

    def _resolver(self):
        return HeadResolver(VariableTable({"A": "va"}), EnvironmentView({"E": "ve"}, case_sensitive=True))

    def test_resolves_variable_and_environment(self):
        r = self._resolver()
        assert r.resolve(ParsedPlaceholder(head=VariableRef("A"))) == "va"
        assert r.resolve(ParsedPlaceholder(head=EnvironmentRef("E"))) == "ve"

    def test_undefined_variable(self):
        """A missing variable is an error, never an empty string."""
        with pytest.raises(ResolutionError) as exc:
            self._resolver().resolve(ParsedPlaceholder(head=VariableRef("Missing"), head_position=7))
        assert "undefined variable 'Missing'" in str(exc.value)
        assert exc.value.position == 7

    def test_undefined_environment_variable(self):
        with pytest.raises(ResolutionError) as exc:
            self._resolver().resolve(ParsedPlaceholder(head=EnvironmentRef("NOPE")))
        assert "undefined environment variable 'NOPE'" in str(exc.value)

    def test_variables_do_not_fall_back_to_environment(self):
        with pytest.raises(ResolutionError):
            self._resolver().resolve(ParsedPlaceholder(head=VariableRef("E")))
