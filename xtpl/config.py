from __future__ import annotations

import codecs
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError
from .types import DEFAULT_ENCODING, DEFAULT_INPUT_ENCODING

CONFIG_FILE = "xtpl.yaml"

# --------------------------------------------------------------------------- #
# DEFAULTS
# --------------------------------------------------------------------------- #
# regedit only imports "Windows Registry Editor Version 5.00" files as UTF-16
DEFAULT_SUFFIX_ENCODINGS: Dict[str, str] = {".reg": "utf-16"}
DEFAULT_TEMPLATE_SUFFIXES: List[str] = [".template", ".tpl"]

_KNOWN_KEYS = {
    "variables",
    "variable_files",
    "env_case_sensitive",
    "input_encoding",
    "output_encoding",
    "encodings_by_suffix",
    "template_suffixes",
}

# --------------------------------------------------------------------------- #
# YAML loader
# --------------------------------------------------------------------------- #
_yaml = YAML(typ="safe")


@dataclass
class XtplConfig:
    variables: Dict[str, str] = field(default_factory=dict)
    variable_files: List[Path] = field(default_factory=list)
    env_case_sensitive: Optional[bool] = None
    input_encoding: str = DEFAULT_INPUT_ENCODING
    output_encoding: str = DEFAULT_ENCODING
    encodings_by_suffix: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SUFFIX_ENCODINGS))
    template_suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_TEMPLATE_SUFFIXES))
    path: Optional[Path] = None

    def output_encoding_for(self, target: Path, explicit: Optional[str] = None) -> str:
        """
        Encoding policy for an output file:
        explicit value > suffix table > configured default.
        """
        if explicit:
            return _check_encoding(explicit, "--encoding")
        return self.encodings_by_suffix.get(target.suffix.lower(), self.output_encoding)

    def output_path_for(self, template: Path) -> Path:
        """``foo.reg.template`` -> ``foo.reg``."""
        for suffix in self.template_suffixes:
            if template.name.endswith(suffix) and len(template.name) > len(suffix):
                return template.with_name(template.name[: -len(suffix)])
        raise ConfigError(
            f"Cannot derive output name for {template}: expected one of "
            f"{', '.join(self.template_suffixes)} or an explicit -o"
        )


# --------------------------------------------------------------------------- #
# HELPERS
# --------------------------------------------------------------------------- #
def _read_yaml_map(path: Path) -> Dict[str, Any]:
    """Reads a YAML file that must contain a mapping."""
    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except FileNotFoundError:
        raise ConfigError(f"File not found: {path}")
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")
    return raw


def _check_encoding(name: Any, where: str) -> str:
    if not isinstance(name, str):
        raise ConfigError(f"{where}: encoding name must be a string")
    try:
        info = codecs.lookup(name)
    except LookupError:
        raise ConfigError(f"{where}: unknown encoding '{name}'")
    if not getattr(info, "_is_text_encoding", True):
        raise ConfigError(f"{where}: '{name}' is not a text encoding")
    return name


def _scalar_to_str(value: Any, where: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"{where}: variable values must be scalars, got {type(value).__name__}")


def coerce_variables(raw: Any, where: str) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: 'variables' must be a mapping")
    return {str(k): _scalar_to_str(v, f"{where}: {k}") for k, v in raw.items()}


# --------------------------------------------------------------------------- #
# PUBLIC API
# --------------------------------------------------------------------------- #
def load_config(path: Optional[Path] = None, *, root: Optional[Path] = None) -> XtplConfig:
    """
    Loads xtpl.yaml.

    • Explicit ``path`` must exist.
    • Without ``path``, ``<root>/xtpl.yaml`` is used when present, else defaults.
    • Unknown keys are rejected.
    """
    if path is None:
        candidate = (root or Path.cwd()) / CONFIG_FILE
        if not candidate.is_file():
            return XtplConfig()
        path = candidate

    raw = _read_yaml_map(path)
    unknown = set(raw) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(f"{path}: unknown key(s): {', '.join(sorted(unknown))}")

    base_dir = path.parent
    cfg = XtplConfig(path=path)
    cfg.variables = coerce_variables(raw.get("variables"), str(path))

    files = raw.get("variable_files") or []
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise ConfigError(f"{path}: 'variable_files' must be a list of paths")
    cfg.variable_files = [(base_dir / f) for f in files]

    case = raw.get("env_case_sensitive")
    if case is not None and not isinstance(case, bool):
        raise ConfigError(f"{path}: 'env_case_sensitive' must be true, false or null")
    cfg.env_case_sensitive = case

    if "input_encoding" in raw:
        cfg.input_encoding = _check_encoding(raw["input_encoding"], f"{path}: input_encoding")
    if "output_encoding" in raw:
        cfg.output_encoding = _check_encoding(raw["output_encoding"], f"{path}: output_encoding")

    by_suffix = raw.get("encodings_by_suffix")
    if by_suffix is not None:
        if not isinstance(by_suffix, dict):
            raise ConfigError(f"{path}: 'encodings_by_suffix' must be a mapping")
        merged = dict(DEFAULT_SUFFIX_ENCODINGS)
        for suffix, enc in by_suffix.items():
            key = str(suffix).lower()
            if not key.startswith("."):
                key = "." + key
            merged[key] = _check_encoding(enc, f"{path}: encodings_by_suffix.{suffix}")
        cfg.encodings_by_suffix = merged

    suffixes = raw.get("template_suffixes")
    if suffixes is not None:
        if not isinstance(suffixes, list) or not all(isinstance(s, str) and s for s in suffixes):
            raise ConfigError(f"{path}: 'template_suffixes' must be a list of non-empty strings")
        cfg.template_suffixes = list(suffixes)

    return cfg


def load_variables_file(path: Path) -> Dict[str, str]:
    """
    Reads a variables file: either a flat YAML mapping or one with a
    top-level ``variables`` mapping.
    """
    raw = _read_yaml_map(path)
    if set(raw) == {"variables"} and isinstance(raw["variables"], dict):
        raw = raw["variables"]
    return coerce_variables(raw, str(path))


def parse_var_assignments(items: Optional[Iterable[str]]) -> Dict[str, str]:
    """Parses ``NAME=VALUE`` items; the value may contain '=' and may be empty."""
    result: Dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise ConfigError(f"Invalid variable '{item}'. Expected NAME=VALUE")
        name, value = item.split("=", 1)
        if not name:
            raise ConfigError(f"Invalid variable '{item}': empty name")
        result[name] = value
    return result


def merge_variables(*layers: Mapping[str, str]) -> Dict[str, str]:
    """Merges variable layers; later layers override earlier ones."""
    merged: Dict[str, str] = {}
    for layer in layers:
        merged.update(layer)
    return merged


def collect_variables(
    cfg: XtplConfig,
    files: Iterable[Path] = (),
    assignments: Iterable[str] = (),
) -> Dict[str, str]:
    """
    Full override order, later wins:
    config ``variables`` < config ``variable_files`` < ``files`` < ``assignments``.
    """
    layers: List[Mapping[str, str]] = [cfg.variables]
    layers.extend(load_variables_file(p) for p in cfg.variable_files)
    layers.extend(load_variables_file(Path(p)) for p in files)
    layers.append(parse_var_assignments(assignments))
    return merge_variables(*layers)


__all__ = [
    "CONFIG_FILE",
    "XtplConfig",
    "load_config",
    "load_variables_file",
    "parse_var_assignments",
    "merge_variables",
    "collect_variables",
]
