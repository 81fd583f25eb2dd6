from __future__ import annotations

from importlib import metadata

DIST_NAME = "expand-template"
DEV_VERSION = "0.0.0+dev"


def tool_version() -> str:
    """Version of the installed distribution; ``DEV_VERSION`` for a source checkout."""
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return DEV_VERSION


__all__ = ["DIST_NAME", "tool_version"]
