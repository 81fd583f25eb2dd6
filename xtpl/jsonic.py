"""
JSON output of the CLI.

Listings are pydantic models; they are dumped with their aliases
(``minArgs``), non-ASCII text is written as is, and every answer ends
with a newline so that shell pipelines see a complete line.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel


def dumps(obj: Any) -> str:
    if isinstance(obj, BaseModel):
        obj = obj.model_dump(by_alias=True)
    return json.dumps(obj, ensure_ascii=False) + "\n"


__all__ = ["dumps"]
