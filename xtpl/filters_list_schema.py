from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field


class FilterInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    category: str
    usage: str
    min_args: int = Field(..., alias="minArgs")
    max_args: int = Field(..., alias="maxArgs")
    accepts: Literal["text", "bytes", "any"]
    summary: str = ""


class FiltersList(BaseModel):
    filters: List[FilterInfo]
