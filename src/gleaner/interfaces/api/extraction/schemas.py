"""Request bodies for the detail extraction API (camelCase on the wire)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchResultIn(_CamelModel):
    id: Optional[str] = None
    url: str = ""
    title: str = ""
    code: str = ""
    keyword: str = ""
    source_hint: Optional[str] = None


class ExtractOptionsIn(_CamelModel):
    timeout: Optional[int] = Field(default=None, gt=0, description="Per-fetch timeout (ms).")
    enable_retry: Optional[bool] = None
    enable_cache: Optional[bool] = None
    max_concurrency: Optional[int] = Field(default=None, ge=1)
    source_type: Optional[str] = None


class ExtractSingleRequest(_CamelModel):
    search_result: SearchResultIn
    options: ExtractOptionsIn = Field(default_factory=ExtractOptionsIn)


class ExtractBatchRequest(_CamelModel):
    search_results: list[SearchResultIn] = Field(default_factory=list)
    options: ExtractOptionsIn = Field(default_factory=ExtractOptionsIn)


class ReloadParserRequest(_CamelModel):
    source_type: str = ""
