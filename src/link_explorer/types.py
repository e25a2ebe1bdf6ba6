from typing import TypedDict, List, Optional
from pydantic import BaseModel


# TypedDicts for internal use
class LinkRecord(TypedDict):
    url: str
    text: str
    is_external: bool
    domain: Optional[str]


class ExtractionResult(TypedDict):
    title: str
    url: str
    links: List[LinkRecord]
    total_found: int
    was_truncated: bool


class FetchResult(TypedDict):
    html: str
    proxy_index: int
    proxy_url: str


class Stats(TypedDict):
    total_nodes: int
    expanded: int
    unique_domains: int
    discovered_urls: int


# Pydantic models for API requests and responses
class ExploreRequest(BaseModel):
    url: str


class NodeResponse(BaseModel):
    id: int
    url: str
    text: str
    domain: Optional[str]
    is_external: bool
    is_root: bool
    is_loading: bool
    can_expand: bool
    error: Optional[str]
    total_found: int
    was_truncated: bool
    children: Optional[List["NodeResponse"]]

    class Config:
        from_attributes = True


NodeResponse.model_rebuild()


class StatsResponse(BaseModel):
    total_nodes: int
    expanded: int
    unique_domains: int
    discovered_urls: int


class TreeResponse(BaseModel):
    state: str
    error: Optional[str]
    root: Optional[NodeResponse]
    expanded: List[int]
    stats: StatsResponse
