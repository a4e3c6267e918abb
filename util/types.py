# util/types.py
from typing import List, Optional, TypedDict


# Flow: Narrow types for the upstream course API payloads we read.
class AssetPayload(TypedDict, total=False):
    id: int
    title: str
    asset_type: str


class CurriculumEntryPayload(TypedDict, total=False):
    _class: str
    id: int
    title: str
    sort_order: int
    asset: Optional[AssetPayload]


class CaptionPayload(TypedDict, total=False):
    locale_id: str
    language: str
    url: str
    label: str


class CurriculumPagePayload(TypedDict, total=False):
    count: int
    next: Optional[str]
    results: List[CurriculumEntryPayload]
