# model/curriculum.py
from enum import Enum
from typing import Optional
from pydantic import BaseModel, model_validator


class ItemKind(str, Enum):
    chapter = "chapter"
    lecture = "lecture"
    quiz = "quiz"
    other = "other"

    @classmethod
    def from_upstream(cls, raw: Optional[str]) -> "ItemKind":
        try:
            return cls(raw or "other")
        except ValueError:
            return cls.other


class WorkItem(BaseModel):
    kind: ItemKind
    id: int
    title: str
    ordinal: int = 0
    hasVideoAsset: bool = False
    assetType: Optional[str] = None
    completed: bool = False
    content: Optional[str] = None

    @model_validator(mode="after")
    def _content_tracks_completion(self) -> "WorkItem":
        # content is present exactly when the item has been processed
        if self.completed != (self.content is not None):
            raise ValueError("content must be set if and only if completed is true")
        return self

    @property
    def is_fetchable(self) -> bool:
        match self.kind:
            case ItemKind.lecture:
                return self.hasVideoAsset
            case ItemKind.chapter | ItemKind.quiz | ItemKind.other:
                return False

    @property
    def needs_processing(self) -> bool:
        return self.is_fetchable and not self.completed

    def mark_processed(self, content: str) -> "WorkItem":
        return self.model_copy(update={"completed": True, "content": content})
