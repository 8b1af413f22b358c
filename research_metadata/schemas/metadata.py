from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SourceType = Literal["article", "video", "social", "other"]


class ResolvedMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    title: str
    author: str | None = None
    published_at: str | None = Field(default=None, alias="publishedAt")
    type: SourceType = "article"
    description: str | None = None
    thumbnail: str | None = None


class MetadataPreviewRequest(BaseModel):
    url: str


class LinkPreview(BaseModel):
    title: str
    description: str = ""
    image: str = ""
    favicon: str = ""
    type: SourceType
