"""
Typed view of the Google Books volume resource.

Incoming payloads are camelCase (``volumeInfo``, ``pageCount``...), the
models expose and serialise snake_case names.
"""
from datetime import datetime
from typing import Literal

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        populate_by_name=True,
        extra="ignore",
    )


class IndustryIdentifier(CatalogModel):
    type: str
    identifier: str


class ImageLinks(CatalogModel):
    small_thumbnail: str | None = None
    thumbnail: str | None = None
    small: str | None = None
    medium: str | None = None
    large: str | None = None
    extra_large: str | None = None


class VolumeInfo(CatalogModel):
    title: str = ""
    subtitle: str | None = None
    authors: list[str] = Field(default_factory=list)
    publisher: str | None = None
    published_date: str | None = None
    description: str | None = None
    industry_identifiers: list[IndustryIdentifier] = Field(default_factory=list)
    page_count: int | None = None
    print_type: str | None = None
    categories: list[str] = Field(default_factory=list)
    average_rating: float | None = None
    ratings_count: int | None = None
    maturity_rating: str | None = None
    image_links: ImageLinks | None = None
    language: str | None = None
    preview_link: str | None = None
    info_link: str | None = None
    canonical_volume_link: str | None = None


class Volume(CatalogModel):
    id: str
    kind: str | None = None
    etag: str | None = None
    self_link: str | None = None
    volume_info: VolumeInfo = Field(default_factory=VolumeInfo)


class SearchResponse(CatalogModel):
    kind: str | None = None
    total_items: int = 0
    items: list[Volume] = Field(default_factory=list)


class CatalogSnapshot(BaseModel):
    """Versioned copy of the volume stored on a Book row."""

    version: Literal[1] = 1
    source: Literal["google_books"] = "google_books"
    fetched_at: datetime
    volume: Volume


class CatalogConfigOut(BaseModel):
    base_url: str
    has_api_key: bool
    timeout: float
    using_free_tier: bool
