from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from highlights.app.services.match_records import MatchRecord


def _default_videos() -> list[MatchVideoView]:
    return []


def _default_matches() -> list[MatchView]:
    return []


class MatchVideoView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str
    embed: str


class MatchView(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str
    competition: str
    category: str
    detail_url: str
    thumbnail_url: str
    date: str
    pretty_date: str
    videos: list[MatchVideoView] = Field(default_factory=_default_videos)
    is_favorite: bool = False

    @classmethod
    def from_record(cls, record: MatchRecord) -> MatchView:
        return cls(
            title=record.title,
            competition=record.competition,
            category=record.category,
            detail_url=record.detail_url,
            thumbnail_url=record.thumbnail_url,
            date=record.date_raw,
            pretty_date=record.pretty_date,
            videos=[MatchVideoView(title=video.title, embed=video.embed) for video in record.videos],
            is_favorite=record.is_favorite,
        )


class ListPageResponse(BaseModel):
    """Page data handed to the listing templates (home, collection, favorites)."""

    model_config = ConfigDict(extra="forbid")

    title: str
    matches: list[MatchView] = Field(default_factory=_default_matches)
    query: str = ""
    category: str = ""
    category_name: str = ""
    current_page: int = 1
    total_pages: int = 1
    prev_page: int = 0
    next_page: int = 0


class DetailPageResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    match: MatchView
    # Trusted provider markup, passed through verbatim.
    embed_html: str


class AboutPageResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = "About"
