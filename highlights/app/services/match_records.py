from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MatchVideo:
    title: str
    embed: str


@dataclass(frozen=True)
class MatchRecord:
    """
    One highlight entry from the provider.

    `title` is the identity used for lookups and favorites. `pretty_date` and
    `category` are filled in by the normalizer; `is_favorite` is set per request
    on copies handed out by the query pipeline and is never cached.
    """

    title: str
    competition: str
    detail_url: str
    thumbnail_url: str
    date_raw: str
    videos: tuple[MatchVideo, ...] = ()
    pretty_date: str = ""
    category: str = ""
    is_favorite: bool = False


@dataclass(frozen=True)
class CacheSnapshot:
    records: tuple[MatchRecord, ...]
    # Monotonic clock reading taken when the fetch completed.
    fetched_at: float
