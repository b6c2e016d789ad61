from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from highlights.app.models.match_contracts import DetailPageResponse, ListPageResponse, MatchView
from highlights.app.services.match_cache import MatchCache
from highlights.app.services.match_records import MatchRecord
from highlights.app.services.query_pipeline import (
    MatchFilter,
    annotate_favorites,
    find_by_title,
    query,
    select_favorites,
)

LOGGER = logging.getLogger("highlights.catalogue")

HOME_TITLE = "Latest highlights"
COLLECTION_TITLE = "All highlights"
FAVORITES_TITLE = "My favorites"
NO_VIDEO_EMBED_HTML = (
    '<p style="padding: 20px; text-align: center; color: #666;">'
    "No video available for this match.</p>"
)


class CatalogueService:
    def __init__(
        self,
        *,
        cache: MatchCache,
        page_size: int,
        home_limit: int,
    ) -> None:
        self._cache = cache
        self._page_size = max(1, page_size)
        self._home_limit = max(1, home_limit)

    @property
    def cache(self) -> MatchCache:
        return self._cache

    def home(self, *, favorites: Collection[str]) -> ListPageResponse:
        records = self._cache.get()[: self._home_limit]
        return ListPageResponse(
            title=HOME_TITLE,
            matches=_views(annotate_favorites(records, favorites)),
        )

    def collection(
        self,
        *,
        text: str,
        category: str,
        page: int,
        favorites: Collection[str],
    ) -> ListPageResponse:
        text = text.strip()
        category = category.strip()
        result = query(
            self._cache.get(),
            MatchFilter(text=text, category=category),
            page=page,
            page_size=self._page_size,
            favorites=favorites,
        )
        return ListPageResponse(
            title=collection_title(text=text, category=category),
            matches=_views(result.records),
            query=text,
            category=category,
            category_name=category_label(category),
            current_page=result.page,
            total_pages=result.total_pages,
            prev_page=result.prev_page,
            next_page=result.next_page,
        )

    def favorites(self, *, favorites: Collection[str]) -> ListPageResponse:
        return ListPageResponse(
            title=FAVORITES_TITLE,
            matches=_views(select_favorites(self._cache.get(), favorites)),
        )

    def detail(self, *, title: str, favorites: Collection[str]) -> DetailPageResponse:
        record = find_by_title(self._cache.get(), title.strip())
        (annotated,) = annotate_favorites([record], favorites)
        if annotated.videos:
            embed_html = annotated.videos[0].embed
        else:
            LOGGER.info("match has no videos title=%s", annotated.title)
            embed_html = NO_VIDEO_EMBED_HTML
        return DetailPageResponse(match=MatchView.from_record(annotated), embed_html=embed_html)


def collection_title(*, text: str, category: str) -> str:
    if text:
        return f'Results for "{text}"'
    if category:
        return f"Category: {category_label(category)}"
    return COLLECTION_TITLE


def category_label(raw_category: str) -> str:
    return raw_category.strip().lower().title()


def _views(records: Iterable[MatchRecord]) -> list[MatchView]:
    return [MatchView.from_record(record) for record in records]
