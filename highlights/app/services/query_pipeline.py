from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass, replace

from highlights.app.services.errors import MatchNotFoundError
from highlights.app.services.match_records import MatchRecord

DEFAULT_PAGE_SIZE = 9
NO_PAGE = 0


@dataclass(frozen=True)
class MatchFilter:
    text: str = ""
    category: str = ""


@dataclass(frozen=True)
class PageWindow:
    page: int
    total_pages: int
    prev_page: int
    next_page: int
    start: int
    end: int


@dataclass(frozen=True)
class QueryPage:
    records: list[MatchRecord]
    page: int
    total_pages: int
    prev_page: int
    next_page: int
    total_matches: int


def query(
    records: Sequence[MatchRecord],
    match_filter: MatchFilter,
    *,
    page: int,
    page_size: int,
    favorites: Collection[str] = frozenset(),
) -> QueryPage:
    filtered = filter_matches(records, match_filter)
    window = paginate(len(filtered), page=page, page_size=page_size)
    return QueryPage(
        records=annotate_favorites(filtered[window.start : window.end], favorites),
        page=window.page,
        total_pages=window.total_pages,
        prev_page=window.prev_page,
        next_page=window.next_page,
        total_matches=len(filtered),
    )


def filter_matches(records: Sequence[MatchRecord], match_filter: MatchFilter) -> list[MatchRecord]:
    text = match_filter.text.strip().lower()
    category = match_filter.category.strip().lower()
    if not text and not category:
        return list(records)

    filtered: list[MatchRecord] = []
    for record in records:
        if text and text not in record.title.lower() and text not in record.competition.lower():
            continue
        if category and category not in record.category.lower():
            continue
        filtered.append(record)
    return filtered


def paginate(count: int, *, page: int, page_size: int) -> PageWindow:
    """Clamp `page` into range; `prev_page`/`next_page` are NO_PAGE at the edges."""
    size = page_size if page_size > 0 else DEFAULT_PAGE_SIZE
    total = max(0, count)
    total_pages = max(1, -(-total // size))
    effective_page = min(max(page, 1), total_pages)
    start = min((effective_page - 1) * size, total)
    end = min(start + size, total)
    return PageWindow(
        page=effective_page,
        total_pages=total_pages,
        prev_page=effective_page - 1 if effective_page > 1 else NO_PAGE,
        next_page=effective_page + 1 if effective_page < total_pages else NO_PAGE,
        start=start,
        end=end,
    )


def parse_page(raw_value: str | None) -> int:
    if raw_value is None:
        return 1
    try:
        parsed = int(raw_value.strip())
    except ValueError:
        return 1
    return parsed if parsed >= 1 else 1


def annotate_favorites(
    records: Sequence[MatchRecord],
    favorites: Collection[str],
) -> list[MatchRecord]:
    return [replace(record, is_favorite=record.title in favorites) for record in records]


def select_favorites(
    records: Sequence[MatchRecord],
    favorites: Collection[str],
) -> list[MatchRecord]:
    return [record for record in annotate_favorites(records, favorites) if record.is_favorite]


def find_by_title(records: Sequence[MatchRecord], title: str) -> MatchRecord:
    for record in records:
        if record.title == title:
            return record

    wanted = normalize_title(title)
    for record in records:
        if normalize_title(record.title) == wanted:
            return record
    raise MatchNotFoundError(title)


def normalize_title(title: str) -> str:
    return " ".join(title.split()).casefold()
