from __future__ import annotations

import math

import pytest

from highlights.app.services.errors import MatchNotFoundError
from highlights.app.services.normalizer import normalize_matches
from highlights.app.services.query_pipeline import (
    NO_PAGE,
    MatchFilter,
    filter_matches,
    find_by_title,
    paginate,
    parse_page,
    query,
)
from tests.fakes import make_record

RECORDS = normalize_matches(
    [
        make_record("Arsenal - Chelsea", competition="ENGLAND: Premier League"),
        make_record("Real Madrid - Barcelona", competition="SPAIN: La Liga"),
        make_record("Liverpool - Everton", competition="ENGLAND: FA Cup"),
        make_record("Friendly Match", competition=""),
    ]
)


def _titles(records: list) -> list[str]:
    return [record.title for record in records]


def test_empty_filters_pass_everything_through() -> None:
    assert _titles(filter_matches(RECORDS, MatchFilter())) == _titles(RECORDS)
    assert _titles(filter_matches(RECORDS, MatchFilter(text="  ", category=" "))) == _titles(
        RECORDS
    )


def test_text_filter_matches_title_or_competition_case_insensitively() -> None:
    by_title = filter_matches(RECORDS, MatchFilter(text="CHELSEA"))
    by_competition = filter_matches(RECORDS, MatchFilter(text="la liga"))

    assert _titles(by_title) == ["Arsenal - Chelsea"]
    assert _titles(by_competition) == ["Real Madrid - Barcelona"]


def test_category_filter_uses_derived_category() -> None:
    filtered = filter_matches(RECORDS, MatchFilter(category="England"))

    assert sorted(_titles(filtered)) == ["Arsenal - Chelsea", "Liverpool - Everton"]


def test_records_without_category_do_not_match_a_category_filter() -> None:
    filtered = filter_matches(RECORDS, MatchFilter(category="friendly"))

    assert filtered == []


def test_text_and_category_filters_compose_with_and() -> None:
    filtered = filter_matches(RECORDS, MatchFilter(text="cup", category="england"))
    mismatched = filter_matches(RECORDS, MatchFilter(text="cup", category="spain"))

    assert _titles(filtered) == ["Liverpool - Everton"]
    assert mismatched == []


@pytest.mark.parametrize("count", [0, 1, 8, 9, 10, 27, 28])
@pytest.mark.parametrize("page_size", [1, 4, 9])
def test_total_pages_and_clamping(count: int, page_size: int) -> None:
    expected_total = max(1, math.ceil(count / page_size))

    for requested in (-3, 0, 1, 2, expected_total, expected_total + 5):
        window = paginate(count, page=requested, page_size=page_size)
        assert window.total_pages == expected_total
        assert 1 <= window.page <= expected_total
        assert 0 <= window.end - window.start <= page_size


def test_prev_and_next_are_zero_at_boundaries() -> None:
    first = paginate(25, page=1, page_size=10)
    middle = paginate(25, page=2, page_size=10)
    last = paginate(25, page=99, page_size=10)

    assert (first.prev_page, first.next_page) == (NO_PAGE, 2)
    assert (middle.prev_page, middle.next_page) == (1, 3)
    assert (last.page, last.prev_page, last.next_page) == (3, 2, NO_PAGE)
    assert (last.start, last.end) == (20, 25)


def test_empty_result_is_a_single_empty_page() -> None:
    window = paginate(0, page=4, page_size=9)

    assert (window.page, window.total_pages) == (1, 1)
    assert (window.prev_page, window.next_page) == (NO_PAGE, NO_PAGE)
    assert window.start == window.end == 0


def test_non_positive_page_size_uses_default() -> None:
    assert paginate(10, page=1, page_size=0).total_pages == 2


def test_parse_page_falls_back_to_first_page() -> None:
    assert parse_page(None) == 1
    assert parse_page("") == 1
    assert parse_page("abc") == 1
    assert parse_page("-2") == 1
    assert parse_page(" 3 ") == 3


def test_query_scenario_first_page_of_three() -> None:
    records = normalize_matches(
        [
            make_record("Match 03", date_raw="2024-01-03T10:00:00+00:00"),
            make_record("Match 01", date_raw="2024-01-01T10:00:00+00:00"),
            make_record("Match 02", date_raw="2024-01-02T10:00:00+00:00"),
        ]
    )

    result = query(records, MatchFilter(), page=1, page_size=2)

    assert _titles(result.records) == ["Match 03", "Match 02"]
    assert result.total_pages == 2
    assert result.prev_page == NO_PAGE
    assert result.next_page == 2
    assert result.total_matches == 3


def test_query_annotates_only_the_returned_page_without_touching_inputs() -> None:
    favorites = frozenset({"Arsenal - Chelsea", "Friendly Match"})

    result = query(
        RECORDS,
        MatchFilter(category="england"),
        page=1,
        page_size=1,
        favorites=favorites,
    )

    assert _titles(result.records) == ["Arsenal - Chelsea"]
    assert result.records[0].is_favorite is True
    assert all(record.is_favorite is False for record in RECORDS)


def test_find_by_title_prefers_exact_match() -> None:
    records = [
        make_record("team a vs team b", competition="FIRST: Cup"),
        make_record("Team A vs Team B", competition="SECOND: Cup"),
    ]

    assert find_by_title(records, "Team A vs Team B").competition == "SECOND: Cup"


def test_find_by_title_falls_back_to_normalized_comparison() -> None:
    records = [make_record("team a vs team b")]

    assert find_by_title(records, "Team A  vs\tTeam B").title == "team a vs team b"


def test_find_by_title_first_duplicate_wins() -> None:
    records = [
        make_record("Derby", competition="FIRST: Cup"),
        make_record("Derby", competition="SECOND: Cup"),
    ]

    assert find_by_title(records, "Derby").competition == "FIRST: Cup"


def test_find_by_title_raises_not_found() -> None:
    with pytest.raises(MatchNotFoundError) as exc_info:
        find_by_title(RECORDS, "Nobody - Nowhere")

    assert exc_info.value.title == "Nobody - Nowhere"
