from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime

from highlights.app.services.match_records import MatchRecord

PRETTY_DATE_FORMAT = "%d %b %Y %H:%M"


def normalize_matches(records: Iterable[MatchRecord]) -> list[MatchRecord]:
    """
    Fill display fields and return records newest first.

    Ordering compares the raw date strings, not parsed timestamps, so it is only
    chronological for fixed-width ISO-8601 input. Other formats still get a
    deterministic (lexicographic) order.
    """
    normalized = [
        replace(
            record,
            pretty_date=format_pretty_date(record.date_raw),
            category=extract_category(record.competition),
        )
        for record in records
    ]
    normalized.sort(key=lambda record: record.date_raw, reverse=True)
    return normalized


def format_pretty_date(raw_value: str) -> str:
    candidate = raw_value.strip()
    if not candidate:
        return raw_value
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        try:
            # Provider offsets may come without a colon (`+0000`).
            parsed = datetime.strptime(candidate, "%Y-%m-%dT%H:%M:%S%z")
        except ValueError:
            return raw_value
    return parsed.strftime(PRETTY_DATE_FORMAT)


def extract_category(competition: str) -> str:
    league, _, _ = competition.partition(":")
    return league.strip().lower()
