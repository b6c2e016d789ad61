from __future__ import annotations

import string
from collections.abc import Iterable
from urllib.parse import quote, unquote

FavoriteSet = frozenset[str]

DELIMITER = "|"
# Printable ASCII stays readable in the cookie; `%`, the delimiter and
# non-ASCII characters are percent-encoded per entry.
_SAFE_CHARACTERS = " " + "".join(ch for ch in string.punctuation if ch not in {"%", DELIMITER})


def read_favorites(cookie_value: str | None) -> FavoriteSet:
    if not cookie_value:
        return frozenset()
    titles: set[str] = set()
    for entry in cookie_value.split(DELIMITER):
        title = unquote(entry).strip()
        if title:
            titles.add(title)
    return frozenset(titles)


def toggle_favorite(favorites: Iterable[str], title: str) -> FavoriteSet:
    current = set(favorites)
    if title in current:
        current.remove(title)
    else:
        current.add(title)
    return frozenset(current)


def encode_favorites(favorites: Iterable[str]) -> str:
    """Sorted so the cookie value does not depend on toggle order."""
    return DELIMITER.join(quote(title, safe=_SAFE_CHARACTERS) for title in sorted(set(favorites)))
