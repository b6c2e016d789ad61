from __future__ import annotations


class CatalogueError(Exception):
    pass


class UpstreamError(CatalogueError):
    pass


class UpstreamUnreachableError(UpstreamError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamMalformedError(UpstreamError):
    pass


class MatchNotFoundError(CatalogueError):
    def __init__(self, title: str) -> None:
        super().__init__(f"No match found for title: {title!r}")
        self.title = title
