from __future__ import annotations

import json
import logging
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from highlights.app.services.errors import UpstreamMalformedError, UpstreamUnreachableError
from highlights.app.services.match_records import MatchRecord, MatchVideo

LOGGER = logging.getLogger("highlights.upstream")


def _default_videos() -> list[UpstreamVideo]:
    return []


class UpstreamVideo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    embed: str = ""

    @field_validator("title", "embed", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class UpstreamMatch(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str
    competition: str = ""
    matchview_url: str = Field(default="", alias="matchviewUrl")
    thumbnail: str = ""
    date: str = ""
    videos: list[UpstreamVideo] = Field(default_factory=_default_videos)

    @field_validator("competition", "matchview_url", "thumbnail", "date", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("videos", mode="before")
    @classmethod
    def _null_as_no_videos(cls, value: object) -> object:
        return [] if value is None else value

    def to_record(self) -> MatchRecord:
        return MatchRecord(
            title=self.title,
            competition=self.competition,
            detail_url=self.matchview_url,
            thumbnail_url=self.thumbnail,
            date_raw=self.date,
            videos=tuple(MatchVideo(title=video.title, embed=video.embed) for video in self.videos),
        )


class UpstreamEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    response: list[UpstreamMatch]


class HighlightsFetcher:
    """Single-shot GET against the highlights provider. Retries are left to callers."""

    def __init__(self, *, url: str, timeout_seconds: float = 10.0) -> None:
        self._url = url
        self._timeout_seconds = max(0.5, timeout_seconds)

    @property
    def url(self) -> str:
        return self._url

    def fetch(self) -> list[MatchRecord]:
        raw_body = _fetch_body(self._url, timeout_seconds=self._timeout_seconds)
        records = decode_envelope(raw_body)
        LOGGER.info("upstream fetch ok url=%s records=%s", self._url, len(records))
        return records


def decode_envelope(raw_body: bytes | str) -> list[MatchRecord]:
    try:
        parsed = json.loads(raw_body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise UpstreamMalformedError(f"Upstream returned invalid JSON: {exc}") from exc

    try:
        envelope = UpstreamEnvelope.model_validate(parsed)
    except ValidationError as exc:
        raise UpstreamMalformedError(
            f"Upstream payload has an unexpected shape ({exc.error_count()} errors)"
        ) from exc
    return [match.to_record() for match in envelope.response]


def _fetch_body(url: str, *, timeout_seconds: float) -> bytes:
    request = Request(
        url,
        headers={
            "accept": "application/json",
            "user-agent": "highlights/0.1",
        },
        method="GET",
    )
    try:
        with urlopen(request, timeout=timeout_seconds) as response:
            return response.read()
    except HTTPError as exc:
        LOGGER.warning("upstream http error url=%s status=%s", url, exc.code)
        raise UpstreamUnreachableError(
            f"Upstream responded with HTTP {exc.code}",
            status_code=int(exc.code),
        ) from exc
    except (URLError, TimeoutError, OSError) as exc:
        LOGGER.warning("upstream request failed url=%s error=%s", url, exc)
        raise UpstreamUnreachableError(f"Upstream request failed: {exc}") from exc
