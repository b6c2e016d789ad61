from __future__ import annotations

import logging
from collections.abc import Callable
from threading import Lock
from time import monotonic, perf_counter
from typing import Literal, Protocol

from highlights.app.services.errors import UpstreamError
from highlights.app.services.match_records import CacheSnapshot, MatchRecord
from highlights.app.services.normalizer import normalize_matches
from highlights.app.telemetry import TelemetryClient

LOGGER = logging.getLogger("highlights.cache")

CacheState = Literal["empty", "fresh", "stale"]


class MatchSource(Protocol):
    def fetch(self) -> list[MatchRecord]:
        ...


class MatchCache:
    """
    Time-bounded cache over the upstream match list.

    A single lock guards the snapshot and is held for the whole refresh, so at
    most one upstream call is in flight and readers never see a partial
    snapshot. Refresh is lazy: it only happens when `get()` finds the cache
    empty or stale. Fetch errors propagate to the caller and leave the previous
    snapshot in place without serving it; callers that were already waiting on
    the failed refresh receive the same error instead of issuing another call.
    """

    def __init__(
        self,
        source: MatchSource,
        *,
        ttl_seconds: float,
        clock: Callable[[], float] = monotonic,
        telemetry: TelemetryClient | None = None,
    ) -> None:
        self._source = source
        self._ttl_seconds = max(0.0, float(ttl_seconds))
        self._clock = clock
        self._telemetry = telemetry if telemetry is not None else TelemetryClient.disabled()
        self._lock = Lock()
        self._snapshot: CacheSnapshot | None = None
        self._refresh_attempts = 0
        self._last_error: UpstreamError | None = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def state(self) -> CacheState:
        with self._lock:
            return self._state_locked()

    def snapshot(self) -> CacheSnapshot | None:
        with self._lock:
            return self._snapshot

    def get(self) -> list[MatchRecord]:
        observed_attempts = self._refresh_attempts
        with self._lock:
            if self._refresh_attempts != observed_attempts and self._last_error is not None:
                raise self._last_error

            if self._state_locked() == "fresh":
                assert self._snapshot is not None
                LOGGER.debug("match cache hit records=%s", len(self._snapshot.records))
                self._telemetry.emit("match_cache.hit", records=len(self._snapshot.records))
                return list(self._snapshot.records)

            snapshot = self._refresh_locked()
            return list(snapshot.records)

    def _state_locked(self) -> CacheState:
        if self._snapshot is None:
            return "empty"
        if self._clock() - self._snapshot.fetched_at < self._ttl_seconds:
            return "fresh"
        return "stale"

    def _refresh_locked(self) -> CacheSnapshot:
        previous_state = self._state_locked()
        started_at = perf_counter()
        LOGGER.info("match cache refresh start state=%s", previous_state)
        self._telemetry.emit("match_cache.refresh.start", state=previous_state)
        try:
            records = normalize_matches(self._source.fetch())
        except UpstreamError as exc:
            self._last_error = exc
            self._refresh_attempts += 1
            LOGGER.warning(
                "match cache refresh failed state=%s error_type=%s error=%s",
                previous_state,
                type(exc).__name__,
                exc,
            )
            self._telemetry.emit(
                "match_cache.refresh.error",
                state=previous_state,
                error_type=type(exc).__name__,
                duration_ms=int((perf_counter() - started_at) * 1000),
            )
            raise

        self._snapshot = CacheSnapshot(records=tuple(records), fetched_at=self._clock())
        self._last_error = None
        self._refresh_attempts += 1
        duration_ms = int((perf_counter() - started_at) * 1000)
        LOGGER.info(
            "match cache refresh finish records=%s duration_ms=%s",
            len(records),
            duration_ms,
        )
        self._telemetry.emit(
            "match_cache.refresh.finish",
            records=len(records),
            duration_ms=duration_ms,
        )
        return self._snapshot
