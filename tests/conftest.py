from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from highlights.app.dependencies import get_catalogue_service, reset_cached_dependencies
from highlights.app.main import create_app
from highlights.app.services.catalogue_service import CatalogueService
from highlights.app.services.match_cache import MatchCache
from tests.fakes import SAMPLE_RECORDS, FakeClock, FakeMatchSource


@pytest.fixture
def fake_source() -> FakeMatchSource:
    return FakeMatchSource(list(SAMPLE_RECORDS))


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    fake_source: FakeMatchSource,
) -> Iterator[TestClient]:
    monkeypatch.setenv("HIGHLIGHTS_DATA_DIR", str(tmp_path / "runtime-data"))
    monkeypatch.setenv("HIGHLIGHTS_TELEMETRY_SINK", "none")
    reset_cached_dependencies()

    catalogue = CatalogueService(
        cache=MatchCache(fake_source, ttl_seconds=120),
        page_size=2,
        home_limit=2,
    )
    app = create_app()
    app.dependency_overrides[get_catalogue_service] = lambda: catalogue
    with TestClient(app) as test_client:
        yield test_client

    reset_cached_dependencies()
