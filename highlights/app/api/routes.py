from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Annotated, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import RedirectResponse
from structlog.contextvars import bind_contextvars, reset_contextvars

from highlights.app.config import AppSettings
from highlights.app.dependencies import get_catalogue_service, get_settings
from highlights.app.models.match_contracts import (
    AboutPageResponse,
    DetailPageResponse,
    ListPageResponse,
)
from highlights.app.services.catalogue_service import CatalogueService
from highlights.app.services.errors import MatchNotFoundError, UpstreamError
from highlights.app.services.favorites_store import (
    FavoriteSet,
    encode_favorites,
    read_favorites,
    toggle_favorite,
)
from highlights.app.services.query_pipeline import parse_page

LOGGER = logging.getLogger("highlights.api")

GENERIC_FAILURE_DETAIL = "Something went wrong"
DEFAULT_TOGGLE_REDIRECT = "/favorites"

router = APIRouter()

_T = TypeVar("_T")

SettingsDep = Annotated[AppSettings, Depends(get_settings)]
CatalogueDep = Annotated[CatalogueService, Depends(get_catalogue_service)]


def _favorites_from_request(request: Request, settings: AppSettings) -> FavoriteSet:
    return read_favorites(request.cookies.get(settings.favorites_cookie_name))


def _require_title(raw_title: str | None) -> str:
    title = raw_title.strip() if raw_title is not None else ""
    if not title:
        raise HTTPException(status_code=400, detail="Missing required parameter: title")
    return title


def _safe_redirect_target(raw_target: str | None) -> str:
    target = (raw_target or "").strip()
    if not target.startswith("/") or target.startswith("//") or "\\" in target:
        return DEFAULT_TOGGLE_REDIRECT
    return target


def _handle_catalogue(operation: Callable[[], _T]) -> _T:
    try:
        return operation()
    except MatchNotFoundError as exc:
        LOGGER.info("match not found title=%s", exc.title)
        raise HTTPException(status_code=404, detail="Match not found") from exc
    except UpstreamError as exc:
        LOGGER.exception("catalogue request failed error_type=%s", type(exc).__name__)
        raise HTTPException(status_code=500, detail=GENERIC_FAILURE_DETAIL) from exc


@router.get("/", response_model=ListPageResponse, tags=["pages"], operation_id="home")
def home(
    request: Request,
    settings: SettingsDep,
    catalogue: CatalogueDep,
) -> ListPageResponse:
    favorites = _favorites_from_request(request, settings)
    return _handle_catalogue(lambda: catalogue.home(favorites=favorites))


@router.get(
    "/matches",
    response_model=ListPageResponse,
    tags=["pages"],
    operation_id="list_matches",
)
def list_matches(
    request: Request,
    settings: SettingsDep,
    catalogue: CatalogueDep,
    q: str = "",
    category: str = "",
    page: str | None = None,
) -> ListPageResponse:
    favorites = _favorites_from_request(request, settings)
    context_tokens = bind_contextvars(match_query=q.strip(), match_category=category.strip())
    try:
        return _handle_catalogue(
            lambda: catalogue.collection(
                text=q,
                category=category,
                page=parse_page(page),
                favorites=favorites,
            )
        )
    finally:
        reset_contextvars(**context_tokens)


@router.get(
    "/category",
    response_model=ListPageResponse,
    tags=["pages"],
    operation_id="category_matches",
)
def category_matches(
    request: Request,
    settings: SettingsDep,
    catalogue: CatalogueDep,
    category: str = "",
    page: str | None = None,
) -> Response | ListPageResponse:
    if not category.strip():
        return RedirectResponse("/matches", status_code=303)
    return list_matches(request, settings, catalogue, category=category, page=page)


@router.get(
    "/search",
    response_model=ListPageResponse,
    tags=["pages"],
    operation_id="search_matches",
)
def search_matches(
    request: Request,
    settings: SettingsDep,
    catalogue: CatalogueDep,
    q: str = "",
    page: str | None = None,
) -> Response | ListPageResponse:
    if not q.strip():
        return RedirectResponse("/matches", status_code=303)
    return list_matches(request, settings, catalogue, q=q, page=page)


@router.get(
    "/favorites",
    response_model=ListPageResponse,
    tags=["pages"],
    operation_id="list_favorites",
)
def list_favorites(
    request: Request,
    settings: SettingsDep,
    catalogue: CatalogueDep,
) -> ListPageResponse:
    favorites = _favorites_from_request(request, settings)
    return _handle_catalogue(lambda: catalogue.favorites(favorites=favorites))


@router.get(
    "/match",
    response_model=DetailPageResponse,
    tags=["pages"],
    operation_id="match_detail",
)
def match_detail(
    request: Request,
    settings: SettingsDep,
    catalogue: CatalogueDep,
    title: Annotated[str | None, Query()] = None,
) -> DetailPageResponse:
    wanted_title = _require_title(title)
    favorites = _favorites_from_request(request, settings)
    return _handle_catalogue(lambda: catalogue.detail(title=wanted_title, favorites=favorites))


@router.get(
    "/fav-toggle",
    response_class=RedirectResponse,
    status_code=303,
    tags=["favorites"],
    operation_id="toggle_favorite",
)
def toggle_favorite_route(
    request: Request,
    settings: SettingsDep,
    title: Annotated[str | None, Query()] = None,
    redirect: Annotated[str | None, Query()] = None,
) -> RedirectResponse:
    wanted_title = _require_title(title)
    favorites = toggle_favorite(_favorites_from_request(request, settings), wanted_title)
    LOGGER.info(
        "favorite toggled favorited=%s total=%s",
        wanted_title in favorites,
        len(favorites),
    )

    response = RedirectResponse(_safe_redirect_target(redirect), status_code=303)
    response.set_cookie(
        settings.favorites_cookie_name,
        encode_favorites(favorites),
        max_age=settings.favorites_cookie_max_age_seconds,
        path="/",
        httponly=True,
    )
    return response


@router.get("/about", response_model=AboutPageResponse, tags=["pages"], operation_id="about")
def about() -> AboutPageResponse:
    return AboutPageResponse()
