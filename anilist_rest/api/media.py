from __future__ import annotations

import logging
import re
from typing import Any, Callable, NamedTuple, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from anilist_rest.clients.anilist import AniListClient, AniListError
from anilist_rest.core.cache import ResponseCache
from anilist_rest.schemas import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    MediaKind,
    MediaQueryParams,
    Operation,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["media"])

INVALID_PAGINATION = "Invalid page or perPage value"
INVALID_ID = "Invalid ID"
INVALID_SEARCH = "Invalid search query"

_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
_ID_RE = re.compile(r"[+-]?\d+")


class MediaRoute(NamedTuple):
    kind: MediaKind
    operation: Operation
    path: str


# Fixed paths must be registered before the /{media_id} catch-all.
# Search terms may contain "/" (Fate/Zero), hence the path converter.
ROUTES: tuple[MediaRoute, ...] = (
    MediaRoute("manga", "top100", "/manga/top100"),
    MediaRoute("manga", "trending", "/manga/trending"),
    MediaRoute("manga", "top_manhwa", "/manga/top-manhwa"),
    MediaRoute("manga", "search", "/manga/search/{query:path}"),
    MediaRoute("manga", "by_id", "/manga/{media_id}"),
    MediaRoute("anime", "top100", "/anime/top100"),
    MediaRoute("anime", "trending", "/anime/trending"),
    MediaRoute("anime", "search", "/anime/search/{query:path}"),
    MediaRoute("anime", "by_id", "/anime/{media_id}"),
)


class InvalidParams(ValueError):
    pass


# --- helpers -----------------------------------------------------------------
def coerce_int(raw: Optional[str], default: int) -> int:
    """Read a leading integer ("3", " 3", "3abc"); anything else gives ``default``."""
    if raw is None:
        return default
    m = _LEADING_INT_RE.match(raw)
    return int(m.group(1)) if m else default


def build_params(
    kind: MediaKind,
    operation: Operation,
    *,
    search: Optional[str] = None,
    media_id: Optional[str] = None,
    page: Optional[str] = None,
    per_page: Optional[str] = None,
) -> MediaQueryParams:
    if operation == "by_id":
        raw_id = (media_id or "").strip()
        if not _ID_RE.fullmatch(raw_id):
            raise InvalidParams(INVALID_ID)
        return MediaQueryParams(kind=kind, operation=operation, id=int(raw_id))

    page_no = coerce_int(page, DEFAULT_PAGE)
    size = coerce_int(per_page, DEFAULT_PER_PAGE)
    if page_no < 1 or size < 1:
        raise InvalidParams(INVALID_PAGINATION)
    if operation == "search" and not search:
        raise InvalidParams(INVALID_SEARCH)
    return MediaQueryParams(
        kind=kind, operation=operation, search=search, page=page_no, per_page=size
    )


def _ok(params: MediaQueryParams, payload: Any, cached: bool) -> JSONResponse:
    if params.paginated:
        body = {
            "success": True,
            "pagination": payload.get("pageInfo"),
            "results": payload.get("media"),
            "cached": cached,
        }
    else:
        body = {"success": True, params.kind: payload, "cached": cached}
    return JSONResponse(status_code=200, content=body)


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


async def resolve(params: MediaQueryParams, cache: ResponseCache, client: AniListClient) -> tuple[Any, bool]:
    """Return ``(payload, cached)``, filling the cache on a miss."""
    key = params.cache_key()
    hit = cache.get(key)
    if hit is not None:
        logger.debug("cache hit %s", key)
        return hit, True
    logger.debug("cache miss %s", key)
    payload = await client.fetch(params)
    cache.set(key, payload)
    return payload, False


async def respond(request: Request, kind: MediaKind, operation: Operation, **raw: Optional[str]) -> JSONResponse:
    try:
        params = build_params(kind, operation, **raw)
    except InvalidParams as exc:
        return _fail(400, str(exc))

    try:
        payload, cached = await resolve(
            params, request.app.state.cache, request.app.state.anilist
        )
        return _ok(params, payload, cached)
    except AniListError as exc:
        return _fail(500, exc.message)
    except Exception as exc:
        logger.exception("%s %s failed", kind, operation)
        return _fail(500, str(exc))


# --- routes ------------------------------------------------------------------
def media_endpoint(kind: MediaKind, operation: Operation) -> Callable[..., Any]:
    if operation == "by_id":
        async def endpoint(request: Request, media_id: str):
            return await respond(request, kind, operation, media_id=media_id)

    elif operation == "search":
        async def endpoint(
            request: Request,
            query: str,
            page: Optional[str] = Query(None, description="page number, default 1"),
            per_page: Optional[str] = Query(None, alias="perPage", description="items per page, default 10"),
        ):
            return await respond(
                request, kind, operation, search=query, page=page, per_page=per_page
            )

    else:
        async def endpoint(
            request: Request,
            page: Optional[str] = Query(None, description="page number, default 1"),
            per_page: Optional[str] = Query(None, alias="perPage", description="items per page, default 10"),
        ):
            return await respond(request, kind, operation, page=page, per_page=per_page)

    endpoint.__name__ = f"{kind}_{operation}"
    return endpoint


for _route in ROUTES:
    router.add_api_route(
        _route.path,
        media_endpoint(_route.kind, _route.operation),
        methods=["GET"],
        name=f"{_route.kind}_{_route.operation}",
    )
