# Lightweight AniList GraphQL client (httpx)
from __future__ import annotations

import logging
from typing import Any, Dict, NamedTuple, Optional

import httpx

from anilist_rest.schemas import MediaKind, MediaQueryParams, Operation

logger = logging.getLogger(__name__)

ANILIST_URL = "https://graphql.anilist.co"
DEFAULT_TIMEOUT = 10.0

PAGE_INFO = """
    pageInfo {
      total
      currentPage
      lastPage
      hasNextPage
      perPage
    }
"""

MEDIA_FIELDS = """
      id
      title { romaji english native }
      coverImage { large }
      description(asHtml: false)
      chapters
      volumes
      status
      genres
      averageScore
      siteUrl
"""

# list-sort queries skip duration and studios
ANIME_LIST_FIELDS = MEDIA_FIELDS + """
      episodes
      season      # WINTER | SPRING | SUMMER | FALL
      seasonYear
"""

ANIME_FIELDS = ANIME_LIST_FIELDS + """
      duration
      studios(isMain: true) { nodes { name } }
"""


def _page_query(media_args: str, fields: str, *, search: bool = False) -> str:
    params = "$search: String, $page: Int, $perPage: Int" if search else "$page: Int, $perPage: Int"
    return f"""
query ({params}) {{
  Page(page: $page, perPage: $perPage) {{
{PAGE_INFO}
    media({media_args}) {{
{fields}
    }}
  }}
}}
"""


def _media_query(media_type: str, fields: str) -> str:
    return f"""
query ($id: Int) {{
  Media(id: $id, type: {media_type}) {{
{fields}
  }}
}}
"""


class QuerySpec(NamedTuple):
    document: str
    root: str        # "Page" | "Media"
    fallback: str    # message used when upstream gives none


QUERIES: Dict[tuple[MediaKind, Operation], QuerySpec] = {
    ("manga", "search"): QuerySpec(
        _page_query("search: $search, type: MANGA", MEDIA_FIELDS, search=True),
        "Page", "AniList search error"),
    ("manga", "by_id"): QuerySpec(
        _media_query("MANGA", MEDIA_FIELDS), "Media", "AniList ID error"),
    ("manga", "top100"): QuerySpec(
        _page_query("type: MANGA, sort: SCORE_DESC", MEDIA_FIELDS),
        "Page", "AniList top 100 error"),
    ("manga", "trending"): QuerySpec(
        _page_query("type: MANGA, sort: TRENDING_DESC", MEDIA_FIELDS),
        "Page", "AniList trending error"),
    ("manga", "top_manhwa"): QuerySpec(
        _page_query('type: MANGA, countryOfOrigin: "KR", sort: SCORE_DESC', MEDIA_FIELDS),
        "Page", "AniList top manhwa error"),
    ("anime", "search"): QuerySpec(
        _page_query("search: $search, type: ANIME", ANIME_FIELDS, search=True),
        "Page", "AniList search error"),
    ("anime", "by_id"): QuerySpec(
        _media_query("ANIME", ANIME_FIELDS), "Media", "AniList ID error"),
    ("anime", "top100"): QuerySpec(
        _page_query("type: ANIME, sort: SCORE_DESC", ANIME_LIST_FIELDS),
        "Page", "AniList top 100 error"),
    ("anime", "trending"): QuerySpec(
        _page_query("type: ANIME, sort: TRENDING_DESC", ANIME_LIST_FIELDS),
        "Page", "AniList trending error"),
}


class AniListError(RuntimeError):
    """Upstream failure, already reduced to a single message."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _first_error_message(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    errors = body.get("errors")
    if not errors or not isinstance(errors, list):
        return None
    first = errors[0]
    if isinstance(first, dict) and first.get("message"):
        return str(first["message"])
    return None


class AniListClient:
    """
    One shared httpx.AsyncClient for the process. Each call is a single
    attempt; there is no retry.
    """

    def __init__(
        self,
        url: str = ANILIST_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self._http = http or httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def execute(self, query: str, variables: Dict[str, Any], root: str, fallback: str) -> Any:
        """POST one GraphQL document and unwrap ``data[root]``."""
        try:
            r = await self._http.post(self.url, json={"query": query, "variables": variables})
        except httpx.HTTPError as exc:
            logger.warning("AniList transport error: %s", exc)
            raise AniListError(fallback) from exc

        try:
            body = r.json()
        except ValueError:
            body = None

        message = _first_error_message(body)
        if message:
            logger.warning("AniList returned %s: %s", r.status_code, message)
            raise AniListError(message, r.status_code)
        if r.is_error:
            logger.warning("AniList returned %s without error details", r.status_code)
            raise AniListError(fallback, r.status_code)

        data = body.get("data") if isinstance(body, dict) else None
        payload = data.get(root) if isinstance(data, dict) else None
        if not isinstance(payload, dict):
            if payload is not None:
                logger.warning("AniList returned a malformed %s payload", root)
            raise AniListError(fallback, r.status_code)
        return payload

    async def fetch(self, params: MediaQueryParams) -> Any:
        try:
            spec = QUERIES[(params.kind, params.operation)]
        except KeyError:
            raise ValueError(f"{params.operation} is not available for {params.kind}") from None
        return await self.execute(spec.document, params.variables(), spec.root, spec.fallback)

    # --- per-operation helpers ---------------------------------------------------
    async def search(self, kind: MediaKind, search: str, page: int = 1, per_page: int = 10) -> dict:
        return await self.fetch(MediaQueryParams(
            kind=kind, operation="search", search=search, page=page, per_page=per_page))

    async def by_id(self, kind: MediaKind, media_id: int) -> dict:
        return await self.fetch(MediaQueryParams(kind=kind, operation="by_id", id=media_id))

    async def top100(self, kind: MediaKind, page: int = 1, per_page: int = 10) -> dict:
        return await self.fetch(MediaQueryParams(
            kind=kind, operation="top100", page=page, per_page=per_page))

    async def trending(self, kind: MediaKind, page: int = 1, per_page: int = 10) -> dict:
        return await self.fetch(MediaQueryParams(
            kind=kind, operation="trending", page=page, per_page=per_page))

    async def top_manhwa(self, page: int = 1, per_page: int = 10) -> dict:
        return await self.fetch(MediaQueryParams(
            kind="manga", operation="top_manhwa", page=page, per_page=per_page))
