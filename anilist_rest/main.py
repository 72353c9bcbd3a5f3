import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from anilist_rest.api.media import router as media_router
from anilist_rest.api.routes import router as base_router
from anilist_rest.clients.anilist import AniListClient
from anilist_rest.core.cache import ResponseCache
from anilist_rest.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    cache: Optional[ResponseCache] = None,
    anilist: Optional[AniListClient] = None,
) -> FastAPI:
    """
    Build the app. The cache and AniList client live exactly as long as the
    lifespan: created at startup (unless injected), closed at shutdown.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---- startup -----------------------------------------------------------
        app.state.cache = cache if cache is not None else ResponseCache(
            ttl=settings.cache_ttl,
            check_period=settings.cache_check_period,
            max_size=settings.cache_max_size,
        )
        app.state.anilist = anilist if anilist is not None else AniListClient(
            url=settings.anilist_url, timeout=settings.request_timeout
        )
        app.state.cache.start()
        logger.info(
            "AniList Anime & Manga API running at http://localhost:%s", settings.port
        )

        yield

        # ---- shutdown ----------------------------------------------------------
        await app.state.cache.stop()
        app.state.cache.clear()
        await app.state.anilist.aclose()

    app = FastAPI(title=settings.service_name, lifespan=lifespan)
    app.state.settings = settings

    # --- CORS setup --------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
        max_age=86400,
    )

    # Routers
    app.include_router(base_router)
    app.include_router(media_router)
    return app


app = create_app()


def run() -> None:
    configure_logging(default_settings.log_level)
    uvicorn.run(
        app,
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
