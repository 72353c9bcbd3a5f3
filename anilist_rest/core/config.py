import os
from pydantic import BaseModel


def _origins(raw: str) -> list[str]:
    # e.g., ALLOWED_ORIGINS="http://localhost:5173,https://my.dev.site"
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseModel):
    service_name: str = os.getenv("SERVICE_NAME", "anilist-rest")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))

    anilist_url: str = os.getenv("ANILIST_URL", "https://graphql.anilist.co")
    request_timeout: float = float(os.getenv("ANILIST_TIMEOUT_SEC", "10.0"))

    cache_ttl: float = float(os.getenv("CACHE_TTL_SEC", "3600"))
    cache_check_period: float = float(os.getenv("CACHE_CHECK_PERIOD_SEC", "600"))
    # 0 keeps the cache unbounded
    cache_max_size: int = int(os.getenv("CACHE_MAX_SIZE", "0"))

    allowed_origins: list[str] = _origins(os.getenv("ALLOWED_ORIGINS", "*"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
