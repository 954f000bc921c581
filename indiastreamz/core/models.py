import random
import string
from typing import List, Optional

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    ADDON_ID: Optional[str] = "com.indiastreamz.tamilmv"
    ADDON_NAME: Optional[str] = "IndiaStreamz"
    ADDON_VERSION: Optional[str] = "1.0.0"
    ADDON_DESCRIPTION: Optional[str] = "TamilMV movies by language and quality"
    FASTAPI_HOST: Optional[str] = "0.0.0.0"
    FASTAPI_PORT: Optional[int] = 3005
    LOG_LEVEL: Optional[str] = "DEBUG"
    ADMIN_DASHBOARD_PASSWORD: Optional[str] = "".join(
        random.choices(string.ascii_letters + string.digits, k=16)
    )

    SCRAPER_BASE_URL: Optional[str] = "https://www.1tamilmv.lc"
    SCRAPER_DOMAIN_RESOLVER_URL: Optional[str] = "https://www.1tamilmv.fi"
    SCRAPER_MAX_ITEMS_PER_RUN: Optional[int] = 100
    SCRAPER_REQUEST_DELAY: Optional[float] = 1.0
    SCRAPER_MAX_RETRIES: Optional[int] = 3
    SCRAPER_RETRY_BACKOFF: Optional[float] = 1.0
    SCRAPER_REQUEST_TIMEOUT: Optional[int] = 30
    SCRAPER_USER_AGENT: Optional[str] = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )

    BACKGROUND_SCRAPER_ENABLED: Optional[bool] = True
    SCRAPE_INTERVAL: Optional[int] = 14400  # 4 hours
    SCRAPE_ON_STARTUP: Optional[bool] = True
    SENTINEL_LANGUAGES: List[str] = ["tamil", "telugu", "hindi"]

    CACHE_DIR: Optional[str] = "cache"
    CACHE_VALIDATE_MTIME: Optional[bool] = True
    CATALOG_MAX_ITEMS: Optional[int] = 1000
    CATALOG_PAGE_SIZE: Optional[int] = 100

    TMDB_API_KEY: Optional[str] = None
    TMDB_READ_ACCESS_TOKEN: Optional[str] = None
    TMDB_TIMEOUT: Optional[int] = 10
    TMDB_RATE_LIMIT_DELAY: Optional[float] = 0.25
    ENRICHMENT_CONCURRENCY: Optional[int] = 10
    ENRICHMENT_MIN_SCORE: Optional[float] = 30.0
    ENRICHMENT_APPLY_WEAK_MATCHES: Optional[bool] = True

    TORBOX_API_URL: Optional[str] = "https://api.torbox.app/v1/api"
    DEBRID_CHECK_TIMEOUT: Optional[int] = 10

    HTTP_CLIENT_LIMIT: Optional[int] = 100
    HTTP_CLIENT_LIMIT_PER_HOST: Optional[int] = 20
    HTTP_CLIENT_TTL_DNS_CACHE: Optional[int] = 300
    HTTP_CLIENT_KEEPALIVE_TIMEOUT: Optional[int] = 30
    HTTP_CLIENT_TIMEOUT_TOTAL: Optional[int] = 60

    @field_validator(
        "SCRAPER_BASE_URL", "SCRAPER_DOMAIN_RESOLVER_URL", "TORBOX_API_URL"
    )
    def remove_trailing_slash(cls, v):
        if v and v.endswith("/"):
            return v[:-1]
        return v

    @field_validator("SENTINEL_LANGUAGES")
    def lowercase_languages(cls, v):
        return [language.strip().lower() for language in v if language.strip()]

    @property
    def enrichment_enabled(self) -> bool:
        return bool(self.TMDB_API_KEY or self.TMDB_READ_ACCESS_TOKEN)


settings = AppSettings()


class ConfigModel(BaseModel):
    debridService: Optional[str] = "torrent"
    debridApiKey: Optional[str] = ""
    cachedFirst: Optional[bool] = True

    @field_validator("debridService")
    def check_debrid_service(cls, v):
        v = (v or "torrent").lower()
        if v not in ("torrent", "torbox"):
            raise ValueError("Invalid debridService")
        return v


default_config = ConfigModel().model_dump()
