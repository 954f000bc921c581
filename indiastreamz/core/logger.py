import sys
from collections import deque

from loguru import logger

from indiastreamz.core.log_levels import (CUSTOM_LOG_LEVELS,
                                          STANDARD_LOG_LEVELS, get_level_info)
from indiastreamz.core.models import settings


class LogCapture:
    def __init__(self, max_logs: int = 1000):
        self.logs = deque(maxlen=max_logs)

    def sink(self, message):
        record = message.record
        level_name = record["level"].name
        level_info = get_level_info(level_name)

        self.logs.append(
            {
                "timestamp": record["time"].strftime("%Y-%m-%d %H:%M:%S"),
                "level": level_name,
                "icon": level_info["icon"],
                "color": level_info["color"],
                "module": record["module"],
                "function": record["function"],
                "message": record["message"],
                "created": record["time"].timestamp(),
            }
        )

    def get_logs(self):
        return list(self.logs)


# Global log capture instance
log_capture = LogCapture()


def setupLogger(level: str):
    # Configure custom log levels
    for level_name, level_config in CUSTOM_LOG_LEVELS.items():
        logger.level(
            level_name,
            no=level_config["no"],
            icon=level_config["icon"],
            color=level_config["loguru_color"],
        )

    # Configure standard log levels (override defaults)
    for level_name, level_config in STANDARD_LOG_LEVELS.items():
        logger.level(
            level_name, icon=level_config["icon"], color=level_config["loguru_color"]
        )

    log_format = (
        "<white>{time:YYYY-MM-DD}</white> <magenta>{time:HH:mm:ss}</magenta> | "
        "<level>{level.icon}</level> <level>{level}</level> | "
        "<cyan>{module}</cyan>.<cyan>{function}</cyan> - <level>{message}</level>"
    )

    logger.configure(
        handlers=[
            {
                "sink": sys.stderr,
                "level": level,
                "format": log_format,
                "backtrace": False,
                "diagnose": False,
                "enqueue": True,
            },
            {"sink": log_capture.sink, "level": "DEBUG"},
        ]
    )


setupLogger(settings.LOG_LEVEL)


def log_startup_info(settings):
    logger.log(
        "INDIASTREAMZ",
        f"Server started on http://{settings.FASTAPI_HOST}:{settings.FASTAPI_PORT}",
    )
    logger.log(
        "INDIASTREAMZ",
        f"Admin API Password: {settings.ADMIN_DASHBOARD_PASSWORD} - http://{settings.FASTAPI_HOST}:{settings.FASTAPI_PORT}/admin/api/scraper/status",
    )
    logger.log(
        "INDIASTREAMZ",
        f"Scraper: {settings.SCRAPER_BASE_URL} - Domain Resolver: {settings.SCRAPER_DOMAIN_RESOLVER_URL or 'disabled'} - Max Items: {settings.SCRAPER_MAX_ITEMS_PER_RUN} - Delay: {settings.SCRAPER_REQUEST_DELAY}s",
    )
    logger.log(
        "INDIASTREAMZ",
        f"Background Scraper: {settings.BACKGROUND_SCRAPER_ENABLED} - Interval: {settings.SCRAPE_INTERVAL}s - Sentinel Languages: {', '.join(settings.SENTINEL_LANGUAGES)}",
    )
    logger.log(
        "INDIASTREAMZ",
        f"Cache: {settings.CACHE_DIR} - Validate mtime: {settings.CACHE_VALIDATE_MTIME} - Catalog Max Items: {settings.CATALOG_MAX_ITEMS}",
    )
    logger.log(
        "INDIASTREAMZ",
        f"TMDB Enrichment: {settings.enrichment_enabled} - Concurrency: {settings.ENRICHMENT_CONCURRENCY} - Min Score: {settings.ENRICHMENT_MIN_SCORE} - Apply Weak Matches: {settings.ENRICHMENT_APPLY_WEAK_MATCHES}",
    )
