import asyncio
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from indiastreamz.api.endpoints import (admin, base, catalog, manifest, meta,
                                        stream)
from indiastreamz.background_scraper.worker import background_scraper
from indiastreamz.core.logger import logger
from indiastreamz.core.models import settings
from indiastreamz.utils.http_client import http_client_manager


class LoguruMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as e:
            logger.exception(f"Exception during request processing: {e}")
            raise
        finally:
            process_time = time.time() - start_time
            logger.log(
                "API",
                f"{request.method} {request.url.path} - {status_code} - {process_time:.2f}s",
            )


@asynccontextmanager
async def lifespan(app: FastAPI):
    background_scraper_task = None
    if settings.BACKGROUND_SCRAPER_ENABLED:
        background_scraper_task = asyncio.create_task(background_scraper.start())
        background_scraper.task = background_scraper_task

    try:
        yield
    finally:
        if background_scraper_task:
            await background_scraper.stop()

        await http_client_manager.close()


app = FastAPI(
    title="IndiaStreamz",
    summary="Stremio add-on serving TamilMV movies and series by language and quality.",
    lifespan=lifespan,
    redoc_url=None,
)


app.add_middleware(LoguruMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(base.router)
app.include_router(admin.router)
app.include_router(manifest.router)
app.include_router(catalog.router)
app.include_router(meta.router)
app.include_router(stream.router)
