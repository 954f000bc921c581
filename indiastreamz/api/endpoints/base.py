from fastapi import APIRouter
from fastapi.responses import RedirectResponse

from indiastreamz.background_scraper.worker import background_scraper
from indiastreamz.core.models import settings

router = APIRouter()


@router.get(
    "/",
    tags=["General"],
    summary="Root Redirect",
    description="Redirects to the add-on manifest.",
)
async def root():
    return RedirectResponse("/manifest.json")


@router.get(
    "/health",
    tags=["General"],
    summary="Health Check",
    description="Returns the health status of the application and its cache.",
)
async def health():
    return {
        "status": "ok",
        "scraper": background_scraper.state.value,
        "catalogs": {
            language: background_scraper.cache.exists(f"catalog:{language}")
            for language in settings.SENTINEL_LANGUAGES
        },
    }
