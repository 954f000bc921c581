import secrets

from fastapi import APIRouter, Depends, Header, HTTPException

from indiastreamz.background_scraper.worker import background_scraper
from indiastreamz.core.exceptions import ScrapeInProgressError
from indiastreamz.core.logger import log_capture
from indiastreamz.core.models import settings

router = APIRouter(prefix="/admin/api", tags=["Admin"])


async def require_admin_auth(x_admin_password: str = Header(None)):
    if not x_admin_password or not secrets.compare_digest(
        x_admin_password, settings.ADMIN_DASHBOARD_PASSWORD
    ):
        raise HTTPException(status_code=401, detail="Authentication required")


@router.get(
    "/scraper/status",
    summary="Scraper Status",
    description="Returns the scrape state machine, last run statistics and cache counts.",
    dependencies=[Depends(require_admin_auth)],
)
async def scraper_status():
    return background_scraper.get_status()


@router.post(
    "/scraper/run",
    status_code=202,
    summary="Run Scrape",
    description="Starts an incremental scrape in the background.",
    dependencies=[Depends(require_admin_auth)],
)
async def run_scrape(force: bool = False):
    try:
        background_scraper.launch_scrape(force=force)
    except ScrapeInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"status": "started", "mode": "incremental", "force": force}


@router.post(
    "/scraper/full-replacement",
    status_code=202,
    summary="Full Replacement",
    description="Starts a scrape that re-fetches every item and replaces the whole cache.",
    dependencies=[Depends(require_admin_auth)],
)
async def full_replacement():
    try:
        background_scraper.launch_full_replacement()
    except ScrapeInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"status": "started", "mode": "full_replacement"}


@router.delete(
    "/cache",
    summary="Clear Cache",
    description="Deletes every cached catalog, content record and stream list.",
    dependencies=[Depends(require_admin_auth)],
)
async def clear_cache():
    try:
        cleared = await background_scraper.clear_cache()
    except ScrapeInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    if not cleared:
        raise HTTPException(status_code=500, detail="Failed to clear cache")
    return {"status": "cleared"}


@router.get(
    "/logs",
    summary="Recent Logs",
    description="Returns the most recent captured log records.",
    dependencies=[Depends(require_admin_auth)],
)
async def logs(limit: int = 200):
    return {"logs": log_capture.get_logs()[-max(1, limit) :]}
