import asyncio
import time
import uuid
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum

from indiastreamz.cache.file_cache import FileCache, file_cache
from indiastreamz.core.constants import LANGUAGES
from indiastreamz.core.exceptions import FetchError, ScrapeInProgressError
from indiastreamz.core.logger import logger
from indiastreamz.core.models import settings
from indiastreamz.metadata.enrichment import MetadataEnricher
from indiastreamz.metadata.tmdb import TMDBApi
from indiastreamz.scraper.fetcher import TamilMVFetcher
from indiastreamz.scraper.identity import content_id, episode_stream_id
from indiastreamz.scraper.models import ContentRecord
from indiastreamz.scraper.records import (build_content_record, identity_for,
                                          normalize_title, to_catalog_entry)
from indiastreamz.utils.http_client import http_client_manager


class ScrapeState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class ScrapingStats:
    run_id: str = ""
    mode: str = "incremental"
    total_listings: int = 0
    processed: int = 0
    skipped: int = 0
    excluded: int = 0
    failed: int = 0
    new_items: int = 0
    streams_found: int = 0
    catalogs_written: int = 0
    start_time: float = 0.0
    end_time: float = 0.0

    @property
    def duration(self) -> float:
        if not self.start_time:
            return 0.0
        return (self.end_time or time.time()) - self.start_time

    def to_dict(self) -> dict:
        return {**asdict(self), "duration": round(self.duration, 2)}


def default_fetcher_factory(session):
    return TamilMVFetcher(session)


def default_enricher_factory(session):
    if not settings.enrichment_enabled:
        return None
    return MetadataEnricher(TMDBApi(session))


class ScrapeOrchestrator:
    """Owns the scrape state machine and is the only writer of the cache.

    At most one run executes at a time. Scheduled runs that find a run in
    progress are skipped; explicit full replacements raise instead.
    """

    def __init__(
        self,
        cache: FileCache = None,
        fetcher_factory=None,
        enricher_factory=None,
        session_provider=None,
        request_delay: float = None,
    ):
        self.cache = cache or file_cache
        self.fetcher_factory = fetcher_factory or default_fetcher_factory
        self.enricher_factory = enricher_factory or default_enricher_factory
        self.session_provider = session_provider or http_client_manager.get_session
        self.request_delay = (
            settings.SCRAPER_REQUEST_DELAY if request_delay is None else request_delay
        )

        self.state = ScrapeState.IDLE
        self.state_history = deque([ScrapeState.IDLE], maxlen=50)
        self.is_running = False
        self.current_run_id = None
        self.last_error = None
        self.stats = ScrapingStats()
        self.last_stats = None
        self.task: asyncio.Task | None = None
        self._active_run: asyncio.Task | None = None

    def _set_state(self, state: ScrapeState):
        self.state = state
        self.state_history.append(state)

    def _acquire(self) -> bool:
        # no await between the check and the transition, so this is atomic on the loop
        if self.state == ScrapeState.RUNNING:
            return False
        self._set_state(ScrapeState.RUNNING)
        return True

    async def needs_initial_scrape(self) -> bool:
        return not any(
            self.cache.exists(f"catalog:{language}")
            for language in settings.SENTINEL_LANGUAGES
        )

    async def run_scrape(self, force: bool = False):
        """Run one incremental cycle, or return None when another run is active."""
        if not self._acquire():
            logger.log(
                "BACKGROUND_SCRAPER", "Scrape already in progress, skipping this run"
            )
            return None
        return await self._execute(full_replacement=False, bypass_cache=force)

    async def run_full_replacement(self) -> bool:
        if not self._acquire():
            raise ScrapeInProgressError("full replacement")
        return await self._execute(full_replacement=True, bypass_cache=True)

    def launch_scrape(self, force: bool = False) -> asyncio.Task:
        if not self._acquire():
            raise ScrapeInProgressError("scrape")
        self._active_run = asyncio.create_task(
            self._execute(full_replacement=False, bypass_cache=force)
        )
        return self._active_run

    def launch_full_replacement(self) -> asyncio.Task:
        if not self._acquire():
            raise ScrapeInProgressError("full replacement")
        self._active_run = asyncio.create_task(
            self._execute(full_replacement=True, bypass_cache=True)
        )
        return self._active_run

    async def clear_cache(self) -> bool:
        if self.state == ScrapeState.RUNNING:
            raise ScrapeInProgressError("cache clear")
        return await self.cache.clear()

    async def _execute(self, full_replacement: bool, bypass_cache: bool) -> bool:
        run_id = str(uuid.uuid4())
        self.current_run_id = run_id
        self.stats = ScrapingStats(
            run_id=run_id,
            mode="full_replacement" if full_replacement else "incremental",
            start_time=time.time(),
        )
        outcome = ScrapeState.FAILED
        logger.log(
            "BACKGROUND_SCRAPER", f"Run {run_id} started (mode={self.stats.mode})"
        )

        try:
            if await self._run_cycle(full_replacement, bypass_cache):
                outcome = ScrapeState.SUCCESS
                self.last_error = None
                return True
            return False
        except asyncio.CancelledError:
            self.last_error = "cancelled"
            raise
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Run {run_id} failed: {e}")
            return False
        finally:
            self.stats.end_time = time.time()
            self.last_stats = self.stats
            self._set_state(outcome)
            logger.log(
                "BACKGROUND_SCRAPER",
                f"Run {run_id} finished with status={outcome.value} "
                f"listings={self.stats.total_listings} processed={self.stats.processed} "
                f"skipped={self.stats.skipped} excluded={self.stats.excluded} "
                f"failed={self.stats.failed} new={self.stats.new_items} "
                f"streams={self.stats.streams_found} duration={self.stats.duration:.2f}s",
            )
            self.current_run_id = None
            self._set_state(ScrapeState.IDLE)

    async def _cached_record(self, record_id: str):
        data = await self.cache.read(f"content:{record_id}")
        if not data:
            return None
        try:
            return ContentRecord.model_validate(data)
        except ValueError as e:
            logger.warning(f"Ignoring unreadable cached record {record_id}: {e}")
            return None

    async def _run_cycle(self, full_replacement: bool, bypass_cache: bool) -> bool:
        session = await self.session_provider()
        fetcher = self.fetcher_factory(session)
        await fetcher.resolve_base_url()

        listings = await fetcher.fetch_listings()
        if settings.SCRAPER_MAX_ITEMS_PER_RUN:
            listings = listings[: settings.SCRAPER_MAX_ITEMS_PER_RUN]
        self.stats.total_listings = len(listings)

        order = []
        records = {}
        fresh = {}
        fetched_any = False

        for listing in listings:
            self.stats.processed += 1
            title = normalize_title(listing.title)

            if not bypass_cache:
                languages, series = identity_for(title)
                if languages:
                    record_id = content_id(
                        title, languages, series.season if series.is_series else None
                    )
                    if record_id in records:
                        continue
                    cached = await self._cached_record(record_id)
                    if cached is not None:
                        self.stats.skipped += 1
                        records[record_id] = cached
                        order.append(record_id)
                        continue

            if fetched_any and self.request_delay:
                await asyncio.sleep(self.request_delay)
            fetched_any = True

            try:
                draft = await fetcher.fetch_details(listing.url, listing.title)
            except FetchError as e:
                self.stats.failed += 1
                logger.warning(f"Skipping {listing.url}: {e}")
                continue

            record = build_content_record(draft) if draft else None
            if record is None:
                self.stats.excluded += 1
                logger.debug(f"Excluded {listing.title!r}: no language or streams")
                continue

            if record.id in records:
                continue

            if not bypass_cache:
                cached = await self._cached_record(record.id)
                if cached is not None:
                    self.stats.skipped += 1
                    records[record.id] = cached
                    order.append(record.id)
                    continue

            records[record.id] = record
            fresh[record.id] = record
            order.append(record.id)

        if fresh:
            enricher = self.enricher_factory(session)
            if enricher is not None:
                for record in await enricher.enrich_batch(list(fresh.values())):
                    fresh[record.id] = record
                    records[record.id] = record

        contents = {}
        streams = {}
        for record_id, record in fresh.items():
            contents[record_id] = record.model_dump(mode="json")
            stream_list = [stream.model_dump(mode="json") for stream in record.streams]
            streams[record_id] = stream_list
            # every episode of the season shares the season's magnets
            for episode in record.episodes:
                streams[episode_stream_id(record_id, record.season, episode)] = stream_list
            self.stats.streams_found += len(record.streams)
        self.stats.new_items = len(fresh)

        catalogs = await self._build_catalogs(order, records, full_replacement)
        self.stats.catalogs_written = len(catalogs)

        if not contents and not catalogs and not full_replacement:
            logger.log("BACKGROUND_SCRAPER", "No new content and catalogs unchanged")
            return True

        if full_replacement:
            if not contents:
                self.last_error = "full replacement scraped nothing, cache kept"
                logger.warning(f"Run {self.current_run_id}: {self.last_error}")
                return False
            success = await self.cache.write_batch_replace(catalogs, contents, streams)
        else:
            success = await self.cache.write_batch(catalogs, contents, streams)

        if not success:
            self.last_error = "cache write failed"
        return success

    async def _build_catalogs(self, order: list, records: dict, full_replacement: bool):
        run_entries = {}
        for record_id in order:
            entry = to_catalog_entry(records[record_id]).model_dump(mode="json")
            for language in records[record_id].languages:
                run_entries.setdefault(language, []).append(entry)

        catalogs = {}
        for language in LANGUAGES:
            if language not in run_entries:
                continue

            entries = run_entries[language]
            existing = None
            if not full_replacement:
                existing = await self.cache.read(f"catalog:{language}") or []
                seen = {entry["id"] for entry in entries}
                entries = entries + [
                    entry for entry in existing if entry.get("id") not in seen
                ]

            if settings.CATALOG_MAX_ITEMS:
                entries = entries[: settings.CATALOG_MAX_ITEMS]

            if existing is not None and entries == existing:
                continue
            catalogs[language] = entries

        return catalogs

    async def start(self):
        if self.is_running:
            logger.log("BACKGROUND_SCRAPER", "Background scraper is already running")
            return

        logger.log(
            "BACKGROUND_SCRAPER",
            f"Starting background scraper (interval={settings.SCRAPE_INTERVAL}s)",
        )
        self.is_running = True
        try:
            if settings.SCRAPE_ON_STARTUP and await self.needs_initial_scrape():
                logger.log(
                    "BACKGROUND_SCRAPER",
                    "No sentinel catalogs cached, running initial scrape",
                )
                await self.run_scrape()
            await self._run_continuous()
        finally:
            self.is_running = False

    async def _run_continuous(self):
        while self.is_running:
            try:
                await asyncio.sleep(settings.SCRAPE_INTERVAL)
                if self.is_running:
                    await self.run_scrape()
            except asyncio.CancelledError:
                self.is_running = False
                raise
            except Exception as e:
                self.last_error = str(e)
                logger.error(f"Error in background scraper loop: {e}")

    async def stop(self):
        logger.log("BACKGROUND_SCRAPER", "Stopping background scraper")
        self.is_running = False

        for task in (self._active_run, self.task):
            if task and not task.done() and task is not asyncio.current_task():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                except Exception as e:
                    self.last_error = str(e)
                    logger.error(f"Background scraper task stopped with error: {e}")
        self._active_run = None
        self.task = None

    def get_status(self) -> dict:
        return {
            "state": self.state.value,
            "history": [state.value for state in self.state_history],
            "scheduler_running": self.is_running,
            "current_run_id": self.current_run_id,
            "current_stats": self.stats.to_dict()
            if self.state == ScrapeState.RUNNING
            else None,
            "last_stats": self.last_stats.to_dict() if self.last_stats else None,
            "last_error": self.last_error,
            "cache": self.cache.stats(),
        }


background_scraper = ScrapeOrchestrator()
