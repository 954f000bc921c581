import asyncio

from indiastreamz.core.logger import logger
from indiastreamz.core.models import settings
from indiastreamz.metadata.matching import (MatchResult, find_best_match,
                                            title_variations)
from indiastreamz.metadata.tmdb import TMDBApi, extract_metadata
from indiastreamz.scraper.classifier import clean_title_for_search
from indiastreamz.scraper.models import ContentRecord

ENRICHMENT_FIELDS = (
    "description",
    "poster",
    "background",
    "logo",
    "genres",
    "cast",
    "director",
    "writer",
    "runtime",
    "imdbRating",
    "releaseInfo",
    "released",
    "trailers",
    "country",
    "originalLanguage",
    "tagline",
    "popularity",
    "voteCount",
    "tmdbId",
    "tmdbTitle",
)


def _is_present(value) -> bool:
    return value is not None and value != "" and value != [] and value != {}


def merge_metadata(
    record: ContentRecord, metadata: dict, match: MatchResult = None
) -> ContentRecord:
    """Overlay provider fields on a scraped record.

    Only enrichment fields are touched, and only with non-empty values, so the
    scraped draft stays the fallback for everything the provider leaves out.
    """
    update = {
        field: metadata[field]
        for field in ENRICHMENT_FIELDS
        if _is_present(metadata.get(field))
    }
    if update.get("tmdbTitle"):
        update["name"] = update["tmdbTitle"]
    if match is not None:
        update["matchScore"] = match.score
        update["weakMatch"] = match.weak

    return record.model_copy(update=update)


class MetadataEnricher:
    def __init__(
        self,
        api: TMDBApi,
        concurrency: int = None,
        min_score: float = None,
        apply_weak_matches: bool = None,
        rate_limit_delay: float = None,
    ):
        self.api = api
        self.semaphore = asyncio.Semaphore(
            max(1, concurrency or settings.ENRICHMENT_CONCURRENCY)
        )
        self.min_score = (
            min_score if min_score is not None else settings.ENRICHMENT_MIN_SCORE
        )
        self.apply_weak_matches = (
            apply_weak_matches
            if apply_weak_matches is not None
            else settings.ENRICHMENT_APPLY_WEAK_MATCHES
        )
        self.rate_limit_delay = (
            rate_limit_delay
            if rate_limit_delay is not None
            else settings.TMDB_RATE_LIMIT_DELAY
        )

    async def search_candidates(self, media_type: str, title: str, year: int = None):
        candidates = {}
        for index, variation in enumerate(title_variations(title)):
            if index and self.rate_limit_delay:
                await asyncio.sleep(self.rate_limit_delay)

            for result in await self.api.search(media_type, variation, year):
                if result.get("id") is not None:
                    candidates.setdefault(result["id"], result)

            if year and not candidates:
                # a wrong scraped year hides the title entirely
                for result in await self.api.search(media_type, variation):
                    if result.get("id") is not None:
                        candidates.setdefault(result["id"], result)

        return list(candidates.values())

    async def _match(self, record: ContentRecord):
        title, year = clean_title_for_search(record.originalScrapedTitle)
        title = title or record.cleanedDisplayTitle
        year = record.year or year

        async with self.semaphore:
            candidates = await self.search_candidates(record.type, title, year)

        match = find_best_match(candidates, title, year, self.min_score)
        if match is None:
            logger.log("ENRICHMENT", f"No TMDB results for {title!r}")
            return None

        found = match.candidate.get("title") or match.candidate.get("name")
        if match.weak:
            logger.log(
                "ENRICHMENT",
                f"Weak TMDB match for {title!r}: {found!r} (score={match.score})",
            )
            if not self.apply_weak_matches:
                return None

        return match

    async def _details(self, record: ContentRecord, match: MatchResult):
        async with self.semaphore:
            details = await self.api.get_details(record.type, match.candidate["id"])
        if not details:
            return None
        return extract_metadata(details, record.type)

    async def enrich_batch(self, records: list[ContentRecord]) -> list[ContentRecord]:
        if not records:
            return []

        matches = await asyncio.gather(
            *(self._match(record) for record in records), return_exceptions=True
        )

        matched = []
        for record, match in zip(records, matches):
            if isinstance(match, Exception):
                logger.log("ENRICHMENT", f"Search failed for {record.id}: {match}")
            elif match is not None:
                matched.append((record, match))

        details = await asyncio.gather(
            *(self._details(record, match) for record, match in matched),
            return_exceptions=True,
        )

        enriched = {}
        for (record, match), metadata in zip(matched, details):
            if isinstance(metadata, Exception):
                logger.log("ENRICHMENT", f"Details failed for {record.id}: {metadata}")
                continue
            if metadata:
                enriched[record.id] = merge_metadata(record, metadata, match)

        logger.log(
            "ENRICHMENT",
            f"Enriched {len(enriched)}/{len(records)} records ({len(matched)} matched)",
        )
        return [enriched.get(record.id, record) for record in records]
