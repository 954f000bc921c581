"""Read-only views over the cache for the Stremio routes.

Nothing here scrapes or writes: a missing key is simply "no content".
"""

from urllib.parse import unquote

from indiastreamz.cache.file_cache import file_cache
from indiastreamz.core.constants import (LANGUAGE_NAMES, LANGUAGES,
                                         MEDIA_TYPES, SERIES_CATALOG_SUFFIX)
from indiastreamz.core.logger import logger
from indiastreamz.core.models import settings
from indiastreamz.scraper.identity import episode_stream_id
from indiastreamz.scraper.models import ContentRecord
from indiastreamz.scraper.records import default_description

CACHED_MARKER = "⚡"


def parse_catalog_id(catalog_id: str):
    if catalog_id.endswith(SERIES_CATALOG_SUFFIX):
        return catalog_id[: -len(SERIES_CATALOG_SUFFIX)], "series"
    return catalog_id, "movie"


def parse_extra(extra: str = None) -> dict:
    """Parse the ``search=foo&skip=100`` path segment Stremio appends to catalog urls."""
    params = {}
    if not extra:
        return params

    for part in extra.split("&"):
        key, _, value = part.partition("=")
        if key:
            params[key] = unquote(value)
    return params


async def get_catalog(
    media_type: str, catalog_id: str, search: str = None, skip: int = 0
) -> list[dict]:
    language, catalog_type = parse_catalog_id(catalog_id)
    if media_type not in MEDIA_TYPES or catalog_type != media_type:
        return []
    if language not in LANGUAGES:
        return []

    entries = await file_cache.read(f"catalog:{language}") or []
    entries = [entry for entry in entries if entry.get("type") == media_type]

    if search:
        needle = search.strip().lower()
        entries = [entry for entry in entries if needle in (entry.get("name") or "").lower()]

    skip = max(0, skip or 0)
    return entries[skip : skip + settings.CATALOG_PAGE_SIZE]


def to_meta(record: ContentRecord) -> dict:
    meta = {
        "id": record.id,
        "type": record.type,
        "name": record.name or record.cleanedDisplayTitle or record.id,
        "poster": record.poster,
        "posterShape": "regular",
        "background": record.background,
        "logo": record.logo,
        "description": record.description or default_description(record),
        "releaseInfo": record.releaseInfo
        or (str(record.year) if record.year else None),
        "released": record.released,
        "genres": record.genres,
        "director": record.director,
        "cast": record.cast,
        "writer": record.writer,
        "runtime": record.runtime,
        "imdbRating": record.imdbRating,
        "trailers": record.trailers,
        "language": ", ".join(LANGUAGE_NAMES.get(lang, lang) for lang in record.languages),
        "originalLanguage": record.originalLanguage,
        "country": record.country,
        "tagline": record.tagline,
    }

    if record.type == "series":
        meta["videos"] = [
            {
                "id": episode_stream_id(record.id, record.season, episode),
                "title": f"Episode {episode}",
                "season": record.season,
                "episode": episode,
                "released": record.released,
            }
            for episode in record.episodes
        ]
        if not record.episodes:
            # season pack: its streams are stored under the series id itself
            meta["videos"] = [
                {
                    "id": record.id,
                    "title": f"Season {record.season} (complete)",
                    "season": record.season,
                    "episode": 1,
                    "released": record.released,
                }
            ]

    return {key: value for key, value in meta.items() if value is not None}


async def get_content(media_type: str, content_id: str):
    if media_type not in MEDIA_TYPES or not content_id:
        return None

    data = await file_cache.read(f"content:{content_id}")
    if not data or data.get("type") != media_type:
        return None

    try:
        return to_meta(ContentRecord.model_validate(data))
    except ValueError as e:
        logger.warning(f"Cached content {content_id} is unreadable: {e}")
        return None


async def get_streams(media_type: str, stream_id: str) -> list[dict]:
    if media_type not in MEDIA_TYPES or not stream_id:
        return []
    return await file_cache.read(f"streams:{stream_id}") or []


def annotate_cached(streams: list[dict], cached_hashes: set, cached_first: bool = True):
    annotated = []
    for stream in streams:
        stream = dict(stream)
        if stream.get("infoHash") in cached_hashes:
            stream["name"] = f"{CACHED_MARKER} {stream['name']}"
        annotated.append(stream)

    if cached_first:
        # stable sort keeps scrape order inside each group
        annotated.sort(key=lambda stream: stream.get("infoHash") not in cached_hashes)
    return annotated
