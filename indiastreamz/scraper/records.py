import re
from dataclasses import replace

from indiastreamz.core.constants import BINGE_GROUP_PREFIX, LANGUAGE_NAMES
from indiastreamz.scraper.classifier import (QUALITY_PATTERNS,
                                             classify_quality,
                                             clean_display_title,
                                             detect_languages, detect_series,
                                             extract_year, format_stream_name,
                                             ordered_languages)
from indiastreamz.scraper.identity import content_id
from indiastreamz.scraper.models import (CatalogEntry, ContentDraft,
                                         ContentRecord, MagnetLink,
                                         StreamEntry)
from indiastreamz.utils.magnet import extract_display_name, extract_info_hash

WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_title(title: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", title or "").strip()


def identity_for(listing_title: str, detail_title: str = None):
    """Languages and series info that make up a topic's content id.

    The listing title is authoritative so the same topic maps to the same id
    before and after its detail page is fetched; the detail title is only
    consulted when the listing title carries no language or series marker.
    """
    languages = detect_languages(listing_title)
    if not languages and detail_title:
        languages = detect_languages(detail_title)

    series = detect_series(listing_title)
    if not series.is_series and detail_title:
        series = detect_series(detail_title)

    return languages, series


def build_streams(magnets: list[MagnetLink]):
    streams = []
    qualities = set()
    seen = set()

    for magnet in magnets:
        info_hash = extract_info_hash(magnet.uri)
        if not info_hash or info_hash in seen:
            continue
        seen.add(info_hash)

        display_name = extract_display_name(magnet.uri) or magnet.description
        details = classify_quality(display_name)
        if details.quality is None and magnet.description:
            fallback = classify_quality(magnet.description)
            if fallback.quality:
                details = replace(details, quality=fallback.quality)

        if details.quality:
            qualities.add(details.quality)

        streams.append(
            StreamEntry(
                name=format_stream_name(details),
                infoHash=info_hash,
                externalUrl=magnet.uri,
                description=display_name or None,
                behaviorHints={"bingeGroup": f"{BINGE_GROUP_PREFIX}-{info_hash[:8]}"},
            )
        )

    ordered_qualities = [
        label for label, _ in QUALITY_PATTERNS if label in qualities
    ]
    return streams, ordered_qualities


def build_content_record(draft: ContentDraft):
    """Turn a scraped draft into a cacheable record, or None when it cannot be served."""
    title = normalize_title(draft.listing_title or draft.title)
    languages, series = identity_for(title, draft.title)
    if not languages:
        return None

    streams, qualities = build_streams(draft.magnets)
    if not streams:
        return None

    languages = ordered_languages(languages)
    cleaned = clean_display_title(draft.title) or clean_display_title(title)
    season = series.season if series.is_series else None

    return ContentRecord(
        id=content_id(title, languages, season),
        type="series" if series.is_series else "movie",
        name=cleaned,
        title=title,
        cleanedDisplayTitle=cleaned,
        originalScrapedTitle=draft.title,
        languages=languages,
        url=draft.url,
        year=extract_year(draft.title) or extract_year(title),
        season=season,
        episodes=series.episodes if series.is_series else [],
        qualities=qualities,
        streams=streams,
        description=draft.synopsis,
    )


def default_description(record: ContentRecord) -> str:
    languages = ", ".join(LANGUAGE_NAMES.get(lang, lang) for lang in record.languages)
    if record.type == "series":
        return f"{record.name} - Season {record.season} ({languages})"
    return f"{record.name} - {languages}"


def to_catalog_entry(record: ContentRecord) -> CatalogEntry:
    return CatalogEntry(
        id=record.id,
        type=record.type,
        name=record.name or record.cleanedDisplayTitle or record.id,
        poster=record.poster,
        background=record.background,
        description=record.description or default_description(record),
        genres=record.genres,
        releaseInfo=record.releaseInfo or (str(record.year) if record.year else None),
        imdbRating=record.imdbRating,
        languages=record.languages,
    )
