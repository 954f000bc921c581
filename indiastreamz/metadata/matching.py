import re
from dataclasses import dataclass
from typing import Optional

from thefuzz import fuzz

from indiastreamz.scraper.classifier import TECHNICAL_TERM_PATTERN

NON_ALPHANUMERIC_PATTERN = re.compile(r"[^a-z0-9]")
BRACKETED_PATTERN = re.compile(r"\([^)]*\)|\[[^\]]*\]")
SUFFIX_PATTERN = re.compile(r"\s*(?::|\s-\s).*$")
WHITESPACE_PATTERN = re.compile(r"\s+")

EXACT_MATCH_SCORE = 100
CONTAINS_SCORE = 50
SIMILARITY_WEIGHT = 30
EXACT_YEAR_SCORE = 20
NEAR_YEAR_SCORE = 10
MAX_POPULARITY_BONUS = 10


@dataclass
class MatchResult:
    candidate: dict
    score: float
    weak: bool


def normalize_title(title: str) -> str:
    return NON_ALPHANUMERIC_PATTERN.sub("", (title or "").lower())


def _collapse(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip(" -:")


def title_variations(title: str) -> list[str]:
    """Search queries for a noisy title, most faithful first, without duplicates."""
    title = _collapse(title or "")
    if not title:
        return []

    if title.lower().startswith("the "):
        article_toggled = title[4:]
    else:
        article_toggled = f"The {title}"

    variations = [
        title,
        article_toggled,
        SUFFIX_PATTERN.sub("", title),
        BRACKETED_PATTERN.sub(" ", title),
        TECHNICAL_TERM_PATTERN.sub(" ", title),
    ]

    unique = []
    seen = set()
    for variation in variations:
        variation = _collapse(variation)
        key = variation.lower()
        if variation and key not in seen:
            seen.add(key)
            unique.append(variation)
    return unique


def candidate_year(candidate: dict) -> Optional[int]:
    date = candidate.get("release_date") or candidate.get("first_air_date") or ""
    if len(date) >= 4 and date[:4].isdigit():
        return int(date[:4])
    return None


def _title_score(candidate_title: str, original_title: str) -> float:
    candidate_norm = normalize_title(candidate_title)
    original_norm = normalize_title(original_title)
    if not candidate_norm or not original_norm:
        return 0.0

    if candidate_norm == original_norm:
        return EXACT_MATCH_SCORE
    if candidate_norm in original_norm or original_norm in candidate_norm:
        return CONTAINS_SCORE
    return fuzz.ratio(candidate_norm, original_norm) / 100 * SIMILARITY_WEIGHT


def score_match(candidate: dict, original_title: str, year: int = None) -> float:
    names = {
        candidate.get(key)
        for key in ("title", "name", "original_title", "original_name")
        if candidate.get(key)
    }
    score = max((_title_score(name, original_title) for name in names), default=0.0)

    found_year = candidate_year(candidate)
    if year and found_year:
        if found_year == year:
            score += EXACT_YEAR_SCORE
        elif abs(found_year - year) == 1:
            score += NEAR_YEAR_SCORE

    popularity = candidate.get("popularity") or 0
    score += min(popularity / 100, MAX_POPULARITY_BONUS)
    return score


def find_best_match(
    candidates: list[dict], original_title: str, year: int = None, min_score: float = 30
) -> Optional[MatchResult]:
    if not candidates:
        return None

    scored = [
        (score_match(candidate, original_title, year), index, candidate)
        for index, candidate in enumerate(candidates)
    ]
    # ties go to the provider's own ordering
    score, _, best = max(scored, key=lambda item: (item[0], -item[1]))
    return MatchResult(candidate=best, score=round(score, 2), weak=score < min_score)
