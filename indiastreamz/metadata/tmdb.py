import aiohttp

from indiastreamz.core.constants import (TMDB_API_URL, TMDB_BACKDROP_BASE,
                                         TMDB_POSTER_BASE)
from indiastreamz.core.logger import logger
from indiastreamz.core.models import settings

WRITER_JOBS = {"Writer", "Screenplay", "Story", "Novel", "Characters"}


class TMDBApi:
    def __init__(self, session: aiohttp.ClientSession):
        self.session = session
        self.base_url = TMDB_API_URL
        self.timeout = aiohttp.ClientTimeout(total=settings.TMDB_TIMEOUT)
        self.headers = {"Content-Type": "application/json"}
        self.params = {}
        if settings.TMDB_READ_ACCESS_TOKEN:
            self.headers["Authorization"] = f"Bearer {settings.TMDB_READ_ACCESS_TOKEN}"
        elif settings.TMDB_API_KEY:
            self.params["api_key"] = settings.TMDB_API_KEY

    async def _get(self, path: str, params: dict = None):
        url = f"{self.base_url}{path}"
        async with self.session.get(
            url,
            headers=self.headers,
            params={**self.params, **(params or {})},
            timeout=self.timeout,
        ) as response:
            if response.status != 200:
                text = await response.text()
                logger.log(
                    "ENRICHMENT",
                    f"TMDB: {path} returned status {response.status}: {text[:200]}",
                )
                return None

            return await response.json()

    async def search(self, media_type: str, query: str, year: int = None):
        endpoint = "movie" if media_type == "movie" else "tv"
        params = {"query": query, "language": "en-US", "page": 1}
        if year:
            params["year" if endpoint == "movie" else "first_air_date_year"] = year

        try:
            data = await self._get(f"/search/{endpoint}", params)
            if not data:
                return []
            return data.get("results", [])
        except Exception as e:
            logger.error(f"TMDB: Error searching {endpoint} for {query!r}: {e}")
            return []

    async def get_details(self, media_type: str, tmdb_id: int):
        endpoint = "movie" if media_type == "movie" else "tv"
        try:
            return await self._get(
                f"/{endpoint}/{tmdb_id}",
                {"language": "en-US", "append_to_response": "credits,videos"},
            )
        except Exception as e:
            logger.error(f"TMDB: Error getting {endpoint} details for {tmdb_id}: {e}")
            return None


def _year_of(date: str):
    if date and len(date) >= 4 and date[:4].isdigit():
        return date[:4]
    return None


def extract_metadata(details: dict, media_type: str) -> dict:
    """Flatten a TMDB details payload (with credits and videos) into record fields."""
    credits = details.get("credits") or {}
    crew = credits.get("crew") or []

    directors = [member["name"] for member in crew if member.get("job") == "Director"]
    if media_type == "series":
        directors += [creator["name"] for creator in details.get("created_by") or []]

    writers = []
    for member in crew:
        if member.get("job") in WRITER_JOBS and member["name"] not in writers:
            writers.append(member["name"])

    trailers = [
        {"source": video["key"], "type": "Trailer"}
        for video in (details.get("videos") or {}).get("results") or []
        if video.get("site") == "YouTube" and video.get("type") == "Trailer"
    ][:3]

    release_date = details.get("release_date") or details.get("first_air_date")
    runtime = details.get("runtime")
    if not runtime and details.get("episode_run_time"):
        runtime = details["episode_run_time"][0]

    vote_average = details.get("vote_average")
    countries = [country.get("name") for country in details.get("production_countries") or []]

    return {
        "tmdbId": details.get("id"),
        "tmdbTitle": details.get("title") or details.get("name"),
        "description": details.get("overview"),
        "poster": f"{TMDB_POSTER_BASE}{details['poster_path']}"
        if details.get("poster_path")
        else None,
        "background": f"{TMDB_BACKDROP_BASE}{details['backdrop_path']}"
        if details.get("backdrop_path")
        else None,
        "genres": [genre["name"] for genre in details.get("genres") or []],
        "cast": [member["name"] for member in (credits.get("cast") or [])[:10]],
        "director": list(dict.fromkeys(directors)),
        "writer": writers,
        "runtime": f"{runtime} min" if runtime else None,
        "imdbRating": f"{vote_average:.1f}" if vote_average else None,
        "releaseInfo": _year_of(release_date),
        "released": f"{release_date}T00:00:00.000Z" if release_date else None,
        "trailers": trailers,
        "country": ", ".join(name for name in countries if name) or None,
        "originalLanguage": details.get("original_language"),
        "tagline": details.get("tagline") or None,
        "popularity": details.get("popularity"),
        "voteCount": details.get("vote_count"),
    }
