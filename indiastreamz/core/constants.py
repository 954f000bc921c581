LANGUAGES = ("tamil", "telugu", "hindi", "malayalam", "kannada", "english")

LANGUAGE_NAMES = {
    "tamil": "Tamil",
    "telugu": "Telugu",
    "hindi": "Hindi",
    "malayalam": "Malayalam",
    "kannada": "Kannada",
    "english": "English",
}

LANGUAGE_ALIASES = {
    "TAMIL": "tamil",
    "TAM": "tamil",
    "TELUGU": "telugu",
    "TEL": "telugu",
    "HINDI": "hindi",
    "HIN": "hindi",
    "MALAYALAM": "malayalam",
    "MAL": "malayalam",
    "KANNADA": "kannada",
    "KAN": "kannada",
    "ENGLISH": "english",
    "ENG": "english",
}

MEDIA_TYPES = ("movie", "series")

SERIES_CATALOG_SUFFIX = "-series"

TMDB_API_URL = "https://api.themoviedb.org/3"
TMDB_POSTER_BASE = "https://image.tmdb.org/t/p/w500"
TMDB_BACKDROP_BASE = "https://image.tmdb.org/t/p/original"

BINGE_GROUP_PREFIX = "tamilmv"

TORBOX_CHECK_CHUNK_SIZE = 100
