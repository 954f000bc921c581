from fastapi import APIRouter

from indiastreamz.core.config_validation import config_check
from indiastreamz.core.constants import (LANGUAGE_NAMES, LANGUAGES,
                                         SERIES_CATALOG_SUFFIX)
from indiastreamz.core.models import settings

router = APIRouter()

CATALOG_EXTRA = [
    {"name": "search", "isRequired": False},
    {"name": "skip", "isRequired": False},
]


def build_catalogs():
    catalogs = []
    for language in LANGUAGES:
        display_name = LANGUAGE_NAMES[language]
        catalogs.append(
            {
                "type": "movie",
                "id": language,
                "name": f"TamilMV {display_name} Movies",
                "extra": CATALOG_EXTRA,
            }
        )
        catalogs.append(
            {
                "type": "series",
                "id": f"{language}{SERIES_CATALOG_SUFFIX}",
                "name": f"TamilMV {display_name} Series",
                "extra": CATALOG_EXTRA,
            }
        )
    return catalogs


@router.get(
    "/manifest.json",
    tags=["Stremio"],
    summary="Add-on Manifest",
    description="Returns the add-on manifest.",
)
@router.get(
    "/{b64config}/manifest.json",
    tags=["Stremio"],
    summary="Add-on Manifest",
    description="Returns the add-on manifest with existing configuration.",
)
async def manifest(b64config: str = None):
    config = config_check(b64config)
    debrid_extension = " | TB" if config["debridService"] == "torbox" else ""

    return {
        "id": settings.ADDON_ID,
        "version": settings.ADDON_VERSION,
        "name": f"{settings.ADDON_NAME}{debrid_extension}",
        "description": settings.ADDON_DESCRIPTION,
        "resources": ["catalog", "meta", "stream"],
        "types": ["movie", "series"],
        "catalogs": build_catalogs(),
        "idPrefixes": [language + "-" for language in LANGUAGES]
        + ["multi-", "unknown-"],
        "behaviorHints": {"configurable": False, "configurationRequired": False},
    }
