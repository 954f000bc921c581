from fastapi import APIRouter

from indiastreamz.services import serving

router = APIRouter()


@router.get(
    "/catalog/{media_type}/{catalog_id}.json",
    tags=["Stremio"],
    summary="Catalog",
    description="Returns a language catalog of cached movies or series.",
)
@router.get(
    "/catalog/{media_type}/{catalog_id}/{extra}.json",
    tags=["Stremio"],
    summary="Catalog With Extras",
    description="Returns a language catalog filtered by search and paginated by skip.",
)
@router.get("/{b64config}/catalog/{media_type}/{catalog_id}.json", include_in_schema=False)
@router.get(
    "/{b64config}/catalog/{media_type}/{catalog_id}/{extra}.json",
    include_in_schema=False,
)
async def catalog(
    media_type: str, catalog_id: str, extra: str = None, b64config: str = None
):
    params = serving.parse_extra(extra)
    try:
        skip = int(params.get("skip") or 0)
    except ValueError:
        skip = 0

    metas = await serving.get_catalog(
        media_type, catalog_id, search=params.get("search"), skip=skip
    )
    return {"metas": metas}
