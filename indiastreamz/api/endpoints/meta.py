from fastapi import APIRouter

from indiastreamz.services import serving

router = APIRouter()


@router.get(
    "/meta/{media_type}/{content_id}.json",
    tags=["Stremio"],
    summary="Metadata",
    description="Returns the cached metadata of one movie or series.",
)
@router.get("/{b64config}/meta/{media_type}/{content_id}.json", include_in_schema=False)
async def meta(media_type: str, content_id: str, b64config: str = None):
    return {"meta": await serving.get_content(media_type, content_id)}
