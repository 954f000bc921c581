from fastapi import APIRouter

from indiastreamz.core.config_validation import config_check
from indiastreamz.core.logger import logger
from indiastreamz.debrid.torbox import TorBox
from indiastreamz.services import serving
from indiastreamz.utils.http_client import http_client_manager

router = APIRouter()


@router.get(
    "/stream/{media_type}/{stream_id}.json",
    tags=["Stremio"],
    summary="Streams",
    description="Returns the cached magnet streams of a movie or an episode.",
)
@router.get(
    "/{b64config}/stream/{media_type}/{stream_id}.json",
    tags=["Stremio"],
    summary="Streams",
    description="Returns cached streams, marking the ones already cached on the configured debrid service.",
)
async def stream(media_type: str, stream_id: str, b64config: str = None):
    streams = await serving.get_streams(media_type, stream_id)
    if not streams:
        return {"streams": []}

    config = config_check(b64config)
    if config["debridService"] != "torbox":
        return {"streams": streams}

    session = await http_client_manager.get_session()
    torbox = TorBox(session, config["debridApiKey"])
    cached_hashes = await torbox.get_cached_hashes(
        [stream["infoHash"] for stream in streams if stream.get("infoHash")]
    )
    logger.log(
        "DEBRID",
        f"TorBox: {len(cached_hashes)}/{len(streams)} cached streams for {stream_id}",
    )

    return {
        "streams": serving.annotate_cached(
            streams, cached_hashes, config["cachedFirst"]
        )
    }
