import traceback

import uvicorn

from indiastreamz.api.app import app
from indiastreamz.core.logger import log_startup_info, logger
from indiastreamz.core.models import settings


def run_with_uvicorn():
    """Run the server with a single uvicorn worker; the scraper is single-writer."""
    config = uvicorn.Config(
        app,
        host=settings.FASTAPI_HOST,
        port=settings.FASTAPI_PORT,
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_config=None,
    )
    server = uvicorn.Server(config=config)

    log_startup_info(settings)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.log("INDIASTREAMZ", "Server stopped by user")
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.exception(traceback.format_exc())
    finally:
        logger.log("INDIASTREAMZ", "Server Shutdown")


if __name__ == "__main__":
    run_with_uvicorn()
