import base64

import orjson

from indiastreamz.core.models import ConfigModel, default_config


def config_check(b64config: str | None):
    if not b64config:
        return dict(default_config)

    try:
        config = orjson.loads(base64.b64decode(b64config).decode())
        validated_config = ConfigModel(**config).model_dump()

        if validated_config["debridService"] != "torrent" and not validated_config[
            "debridApiKey"
        ]:
            validated_config["debridService"] = "torrent"

        return validated_config
    except Exception:
        return dict(default_config)
