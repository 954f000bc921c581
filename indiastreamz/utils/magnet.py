import re
from urllib.parse import unquote

INFO_HASH_PATTERN = re.compile(r"btih:([a-fA-F0-9]{40})(?![a-fA-F0-9])")
DISPLAY_NAME_PATTERN = re.compile(r"[?&]dn=([^&]+)")


def extract_info_hash(magnet_uri: str):
    match = INFO_HASH_PATTERN.search(magnet_uri or "")
    if not match:
        return None
    return match.group(1).lower()


def extract_display_name(magnet_uri: str):
    match = DISPLAY_NAME_PATTERN.search(magnet_uri or "")
    if not match:
        return None
    # keep literal "+" so tokens like "DD+5.1" survive
    return unquote(match.group(1)).strip() or None
