# qbt/hashing.py - torrent info hash calculation
import hashlib

import bencodepy
import httpx
from bencodepy.exceptions import DecodingError

from .exceptions import ParameterError


def info_hash(torrent_data: bytes) -> str:
    """
    Calculates the info hash qBittorrent uses to identify a torrent.

    Args:
        torrent_data: raw contents of a .torrent file

    Returns:
        The SHA1 hex digest of the bencoded info dictionary
    """
    try:
        decoded = bencodepy.decode(torrent_data)
    except DecodingError as e:
        raise ParameterError(f"Not a bencoded torrent file: {e}") from e
    if not isinstance(decoded, dict) or b'info' not in decoded:
        raise ParameterError("Torrent data has no info dictionary")
    bencoded_info = bencodepy.encode(decoded[b'info'])
    return hashlib.sha1(bencoded_info).hexdigest()


async def info_hash_from_url(url: str, *, timeout: float = 10.0,
                             transport: httpx.AsyncBaseTransport | None = None) -> str:
    """Downloads a .torrent file and returns its info hash."""
    async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
        response = await client.get(url)
        response.raise_for_status()
        return info_hash(response.content)
