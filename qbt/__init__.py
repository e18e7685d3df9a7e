# qbt/__init__.py
from .client import QBittorrentClient, connect
from .exceptions import (
    AuthenticationError,
    ParameterError,
    QbtError,
    RequestFailedError,
    ResponseParseError,
)
from .hashing import info_hash, info_hash_from_url
from .marshal import Target, form_encode, resolve_target

__all__ = [
    "connect",
    "QBittorrentClient",
    "Target",
    "resolve_target",
    "form_encode",
    "info_hash",
    "info_hash_from_url",
    "QbtError",
    "ParameterError",
    "AuthenticationError",
    "RequestFailedError",
    "ResponseParseError",
]
