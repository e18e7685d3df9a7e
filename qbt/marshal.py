# qbt/marshal.py - request construction for the qBittorrent Web API
from dataclasses import dataclass
from urllib.parse import quote, urlsplit

import httpx

from .exceptions import ParameterError

ENDPOINT = "/api/v2"

DEFAULT_PORTS = {
    "https": 443,
    "http": 80,
}


@dataclass(frozen=True)
class Target:
    """Where the WebUI lives: scheme, host, port and an optional reverse-proxy prefix."""
    scheme: str
    hostname: str
    port: int
    base_path: str = ""

    @property
    def origin(self) -> str:
        host = f"[{self.hostname}]" if ":" in self.hostname else self.hostname
        if self.port == DEFAULT_PORTS[self.scheme]:
            return f"{self.scheme}://{host}"
        return f"{self.scheme}://{host}:{self.port}"

    def url(self, path: str) -> str:
        return f"{self.origin}{self.base_path}{ENDPOINT}{path}"


def resolve_target(host: str) -> Target:
    """
    Turns a user supplied host into a Target.

    Accepts a bare hostname, hostname:port, or a full URL. Without a scheme
    the WebUI is assumed to be served over https. Without a port the scheme's
    default port is used.
    """
    if not host or not host.strip():
        raise ParameterError("Host must not be empty")

    raw = host.strip()
    if "://" not in raw:
        raw = f"https://{raw}"

    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise ParameterError(f"Unsupported scheme: {parts.scheme}")
    if not parts.hostname:
        raise ParameterError(f"No hostname in: {host}")

    try:
        port = parts.port
    except ValueError as e:
        raise ParameterError(f"Invalid port in: {host}") from e

    return Target(
        scheme=scheme,
        hostname=parts.hostname,
        port=port or DEFAULT_PORTS[scheme],
        base_path=parts.path.rstrip("/"),
    )


def _encode_value(name, value) -> str:
    # bool first: True is also an int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    raise ParameterError(
        f"Parameter {name!r} must be a string, number or boolean, got {type(value).__name__}"
    )


def form_encode(parameters: dict | None) -> tuple[int, str]:
    """
    Encodes a flat mapping as application/x-www-form-urlencoded.

    Every name and value is percent-encoded with no safe characters, so
    values holding '&', '=', ',', quotes or braces arrive intact.
    Parameters set to None are left out.

    Returns:
        (byte length of the body, body)
    """
    pairs = []
    for name, value in (parameters or {}).items():
        if value is None:
            continue
        text = _encode_value(name, value)
        pairs.append(f"{quote(str(name), safe='')}={quote(text, safe='')}")
    body = "&".join(pairs)
    return len(body.encode("utf-8")), body


def omit_falsy(**parameters) -> dict:
    """Drops optional parameters that are None, empty, False or 0."""
    return {name: value for name, value in parameters.items() if value}


def join_values(values, separator: str) -> str | None:
    """Collapses a string or an iterable of strings into one delimited string."""
    if values is None:
        return None
    if isinstance(values, str):
        return values or None
    return separator.join(str(v) for v in values) or None


def build_headers(target: Target, length: int, cookie: str | None = None) -> dict:
    # The WebUI rejects POSTs whose Referer/Origin do not match its own host (CSRF check)
    headers = {
        "Referer": target.origin,
        "Origin": target.origin,
        "Content-Type": "application/x-www-form-urlencoded",
        "Content-Length": str(length),
    }
    if cookie:
        headers["Cookie"] = cookie
    return headers


def build_request(target: Target, path: str, parameters: dict | None = None, cookie: str | None = None) -> httpx.Request:
    length, body = form_encode(parameters)
    return httpx.Request(
        "POST",
        target.url(path),
        headers=build_headers(target, length, cookie),
        content=body.encode("utf-8"),
    )
