from __future__ import annotations

from urllib.parse import urlsplit

from .errors import MalformedEndpoint
from .models import Endpoint

DEFAULT_PORTS = {"http": 80, "https": 443}


def resolve_endpoint(baseurl: str) -> Endpoint:
    """
    Parse http[s]://<HOST>[:<PORT>][/<BASE_LOCATION>] into an Endpoint.
    """
    raw = (baseurl or "").strip()
    if not raw:
        raise MalformedEndpoint("base URL is empty")

    try:
        parts = urlsplit(raw)
        port = parts.port
    except ValueError as e:
        raise MalformedEndpoint(f"invalid base URL {raw!r}: {e}") from e

    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise MalformedEndpoint(f"unsupported scheme in {raw!r} (expected http or https)")

    host = parts.hostname
    if not host:
        raise MalformedEndpoint(f"base URL {raw!r} has no host")

    try:
        host.encode("idna")
    except UnicodeError as e:
        raise MalformedEndpoint(f"invalid host name {host!r}: {e}") from e

    if port is None:
        port = DEFAULT_PORTS[scheme]
    elif port == 0:
        raise MalformedEndpoint("port out of range")

    return Endpoint(host=host, port=port, scheme=scheme)  # type: ignore[arg-type]
