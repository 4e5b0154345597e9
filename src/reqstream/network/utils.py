"""
Network utilities for reqstream.

This module provides helpers for URL handling, Host headers
and SSL context setup.
"""

import socket
import ssl
from typing import List, NamedTuple, Optional
from urllib.parse import urlsplit

from ..exceptions import ProtocolError

SUPPORTED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}


class URLComponents(NamedTuple):
    """The parts of a URL needed to open a connection and send a request."""
    scheme: str
    host: str
    port: int
    target: str


def parse_url(url: str) -> URLComponents:
    """
    Parse URL into the components needed for a request.

    Args:
        url: Absolute URL string

    Returns:
        URLComponents where ``target`` is path plus query

    Raises:
        ProtocolError: If the scheme is not http or https
        ValueError: If the URL has no hostname or an invalid port
    """
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise ProtocolError(f"Invalid URL protocol: {parsed.scheme or url!r}")

    host = parsed.hostname or ""
    if not host:
        raise ValueError(f"No hostname found in URL: {url!r}")

    port = parsed.port or DEFAULT_PORTS[scheme]

    target = parsed.path or "/"
    if parsed.query:
        target += "?" + parsed.query

    return URLComponents(scheme=scheme, host=host, port=port, target=target)


def is_ipv6_address(host: str) -> bool:
    """Check if a host string is an IPv6 address."""
    try:
        socket.inet_pton(socket.AF_INET6, host)
        return True
    except OSError:
        return False


def format_host_header(host: str, port: int, scheme: str) -> str:
    """
    Format host header for HTTP requests.

    The port is omitted when it is the scheme's default.
    """
    if is_ipv6_address(host):
        host = f"[{host}]"
    if DEFAULT_PORTS.get(scheme) == port:
        return host
    return f"{host}:{port}"


def create_ssl_context(alpn_protocols: Optional[List[str]] = None) -> ssl.SSLContext:
    """
    Create a verifying client SSL context.

    Args:
        alpn_protocols: Optional list of ALPN protocols to negotiate

    Returns:
        Configured SSL context
    """
    context = ssl.create_default_context()
    if alpn_protocols:
        context.set_alpn_protocols(alpn_protocols)

    context.options |= ssl.OP_NO_COMPRESSION
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    return context
