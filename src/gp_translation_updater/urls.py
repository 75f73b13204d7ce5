"""URL checks shared by the collectors, the client and the server result models."""

import ipaddress
from typing import Any

import httpx

_LOCAL_HOSTNAMES = ("localhost",)
_LOCAL_SUFFIXES = (".localhost", ".local", ".internal")


def is_absolute_url(value: Any) -> bool:  # noqa: ANN401
    """Check that a value is a well-formed absolute http(s) URL with a host."""
    if not isinstance(value, str) or not value.strip():
        return False
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError):
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def is_local_host(host: str) -> bool:
    """
    Check whether a URL host names the local machine or a private network.

    Only IP literals and reserved local names are recognised; hostnames are
    not resolved.
    """
    host = host.strip("[]").lower()
    if host in _LOCAL_HOSTNAMES or host.endswith(_LOCAL_SUFFIXES):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return address.is_private or address.is_loopback or address.is_link_local or address.is_unspecified
