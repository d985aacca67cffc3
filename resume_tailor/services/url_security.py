from __future__ import annotations

import ipaddress
import re
import socket
from urllib.parse import urlparse, urlunparse


def normalize_public_url(raw_url: str, *, field_label: str = "Job URL") -> tuple[str, str]:
    value = (raw_url or "").strip()
    if not value:
        raise ValueError(f"{field_label} is required.")
    if not re.match(r"^[a-z][a-z0-9+.-]*://", value, flags=re.IGNORECASE):
        value = f"https://{value}"
    parsed = urlparse(value)
    if parsed.scheme.lower() not in {"http", "https"}:
        raise ValueError(f"Only http/https {field_label.lower()}s are supported.")
    if not parsed.netloc:
        raise ValueError(f"Invalid {field_label.lower()}.")
    hostname = (parsed.hostname or "").lower().strip()
    if not hostname:
        raise ValueError(f"Invalid {field_label.lower()} host.")
    normalized = urlunparse(
        (
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            parsed.path or "/",
            "",
            parsed.query,
            "",
        )
    )
    return normalized, hostname


def _is_blocked_address(address: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    return bool(
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_reserved
        or address.is_multicast
        or address.is_unspecified
    )


def host_is_private_or_local(hostname: str) -> bool:
    host = (hostname or "").strip().lower().strip("[]")
    if host in {"localhost", "127.0.0.1", "::1"} or host.endswith(".local") or host.endswith(".localhost"):
        return True
    try:
        return _is_blocked_address(ipaddress.ip_address(host))
    except ValueError:
        pass
    try:
        infos = socket.getaddrinfo(host, None)
    except (socket.gaierror, UnicodeError):
        return False
    for _family, _socktype, _proto, _canon, sockaddr in infos:
        address = sockaddr[0] if sockaddr else ""
        if not address:
            continue
        try:
            resolved = ipaddress.ip_address(address)
        except ValueError:
            continue
        if _is_blocked_address(resolved):
            return True
    return False
