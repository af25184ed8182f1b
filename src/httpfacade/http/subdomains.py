"""
Hostname → subdomain labels.

    tobi.ferrets.example.com     offset=2
    ──── ─────── ───────────
      │     │        └── base domain, dropped (last `offset` labels)
      └─────┴─────────── ["tobi", "ferrets"], most specific first

A leading "www" label is not treated as a subdomain. IP literals have no
subdomains.
"""

from typing import List, Optional
import ipaddress

DEFAULT_OFFSET = 2


def _is_ip(hostname: str) -> bool:
    try:
        ipaddress.ip_address(hostname.strip("[]"))
    except ValueError:
        return False
    return True


def parse_subdomains(hostname: Optional[str], offset: int = DEFAULT_OFFSET) -> List[str]:
    """
    Split a hostname into its subdomain labels.

    Args:
        hostname: Host without port, e.g. "virk.abc.com".
        offset: Number of trailing labels forming the base domain.

    Returns:
        Labels left to right; [] for a bare base domain, an IP address or
        a missing hostname.

    Examples:
        >>> parse_subdomains("virk.abc.com")
        ['virk']
        >>> parse_subdomains("abc.com")
        []
        >>> parse_subdomains("www.blog.abc.com")
        ['blog']
    """
    if not hostname:
        return []

    hostname = hostname.strip().rstrip(".").lower()
    if not hostname or _is_ip(hostname):
        return []

    labels = [label for label in hostname.split(".") if label]
    if offset > 0:
        labels = labels[:-offset] if len(labels) > offset else []

    if labels and labels[0] == "www":
        labels = labels[1:]
    return labels
