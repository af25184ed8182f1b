"""
=============================================================================
CLIENT ADDRESS RESOLUTION
=============================================================================

Behind a load balancer the socket peer is the proxy, not the client. The
proxies announce the real chain in X-Forwarded-For:

    client ──► proxy A ──► proxy B ──► this server
    1.1.1.1    10.0.0.1    10.0.0.2    (socket peer = 10.0.0.2)

    X-Forwarded-For: 1.1.1.1, 10.0.0.1
                     ───┬───  ────┬───
                  client first   each proxy appends the hop it saw

Anyone can send that header, so it is only believed when configured.

=============================================================================
TRUST POLICIES
=============================================================================

    False            Ignore the header. ips() == [socket peer]
    True             Believe the whole header.
    ["10.0.0.0/8"]   Walk from the socket peer leftwards; each hop is
                     believed only while the address that reported it
                     is in the allow-list.

    With allow-list ["10.0.0.0/8"] and the example above:

        peer 10.0.0.2 trusted   → believe 10.0.0.1
        10.0.0.1 trusted        → believe 1.1.1.1
        result (client first)   → ["1.1.1.1", "10.0.0.1"]

Malformed entries are dropped. Nothing here raises.
=============================================================================
"""

from typing import Iterable, List, Optional, Union
import ipaddress
import logging

logger = logging.getLogger(__name__)

TrustPolicy = Union[bool, Iterable[str], None]

_Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def normalize_address(value: Optional[str]) -> Optional[str]:
    """
    Validate one address and return it in canonical form.

    Strips whitespace, IPv6 brackets and an IPv4 port suffix. IPv4-mapped
    IPv6 addresses ("::ffff:127.0.0.1") collapse to IPv4.

    Returns:
        The address as a string, or None when it is not an IP address.
    """
    if not value:
        return None

    candidate = value.strip().strip('"')
    if candidate.startswith("["):
        candidate = candidate[1:].split("]", 1)[0]
    elif candidate.count(":") == 1:
        candidate = candidate.split(":", 1)[0]

    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return None

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
        address = address.ipv4_mapped
    return str(address)


def _compile_networks(policy: Iterable[str]) -> List[_Network]:
    networks = []
    for item in policy:
        try:
            networks.append(ipaddress.ip_network(item.strip(), strict=False))
        except ValueError:
            logger.debug("Ignoring invalid trusted proxy entry: %r", item)
    return networks


class AddressResolver:
    """
    Resolves the client address of one request.

    Example:
        resolver = AddressResolver(trust_proxy=["10.0.0.0/8"])
        resolver.ips("10.0.0.2", "1.1.1.1, 10.0.0.1")
        # ['1.1.1.1', '10.0.0.1']
    """

    def __init__(self, trust_proxy: TrustPolicy = False):
        if trust_proxy is True:
            self._trust_all = True
            self._networks: List[_Network] = []
        elif not trust_proxy:
            self._trust_all = False
            self._networks = []
        else:
            if isinstance(trust_proxy, str):
                trust_proxy = trust_proxy.split(",")
            self._trust_all = False
            self._networks = _compile_networks(trust_proxy)

    @property
    def enabled(self) -> bool:
        return self._trust_all or bool(self._networks)

    def is_trusted(self, address: Optional[str]) -> bool:
        """True when `address` may be believed about the hop before it."""
        if self._trust_all:
            return True

        normalized = normalize_address(address)
        if normalized is None or not self._networks:
            return False

        ip = ipaddress.ip_address(normalized)
        return any(ip in network for network in self._networks)

    def ips(self, remote_address: Optional[str], forwarded_for: Optional[str]) -> List[str]:
        """
        Ordered address chain, client first.

        Args:
            remote_address: Socket peer address.
            forwarded_for: Raw X-Forwarded-For value (None when absent).

        Returns:
            The believed forwarded addresses, or [remote_address] when the
            header is untrusted, absent or holds nothing valid. Empty when
            there is no remote address at all.
        """
        remote = normalize_address(remote_address) or remote_address
        fallback = [remote] if remote else []

        if not forwarded_for or not self.is_trusted(remote):
            return fallback

        hops: List[str] = []
        for entry in forwarded_for.split(","):
            address = normalize_address(entry)
            if address is None:
                if entry.strip():
                    logger.debug("Dropping malformed X-Forwarded-For entry: %r", entry)
                continue
            hops.append(address)

        if not self._trust_all:
            # Walk right to left; stop once a hop was reported by an untrusted address.
            believed: List[str] = []
            for address in reversed(hops):
                believed.append(address)
                if not self.is_trusted(address):
                    break
            hops = list(reversed(believed))

        return hops or fallback

    def ip(self, remote_address: Optional[str], forwarded_for: Optional[str]) -> Optional[str]:
        """Left-most address of ips(), or the socket peer."""
        chain = self.ips(remote_address, forwarded_for)
        if chain:
            return chain[0]
        return remote_address
