"""
Unit tests for client address resolution.
"""

import pytest

from httpfacade.http.forwarded import AddressResolver, normalize_address


class TestNormalizeAddress:
    """Tests for normalize_address()."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("127.0.0.1", "127.0.0.1"),
            (" 10.0.0.1 ", "10.0.0.1"),
            ("1.2.3.4:8080", "1.2.3.4"),
            ("[::1]:8080", "::1"),
            ("::ffff:127.0.0.1", "127.0.0.1"),
            ("unknown", None),
            ("", None),
            (None, None),
        ],
    )
    def test_normalize(self, value, expected):
        assert normalize_address(value) == expected


class TestAddressResolver:
    """Tests for AddressResolver trust policies."""

    def test_untrusted_ignores_header(self):
        resolver = AddressResolver(False)

        assert resolver.enabled is False
        assert resolver.ips("127.0.0.1", "1.1.1.1") == ["127.0.0.1"]
        assert resolver.ip("127.0.0.1", "1.1.1.1") == "127.0.0.1"

    def test_trust_all(self):
        resolver = AddressResolver(True)

        assert resolver.ips("10.0.0.2", "1.1.1.1, 10.0.0.1") == ["1.1.1.1", "10.0.0.1"]
        assert resolver.ip("10.0.0.2", "1.1.1.1, 10.0.0.1") == "1.1.1.1"

    def test_allow_list_walks_right_to_left(self):
        """Hops reported by untrusted addresses are not believed."""
        resolver = AddressResolver(["10.0.0.0/8"])

        chain = resolver.ips("10.0.0.2", "6.6.6.6, 1.1.1.1, 10.0.0.1")

        assert chain == ["1.1.1.1", "10.0.0.1"]

    def test_allow_list_untrusted_peer(self):
        resolver = AddressResolver(["10.0.0.0/8"])

        assert resolver.ips("8.8.8.8", "1.1.1.1") == ["8.8.8.8"]

    def test_allow_list_from_string(self):
        resolver = AddressResolver("10.0.0.0/8, 127.0.0.1")

        assert resolver.is_trusted("127.0.0.1") is True
        assert resolver.is_trusted("10.1.2.3") is True
        assert resolver.is_trusted("192.168.0.1") is False

    def test_invalid_policy_entries_ignored(self):
        resolver = AddressResolver(["not-a-network"])

        assert resolver.enabled is False
        assert resolver.ips("127.0.0.1", "1.1.1.1") == ["127.0.0.1"]

    def test_malformed_entries_dropped(self):
        resolver = AddressResolver(True)

        assert resolver.ips("10.0.0.2", "1.1.1.1, garbage, , 10.0.0.1") == ["1.1.1.1", "10.0.0.1"]

    def test_all_malformed_falls_back(self):
        resolver = AddressResolver(True)

        assert resolver.ips("10.0.0.2", "unknown") == ["10.0.0.2"]

    def test_no_remote_address(self):
        resolver = AddressResolver(False)

        assert resolver.ips(None, None) == []
        assert resolver.ip(None, None) is None

    def test_ipv4_mapped_peer_is_trusted(self):
        resolver = AddressResolver(["127.0.0.1"])

        assert resolver.ips("::ffff:127.0.0.1", "1.1.1.1") == ["1.1.1.1"]
