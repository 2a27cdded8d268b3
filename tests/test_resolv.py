import socket
from types import SimpleNamespace
from unittest import mock

import dns.resolver
import pytest

from ssrkit.netutils import SockAddr
from ssrkit.resolv import ResolveMode, Resolver, choose_address

V4 = SockAddr(socket.AF_INET, "192.0.2.10", 80)
V4B = SockAddr(socket.AF_INET, "192.0.2.11", 80)
V6 = SockAddr(socket.AF_INET6, "2001:db8::1", 80)


def _fake(a=None, aaaa=None, calls=None):
    def resolve(self, qname, rdtype, **kwargs):
        if calls is not None:
            calls.append((qname, rdtype, kwargs))
        data = a if rdtype == "A" else aaaa
        if data is None:
            raise dns.resolver.NXDOMAIN()
        return [SimpleNamespace(address=item) for item in data]

    return resolve


def test_ipv4_first_prefers_ipv4():
    assert choose_address([V6, V4, V4B], ResolveMode.IPV4_FIRST) == V4


def test_ipv6_first_prefers_ipv6():
    assert choose_address([V4, V6], ResolveMode.IPV6_FIRST) == V6


def test_fallback_to_first_address():
    assert choose_address([V4, V4B], ResolveMode.IPV6_FIRST) == V4


def test_any_mode_takes_first():
    assert choose_address([V6, V4], ResolveMode.IPV4_ONLY) == V6


def test_empty_returns_none():
    assert choose_address([], ResolveMode.IPV4_FIRST) is None


def test_mode_from_ipv6first():
    assert Resolver(["192.0.2.53"], True).mode is ResolveMode.IPV6_FIRST
    assert Resolver(["192.0.2.53"], False).mode is ResolveMode.IPV4_FIRST


def test_nameservers_kept():
    assert Resolver(["192.0.2.53", "192.0.2.54"]).nameservers == [
        "192.0.2.53",
        "192.0.2.54",
    ]


def test_resolve_ipv4_first_with_port():
    fake = _fake(a=["192.0.2.10"], aaaa=["2001:db8::1"])
    with mock.patch.object(dns.resolver.Resolver, "resolve", fake):
        result = Resolver(["192.0.2.53"], False).resolve("example.com", 443)
    assert result == SockAddr(socket.AF_INET, "192.0.2.10", 443)


def test_resolve_ipv6_first():
    fake = _fake(a=["192.0.2.10"], aaaa=["2001:db8::1"])
    with mock.patch.object(dns.resolver.Resolver, "resolve", fake):
        result = Resolver(["192.0.2.53"], True).resolve("example.com", 8080)
    assert result == SockAddr(socket.AF_INET6, "2001:db8::1", 8080)


def test_resolve_falls_back_when_a_fails():
    fake = _fake(a=None, aaaa=["2001:db8::1"])
    with mock.patch.object(dns.resolver.Resolver, "resolve", fake):
        result = Resolver(["192.0.2.53"], False).resolve("example.com", 80)
    assert result == V6


def test_resolve_nothing_found():
    fake = _fake()
    with mock.patch.object(dns.resolver.Resolver, "resolve", fake):
        assert Resolver(["192.0.2.53"]).resolve("example.com", 80) is None


def test_both_queries_sent():
    calls = []
    fake = _fake(a=["192.0.2.10"], calls=calls)
    with mock.patch.object(dns.resolver.Resolver, "resolve", fake):
        result = Resolver(["192.0.2.53"]).resolve("example.com", 80)
    assert result == V4
    assert [rdtype for _, rdtype, _ in calls] == ["A", "AAAA"]
    assert all(qname == "example.com" for qname, _, _ in calls)


def test_local_nameserver_used_as_source():
    calls = []
    fake = _fake(a=["192.0.2.10"], calls=calls)
    with mock.patch.object(dns.resolver.Resolver, "resolve", fake):
        result = Resolver(["127.0.0.1"]).resolve("example.com", 80)
    assert result == V4
    assert calls[0][2]["source"] == "127.0.0.1"


def test_remote_nameserver_no_source():
    calls = []
    fake = _fake(a=["192.0.2.10"], calls=calls)
    with mock.patch.object(dns.resolver.Resolver, "resolve", fake):
        result = Resolver(["192.0.2.53", "127.0.0.1"]).resolve("example.com", 80)
    assert result == V4
    assert calls[0][2]["source"] is None


def test_bad_port_rejected():
    with pytest.raises(ValueError):
        Resolver(["192.0.2.53"]).resolve("example.com", 70000)