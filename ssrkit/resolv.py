"""Asynchronous-style host resolution with an address-family preference."""

from __future__ import annotations

import ipaddress
import logging
import socket
from enum import Enum
from typing import Iterable, List, Optional, Sequence

import dns.exception
import dns.resolver

from .netutils import SockAddr

__all__ = ["ResolveMode", "Resolver", "choose_address"]

log = logging.getLogger(__name__)

_LOCAL_PREFIXES = ("127.0.0.1", "::1")


class ResolveMode(Enum):
    """Which address families are looked up and which one is preferred."""

    IPV4_ONLY = 0
    IPV6_ONLY = 1
    IPV4_FIRST = 2
    IPV6_FIRST = 3


def choose_address(
    addresses: Sequence[SockAddr], mode: ResolveMode
) -> Optional[SockAddr]:
    """Pick the address to connect to from ``addresses``.

    In the *_FIRST modes the first address of the preferred family wins;
    otherwise, and as a fallback, the first address is returned. Returns
    ``None`` when there are no addresses.
    """
    prefer = {
        ResolveMode.IPV4_FIRST: socket.AF_INET,
        ResolveMode.IPV6_FIRST: socket.AF_INET6,
    }.get(mode)
    if prefer is not None:
        for addr in addresses:
            if addr.family == prefer:
                return addr
    return addresses[0] if addresses else None


def _local_source(nameservers: Optional[List[str]]) -> Optional[str]:
    """Address to send queries from when the only nameserver is local."""
    if not nameservers or len(nameservers) != 1:
        return None
    server = nameservers[0]
    if not server.startswith(_LOCAL_PREFIXES):
        return None
    try:
        ipaddress.ip_address(server)
    except ValueError:
        log.error("bind_to_address: not an IP address: %s", server)
        return None
    log.info("bind UDP resolver to %s", server)
    return server


class Resolver:
    """Resolves host names through A and AAAA queries.

    With no ``nameservers`` the system resolver configuration is used.
    """

    def __init__(
        self,
        nameservers: Optional[Iterable[str]] = None,
        ipv6first: bool = False,
    ) -> None:
        self.mode = ResolveMode.IPV6_FIRST if ipv6first else ResolveMode.IPV4_FIRST
        if nameservers is None:
            self._resolver = dns.resolver.Resolver()
            self._source = None
        else:
            servers = list(nameservers)
            self._resolver = dns.resolver.Resolver(configure=False)
            self._resolver.nameservers = servers
            self._source = _local_source(servers)

    @property
    def nameservers(self) -> List[str]:
        """The nameservers queries are sent to."""
        return list(self._resolver.nameservers)

    def _query(self, hostname: str, rdtype: str, family: int, port: int) -> List[SockAddr]:
        try:
            answer = self._resolver.resolve(hostname, rdtype, source=self._source)
        except dns.exception.DNSException as exc:
            label = "IPv4" if family == socket.AF_INET else "IPv6"
            log.info("%s resolv: %s", label, exc)
            return []
        found = []
        for record in answer:
            try:
                found.append(SockAddr(family, str(record.address), port))
            except ValueError as exc:
                log.error("unusable DNS query result address: %s", exc)
        return found

    def resolve(self, hostname: str, port: int = 0) -> Optional[SockAddr]:
        """Look ``hostname`` up and return the best address with ``port``.

        Returns ``None`` when no address was found.
        """
        if not 0 <= port <= 0xFFFF:
            raise ValueError("port out of range")
        addresses: List[SockAddr] = []
        if self.mode is not ResolveMode.IPV6_ONLY:
            addresses += self._query(hostname, "A", socket.AF_INET, port)
        if self.mode is not ResolveMode.IPV4_ONLY:
            addresses += self._query(hostname, "AAAA", socket.AF_INET6, port)
        return choose_address(addresses, self.mode)