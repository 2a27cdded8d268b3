"""Address helpers: host-name validation, address ordering and resolution."""

from __future__ import annotations

import ipaddress
import logging
import socket
import string
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

__all__ = [
    "INET_SIZE",
    "INET6_SIZE",
    "ResolveError",
    "SockAddr",
    "bind_to_address",
    "get_sockaddr",
    "set_reuseport",
    "sockaddr_cmp",
    "sockaddr_cmp_addr",
    "sockaddr_len",
    "validate_hostname",
]

log = logging.getLogger(__name__)

INET_SIZE = 4
INET6_SIZE = 16

_SOCKADDR_IN_LEN = 16
_SOCKADDR_IN6_LEN = 28
_SO_REUSEPORT = getattr(socket, "SO_REUSEPORT", 15)

_VALID_LABEL_CHARS = frozenset("-" + string.digits + string.ascii_letters + "_")
_MAX_HOSTNAME = 255
_MAX_LABEL = 63
_RESOLVE_ATTEMPTS = 7


class ResolveError(OSError):
    """Raised when a host name cannot be resolved to an address."""


@dataclass(frozen=True)
class SockAddr:
    """An IPv4 or IPv6 socket address."""

    family: int
    host: str
    port: int = 0

    def __post_init__(self) -> None:
        if self.family not in (socket.AF_INET, socket.AF_INET6):
            raise ValueError(f"unsupported address family: {self.family}")
        try:
            ip = ipaddress.ip_address(self.host)
        except ValueError as exc:
            raise ValueError(f"not an IP address: {self.host!r}") from exc
        expected = socket.AF_INET if ip.version == 4 else socket.AF_INET6
        if expected != self.family:
            raise ValueError(f"{self.host!r} does not belong to the address family")
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError("port out of range")
        object.__setattr__(self, "host", ip.compressed)

    @property
    def packed(self) -> bytes:
        """The address in network byte order."""
        return ipaddress.ip_address(self.host).packed

    @property
    def address(self) -> Tuple:
        """The address as the socket module expects it."""
        if self.family == socket.AF_INET6:
            return (self.host, self.port, 0, 0)
        return (self.host, self.port)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _cmp(a, b) -> int:
    return _sign((a > b) - (a < b))


def sockaddr_cmp(addr1: SockAddr, addr2: SockAddr) -> int:
    """Order two addresses by family, then port, then address bytes.

    Returns -1, 0 or 1.
    """
    result = _cmp(addr1.family, addr2.family)
    if result:
        return result
    result = _cmp(addr1.port, addr2.port)
    if result:
        return result
    return _cmp(addr1.packed, addr2.packed)


def sockaddr_cmp_addr(addr1: SockAddr, addr2: SockAddr) -> int:
    """Order two addresses by family and address bytes, ignoring the port.

    Returns -1, 0 or 1.
    """
    result = _cmp(addr1.family, addr2.family)
    if result:
        return result
    return _cmp(addr1.packed, addr2.packed)


def sockaddr_len(family: int) -> int:
    """Size of the socket address structure for ``family``, or 0 if unknown."""
    if family == socket.AF_INET:
        return _SOCKADDR_IN_LEN
    if family == socket.AF_INET6:
        return _SOCKADDR_IN6_LEN
    return 0


def validate_hostname(hostname: Union[str, bytes, None]) -> bool:
    """Return whether ``hostname`` is a syntactically valid DNS name.

    Names are 1 to 255 bytes of dot-separated labels, each 1 to 63 bytes of
    letters, digits, ``-`` and ``_``, neither starting nor ending with
    ``-``. A single trailing dot is allowed.
    """
    if hostname is None:
        return False
    if isinstance(hostname, (bytes, bytearray)):
        try:
            name = bytes(hostname).decode("ascii")
        except UnicodeDecodeError:
            return False
    else:
        name = hostname
    if not 1 <= len(name.encode("utf-8")) <= _MAX_HOSTNAME:
        return False
    if name.startswith("."):
        return False
    if name.endswith("."):
        name = name[:-1]
    for label in name.split("."):
        if not 1 <= len(label) <= _MAX_LABEL:
            return False
        if label.startswith("-") or label.endswith("-"):
            return False
        if not _VALID_LABEL_CHARS.issuperset(label):
            return False
    return True


def _atoi(text: Optional[str]) -> int:
    if text is None:
        return 0
    stripped = str(text).strip()
    sign = 1
    if stripped[:1] in ("+", "-"):
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    digits = ""
    for ch in stripped:
        if not ch.isdigit():
            break
        digits += ch
    return sign * int(digits) if digits else 0


def _literal(host: str) -> Optional[ipaddress._BaseAddress]:
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        return None


def _from_sockaddr(family: int, sockaddr: Tuple) -> SockAddr:
    host = str(sockaddr[0]).split("%", 1)[0]
    return SockAddr(family, host, int(sockaddr[1]))


def get_sockaddr(
    host: str,
    port: Union[str, int, None] = None,
    block: bool = False,
    ipv6first: bool = False,
) -> SockAddr:
    """Turn ``host`` and ``port`` into a socket address.

    IP literals are used as given. Other names are resolved; with ``block``
    a failed lookup is retried, waiting 2, 4, ... 64 seconds in between.
    The first address of the preferred family is chosen (IPv6 when
    ``ipv6first``, else IPv4), otherwise the first address returned.
    Raises ``ResolveError`` when nothing is found.
    """
    ip = _literal(host)
    if ip is not None:
        family = socket.AF_INET if ip.version == 4 else socket.AF_INET6
        number = _atoi(str(port)) if port is not None else 0
        return SockAddr(family, ip.compressed, number & 0xFFFF)

    service = None if port is None else str(port)
    results: List = []
    error: Optional[socket.gaierror] = None
    for attempt in range(1, _RESOLVE_ATTEMPTS + 1):
        try:
            results = socket.getaddrinfo(
                host, service, socket.AF_UNSPEC, socket.SOCK_STREAM
            )
            error = None
        except socket.gaierror as exc:
            error = exc
        if not block or error is None:
            break
        wait = 2 ** attempt
        time.sleep(wait)
        log.error("failed to resolve server name, wait %d seconds", wait)

    if error is not None:
        log.error("getaddrinfo: %s", error)
        raise ResolveError(f"getaddrinfo: {error}") from error

    prefer = socket.AF_INET6 if ipv6first else socket.AF_INET
    usable = [
        (family, sockaddr)
        for family, _type, _proto, _name, sockaddr in results
        if family in (socket.AF_INET, socket.AF_INET6)
    ]
    for family, sockaddr in usable:
        if family == prefer:
            return _from_sockaddr(family, sockaddr)
    if usable:
        family, sockaddr = usable[0]
        return _from_sockaddr(family, sockaddr)
    log.error("failed to resolve remote addr")
    raise ResolveError("failed to resolve remote addr")


def bind_to_address(sock: socket.socket, host: Optional[str]) -> None:
    """Bind ``sock`` to the IP literal ``host`` with any port.

    Raises ``ValueError`` when ``host`` is not an IP address and ``OSError``
    when the bind fails.
    """
    if host is None:
        raise ValueError("no address to bind to")
    ip = _literal(host)
    if ip is None:
        raise ValueError(f"not an IP address: {host!r}")
    family = socket.AF_INET if ip.version == 4 else socket.AF_INET6
    sock.bind(SockAddr(family, ip.compressed, 0).address)


def set_reuseport(sock: socket.socket) -> None:
    """Enable port reuse on ``sock``; raises ``OSError`` on failure."""
    sock.setsockopt(socket.SOL_SOCKET, _SO_REUSEPORT, 1)