"""Helpers shared by the obfuscation and protocol plugins."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Iterator, Optional

__all__ = ["ServerInfo", "Shift128Plus", "get_head_size"]

_MASK64 = (1 << 64) - 1
_MASK32 = (1 << 32) - 1
_HOST_MAX = 63


@dataclass
class ServerInfo:
    """Connection parameters handed to a plugin."""

    host: str = ""
    port: int = 0
    param: Optional[str] = None
    g_data: Any = None
    iv: bytes = b""
    recv_iv: bytes = b""
    key: bytes = b""
    head_len: int = 0
    tcp_mss: int = 0

    def __post_init__(self) -> None:
        if len(self.host.encode("utf-8")) > _HOST_MAX:
            raise ValueError(f"host longer than {_HOST_MAX} bytes")
        if not 0 <= self.port <= 0xFFFF:
            raise ValueError("port out of range")


def get_head_size(data: Optional[bytes], def_size: int) -> int:
    """Return the size of the address header at the start of ``data``.

    The low three bits of the first byte give the address type: IPv4 heads
    take 7 bytes, IPv6 heads 19, and domain-name heads 4 plus the name
    length (read as a signed byte). Anything else yields ``def_size``.
    """
    if data is None or len(data) < 2:
        return def_size
    head_type = data[0] & 0x7
    if head_type == 1:
        return 7
    if head_type == 4:
        return 19
    if head_type == 3:
        length = data[1]
        if length >= 0x80:
            length -= 0x100
        return 4 + length
    return def_size


class Shift128Plus:
    """The xorshift128+ generator, seeded from a 32-bit value."""

    def __init__(self, seed: Optional[int] = None) -> None:
        if seed is None:
            seed = int(time.time())
        seed &= _MASK32
        self._s0 = seed | 0x100000000
        self._s1 = ((seed << 32) | 0x1) & _MASK64

    def next(self) -> int:
        """Return the next 64-bit output."""
        x = self._s0
        y = self._s1
        self._s0 = y
        x ^= (x << 23) & _MASK64
        x ^= x >> 17
        x ^= y ^ (y >> 26)
        self._s1 = x
        return (x + y) & _MASK64

    def __iter__(self) -> Iterator[int]:
        while True:
            yield self.next()