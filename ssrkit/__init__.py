"""Building blocks for a proxy server: JSON parsing, address helpers, DNS resolving, rules and protocol helpers."""

__version__ = "0.1.0"

__all__ = [
    "jsonvalue",
    "jsonparse",
    "obfsutil",
    "linkedlist",
    "rule",
    "netutils",
    "resolv",
]