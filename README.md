# ssrkit

A set of small, self-contained building blocks for a proxy server:

- `ssrkit.jsonparse` — a lenient JSON parser (`parse`, `JsonParseError`).
  It accepts trailing commas, can allow `//` and `/* */` comments
  (`comments=True`), can cap the estimated memory of the result
  (`max_memory=`), skips a UTF-8 byte-order mark, and reports errors with
  `line:column` positions (`JsonParseError.line`, `JsonParseError.column`).
- `ssrkit.jsonvalue` — the parsed value tree (`JsonValue`, `JsonType`).
  Indexing by name or position returns a `JsonType.NONE` value on a miss
  instead of raising; `str()`, `int()`, `float()` and `bool()` fall back to
  empty or zero results for values of another type; `to_python()` converts
  to plain Python data.
- `ssrkit.obfsutil` — protocol helpers: `get_head_size` (size of the address
  header at the start of a packet), the `Shift128Plus` xorshift128+
  generator and the `ServerInfo` record.
- `ssrkit.linkedlist` — `DataList`, an ordered container of fixed-size byte
  records with front/back insertion, matching, deletion by value or index,
  replacement and selection sort.
- `ssrkit.rule` — regular-expression match rules (`Rule`, `RuleError`,
  `lookup_rule`).
- `ssrkit.netutils` — host-name validation, socket address ordering and
  resolution helpers (`validate_hostname`, `sockaddr_cmp`,
  `sockaddr_cmp_addr`, `sockaddr_len`, `get_sockaddr`, `bind_to_address`,
  `set_reuseport`, `SockAddr`, `ResolveError`).
- `ssrkit.resolv` — an A/AAAA resolver built on dnspython, preferring IPv4
  or IPv6 addresses (`Resolver`, `ResolveMode`, `choose_address`).

## Installation

```
pip install .
```

## Examples

Parsing a configuration document that contains comments:

```python
from ssrkit.jsonparse import parse, JsonParseError

config = parse(b'{"server_port": 8388, /* listening port */ "timeout": 60}',
               comments=True)
print(int(config["server_port"]))   # 8388
print(config.to_python())           # {'server_port': 8388, 'timeout': 60}

try:
    parse(b"[1 2]")
except JsonParseError as exc:
    print(exc, exc.line, exc.column)
```

Checking a host name taken from a request header:

```python
from ssrkit.netutils import validate_hostname

validate_hostname("example.com")   # True
validate_hostname("-bad.example")  # False
```

Choosing a rule for a name:

```python
from ssrkit.rule import Rule, lookup_rule

rules = [Rule(r"\.example\.com$"), Rule(r"^internal")]
matched = lookup_rule(rules, "www.example.com")   # the first rule
```

Resolving a name, preferring IPv6:

```python
from ssrkit.resolv import Resolver

resolver = Resolver(ipv6first=True)
address = resolver.resolve("example.com", 443)   # SockAddr or None
```

## What it does not do

This package is a library of parts. It has no command, does not listen for
or relay connections, and does not encrypt, obfuscate or authenticate
traffic; `ServerInfo` and `get_head_size` are helpers for such code, not an
implementation of it.

## Running the tests

```
pip install .[test]
pytest
```