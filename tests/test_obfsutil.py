from itertools import islice
from unittest.mock import patch

import pytest

from ssrkit.obfsutil import ServerInfo, Shift128Plus, get_head_size


def test_head_size_defaults():
    assert get_head_size(None, 30) == 30
    assert get_head_size(b"\x01", 30) == 30
    assert get_head_size(b"", 12) == 12
    assert get_head_size(b"\x02\x00", 30) == 30


def test_head_size_address_types():
    assert get_head_size(b"\x01\x00", 30) == 7
    assert get_head_size(b"\x04\x00", 30) == 19
    assert get_head_size(b"\x09\x00", 30) == 7
    assert get_head_size(b"\x14\x00", 30) == 19


def test_head_size_domain():
    assert get_head_size(b"\x03\x0bexample.com", 30) == 15
    assert get_head_size(b"\x03\xff", 30) == 3


def test_server_info_defaults_and_validation():
    info = ServerInfo(host="example.com", port=8388, key=b"k" * 16)
    assert (info.host, info.port, len(info.key)) == ("example.com", 8388, 16)
    assert ServerInfo().iv == b""
    with pytest.raises(ValueError):
        ServerInfo(host="h" * 64)
    with pytest.raises(ValueError):
        ServerInfo(port=70000)


def test_same_seed_same_sequence():
    first = list(islice(Shift128Plus(1234), 20))
    second = [Shift128Plus(1234).next() for _ in range(1)]
    assert first[0] == second[0]
    assert first == list(islice(Shift128Plus(1234), 20))


def test_seed_is_truncated_to_32_bits():
    a = list(islice(Shift128Plus(77), 10))
    b = list(islice(Shift128Plus(77 + (1 << 32)), 10))
    assert a == b


def test_different_seeds_differ():
    assert list(islice(Shift128Plus(1), 5)) != list(islice(Shift128Plus(2), 5))


def test_outputs_are_64_bit():
    gen = Shift128Plus(0)
    values = [gen.next() for _ in range(200)]
    assert all(0 <= v < 1 << 64 for v in values)
    assert len(set(values)) == len(values)


def test_default_seed_uses_clock():
    with patch("ssrkit.obfsutil.time.time", return_value=98765.4):
        generator = Shift128Plus()
    assert list(islice(generator, 8)) == list(islice(Shift128Plus(98765), 8))