"""Parsed JSON values and the lenient accessors used to read them."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, Optional, Union


class JsonType(Enum):
    """Kind of a parsed JSON value."""

    NONE = 0
    OBJECT = 1
    ARRAY = 2
    INTEGER = 3
    DOUBLE = 4
    STRING = 5
    BOOLEAN = 6
    NULL = 7


_DEFAULTS = {
    JsonType.NONE: lambda: None,
    JsonType.OBJECT: list,
    JsonType.ARRAY: list,
    JsonType.INTEGER: lambda: 0,
    JsonType.DOUBLE: lambda: 0.0,
    JsonType.STRING: str,
    JsonType.BOOLEAN: lambda: False,
    JsonType.NULL: lambda: None,
}


class JsonValue:
    """A node of a parsed JSON document.

    Objects hold an ordered list of ``(name, JsonValue)`` pairs, so duplicate
    names are kept; arrays hold a list of ``JsonValue``. Lookups that miss
    return a value of type ``JsonType.NONE`` instead of raising, and the
    conversions to ``str``, ``int``, ``float`` and ``bool`` fall back to an
    empty or zero result for values of another type.
    """

    __slots__ = ("type", "value", "parent")

    def __init__(
        self,
        type: JsonType,
        value: Any = None,
        parent: Optional["JsonValue"] = None,
    ) -> None:
        self.type = JsonType(type)
        if value is None:
            value = _DEFAULTS[self.type]()
        elif self.type is JsonType.OBJECT:
            value = [(str(name), item) for name, item in value]
        elif self.type is JsonType.ARRAY:
            value = list(value)
        elif self.type is JsonType.INTEGER:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError("integer value expected")
        elif self.type is JsonType.DOUBLE:
            value = float(value)
        elif self.type is JsonType.STRING:
            if not isinstance(value, str):
                raise TypeError("string value expected")
        elif self.type is JsonType.BOOLEAN:
            value = bool(value)
        else:
            raise TypeError(f"{self.type.name} value takes no payload")
        self.value = value
        self.parent = parent

    def __getitem__(self, key: Union[int, str]) -> "JsonValue":
        if isinstance(key, str):
            if self.type is JsonType.OBJECT:
                for name, item in self.value:
                    if name == key:
                        return item
            return _NONE
        if isinstance(key, int) and not isinstance(key, bool):
            if self.type is JsonType.ARRAY and 0 <= key < len(self.value):
                return self.value[key]
            return _NONE
        raise TypeError("key must be an int or a str")

    def __len__(self) -> int:
        if self.type in (JsonType.OBJECT, JsonType.ARRAY, JsonType.STRING):
            return len(self.value)
        return 0

    def __iter__(self) -> Iterator[Any]:
        if self.type in (JsonType.OBJECT, JsonType.ARRAY):
            return iter(self.value)
        return iter(())

    def __str__(self) -> str:
        return self.value if self.type is JsonType.STRING else ""

    def __int__(self) -> int:
        if self.type is JsonType.INTEGER:
            return self.value
        if self.type is JsonType.DOUBLE:
            return int(self.value)
        return 0

    def __float__(self) -> float:
        if self.type in (JsonType.INTEGER, JsonType.DOUBLE):
            return float(self.value)
        return 0.0

    def __bool__(self) -> bool:
        return self.type is JsonType.BOOLEAN and bool(self.value)

    def __repr__(self) -> str:
        return f"JsonValue({self.type.name}, {self.value!r})"

    def to_python(self) -> Any:
        """Convert to plain Python data; the first of duplicate names wins."""
        if self.type is JsonType.OBJECT:
            result: dict = {}
            for name, item in self.value:
                result.setdefault(name, item.to_python())
            return result
        if self.type is JsonType.ARRAY:
            return [item.to_python() for item in self.value]
        if self.type in (JsonType.NONE, JsonType.NULL):
            return None
        return self.value


_NONE = JsonValue(JsonType.NONE)