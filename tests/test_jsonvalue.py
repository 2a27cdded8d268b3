import pytest

from ssrkit.jsonvalue import JsonType, JsonValue


def _doc():
    port = JsonValue(JsonType.INTEGER, 8388)
    method = JsonValue(JsonType.STRING, "rc4-md5")
    flags = JsonValue(
        JsonType.ARRAY,
        [JsonValue(JsonType.BOOLEAN, True), JsonValue(JsonType.NULL)],
    )
    ratio = JsonValue(JsonType.DOUBLE, 2.75)
    return JsonValue(
        JsonType.OBJECT,
        [("server_port", port), ("method", method), ("flags", flags), ("ratio", ratio)],
    )


def test_object_lookup_by_name():
    doc = _doc()
    assert int(doc["server_port"]) == 8388
    assert str(doc["method"]) == "rc4-md5"


def test_missing_name_gives_none_type():
    doc = _doc()
    missing = doc["absent"]
    assert missing.type is JsonType.NONE
    assert int(missing) == 0
    assert str(missing) == ""
    assert missing.to_python() is None


def test_array_index_and_out_of_range():
    flags = _doc()["flags"]
    assert bool(flags[0]) is True
    assert flags[1].type is JsonType.NULL
    assert flags[2].type is JsonType.NONE
    assert flags[-1].type is JsonType.NONE


def test_index_on_wrong_type_gives_none():
    doc = _doc()
    assert doc[0].type is JsonType.NONE
    assert doc["flags"]["x"].type is JsonType.NONE


def test_bad_key_type_raises():
    with pytest.raises(TypeError):
        _doc()[1.5]


def test_len_of_containers_and_scalars():
    doc = _doc()
    assert len(doc) == 4
    assert len(doc["flags"]) == 2
    assert len(doc["method"]) == len("rc4-md5")
    assert len(doc["server_port"]) == 0


def test_iteration():
    doc = _doc()
    assert [name for name, _ in doc] == ["server_port", "method", "flags", "ratio"]
    assert [item.type for item in doc["flags"]] == [JsonType.BOOLEAN, JsonType.NULL]
    assert list(doc["server_port"]) == []


def test_numeric_conversions():
    doc = _doc()
    assert float(doc["server_port"]) == 8388.0
    assert float(doc["ratio"]) == 2.75
    assert int(doc["ratio"]) == 2
    assert int(JsonValue(JsonType.DOUBLE, -2.75)) == -2
    assert float(doc["method"]) == 0.0


def test_bool_only_true_for_true_boolean():
    true_value = JsonValue(JsonType.BOOLEAN, True)
    false_value = JsonValue(JsonType.BOOLEAN, False)
    one = JsonValue(JsonType.INTEGER, 1)
    doc = _doc()
    assert true_value.__bool__() is True
    assert true_value.to_python() is True
    assert false_value.__bool__() is False
    assert false_value.to_python() is False
    assert one.__bool__() is False
    assert one.to_python() == 1
    assert doc.__bool__() is False


def test_to_python_roundtrip():
    assert _doc().to_python() == {
        "server_port": 8388,
        "method": "rc4-md5",
        "flags": [True, None],
        "ratio": 2.75,
    }


def test_duplicate_names_first_wins():
    first = JsonValue(JsonType.INTEGER, 1)
    second = JsonValue(JsonType.INTEGER, 2)
    obj = JsonValue(JsonType.OBJECT, [("k", first), ("k", second)])
    assert obj["k"] is first
    assert obj.to_python() == {"k": 1}
    assert len(obj) == 2


def test_defaults_and_parent():
    root = JsonValue(JsonType.ARRAY)
    child = JsonValue(JsonType.STRING, parent=root)
    assert child.parent is root
    assert str(child) == ""
    assert root.to_python() == []


def test_type_mismatch_raises():
    with pytest.raises(TypeError):
        JsonValue(JsonType.INTEGER, "12")
    with pytest.raises(TypeError):
        JsonValue(JsonType.STRING, 12)
    with pytest.raises(TypeError):
        JsonValue(JsonType.NULL, 0)