from dataclasses import dataclass, field
from typing import Any, Optional

import pytest

from helmkit.valuesutil import (
    ValidationFailed,
    generate_schema,
    round_trip_through,
    unmarshal_into,
    validate,
)


@dataclass
class FooBar:
    Foo: str
    Bar: int


@dataclass
class Nested:
    name: str = ""
    count: Optional[int] = None
    tags: list[str] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)
    key: str = field(default="", metadata={"json": "the_key", "required": True})


def test_unmarshal_into_int():
    assert unmarshal_into(10, int) == 10


def test_unmarshal_into_any_from_struct():
    assert unmarshal_into(FooBar(Foo="hello world", Bar=12), Any) == {
        "Foo": "hello world",
        "Bar": 12.0,
    }


def test_unmarshal_into_wrong_type():
    with pytest.raises(TypeError):
        unmarshal_into("ten", int)


def test_unmarshal_into_dataclass_fills_zeros():
    result = unmarshal_into({"the_key": "k", "unknown": 1}, Nested)
    assert result == Nested(key="k")


def test_round_trip_drops_unknown_fields():
    out = round_trip_through({"name": "x", "bogus": True}, Nested)
    assert out == {"name": "x", "count": None, "tags": [], "extra": {}, "the_key": ""}


def test_generate_schema_validates_instances():
    schema = generate_schema(Nested)
    assert schema["required"] == ["the_key"]
    validate(schema, {"the_key": "a", "tags": ["x"], "count": 2})
    with pytest.raises(ValidationFailed):
        validate(schema, {"tags": ["x"]})
    with pytest.raises(ValidationFailed):
        validate(schema, {"the_key": "a", "nope": 1})


def test_validate_reports_errors():
    with pytest.raises(ValidationFailed) as info:
        validate({"type": "integer"}, "nope")
    assert len(info.value.errors) == 1