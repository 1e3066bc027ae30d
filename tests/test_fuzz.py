import random
import re

import pytest
from hypothesis import given, settings, strategies as st

from helmkit.fuzz import RegexGenerator, SchemaGenerationError, generate
from helmkit.valuesutil import validate

SCALAR_OR_NESTED = {
    "anyOf": [
        {"$ref": "#/$defs/array"},
        {"$ref": "#/$defs/object"},
        {"$ref": "#/$defs/scalar"},
    ]
}

META_SCHEMA = {
    "$defs": {
        "any": {"const": True},
        "null": {
            "type": "object",
            "required": ["type"],
            "properties": {"type": {"const": "null"}},
        },
        "integer": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "type": {"const": "integer"},
                "minimum": {"type": "integer", "minimum": 0, "maximum": 1000},
                "maximum": {"type": "integer", "minimum": 1001, "maximum": 10000},
            },
        },
        "boolean": {
            "type": "object",
            "required": ["type"],
            "properties": {"type": {"const": "boolean"}},
        },
        "string": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "type": {"const": "string"},
                "minLength": {"type": "integer", "minimum": 0, "maximum": 3},
                "maxLength": {"type": "integer", "minimum": 4, "maximum": 7},
            },
        },
        "scalar": {
            "anyOf": [
                {"$ref": "#/$defs/any"},
                {"$ref": "#/$defs/boolean"},
                {"$ref": "#/$defs/integer"},
                {"$ref": "#/$defs/null"},
                {"$ref": "#/$defs/string"},
            ]
        },
        "array": {
            "type": "object",
            "required": ["type", "items"],
            "properties": {
                "type": {"const": "array"},
                "items": SCALAR_OR_NESTED,
                "minItems": {"type": "integer", "minimum": 0, "maximum": 3},
                "maxItems": {"type": "integer", "minimum": 4, "maximum": 7},
            },
        },
        "object": {
            "type": "object",
            "required": ["type", "properties"],
            "properties": {
                "type": {"const": "object"},
                "properties": {
                    "type": "object",
                    "maxProperties": 10,
                    "minProperties": 0,
                    "additionalProperties": SCALAR_OR_NESTED,
                },
            },
        },
    },
    "anyOf": [{"$ref": "#/$defs/object"}],
}


@settings(max_examples=50, deadline=None)
@given(st.integers(min_value=0, max_value=2**32))
def test_generated_schemas_are_valid(seed):
    instance = generate(random.Random(seed), META_SCHEMA)
    validate(META_SCHEMA, instance)
    assert instance["type"] == "object"


@settings(max_examples=50, deadline=None)
@given(st.integers(min_value=0, max_value=2**32))
def test_generated_schema_yields_valid_values(seed):
    rng = random.Random(seed)
    schema = generate(rng, META_SCHEMA)
    value = generate(rng, schema)
    validate(schema, value)
    assert set(value) <= set(schema["properties"])


@settings(max_examples=30, deadline=None)
@given(st.integers(min_value=0, max_value=2**32))
def test_generate_deterministic(seed):
    first = generate(random.Random(seed), META_SCHEMA)
    second = generate(random.Random(seed), META_SCHEMA)
    assert first == second
    assert first["type"] == "object"


def test_integer_bounds():
    rng = random.Random(1)
    values = [generate(rng, {"type": "integer", "minimum": 5, "maximum": 9}) for _ in range(100)]
    assert all(5 <= v < 9 for v in values)


def test_string_length_bounds():
    rng = random.Random(2)
    values = [generate(rng, {"type": "string", "minLength": 2, "maxLength": 4}) for _ in range(50)]
    assert all(2 <= len(v) < 4 for v in values)


def test_pattern_with_length_rejected():
    with pytest.raises(SchemaGenerationError):
        generate(random.Random(0), {"type": "string", "pattern": "a+", "maxLength": 3})


def test_unknown_ref_rejected():
    with pytest.raises(SchemaGenerationError):
        generate(random.Random(0), {"$ref": "#/$defs/missing"})


def test_missing_required_property_rejected():
    with pytest.raises(SchemaGenerationError):
        generate(random.Random(0), {"type": "object", "required": ["x"], "properties": {}})


def test_deprecated_required_skipped():
    schema = {
        "type": "object",
        "required": ["old"],
        "properties": {"old": {"type": "string", "deprecated": True}},
    }
    assert generate(random.Random(0), schema) == {}


def test_regex_generator_matches():
    pattern = r"[a-c]{2}\d+(x|y)"
    gen = RegexGenerator(pattern, random.Random(3))
    for _ in range(30):
        value = gen.generate(5)
        match = re.fullmatch(pattern, value)
        assert match is not None
        assert match.group(0) == value