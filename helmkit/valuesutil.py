"""Helpers for validating and reshaping chart values."""

from __future__ import annotations

import dataclasses
import inspect
import json
import types
import typing
from typing import Any

import jsonschema


class ValidationFailed(Exception):
    """Raised when an instance does not satisfy a schema."""

    def __init__(self, errors: list[Any]) -> None:
        self.errors = errors
        super().__init__("; ".join(e.message for e in errors))


def validate(schema: Any, instance: Any) -> None:
    """Raise ValidationFailed if ``instance`` is not valid under ``schema``."""
    cls = jsonschema.validators.validator_for(schema, default=jsonschema.Draft202012Validator)
    cls.check_schema(schema)
    errors = list(cls(schema).iter_errors(instance))
    if errors:
        raise ValidationFailed(errors)


_NAMES: dict[str, Any] = {
    "int": int,
    "str": str,
    "bool": bool,
    "float": float,
    "Any": Any,
    "object": object,
    "None": type(None),
    "NoneType": type(None),
    "list": list,
    "List": list,
    "dict": dict,
    "Dict": dict,
    "tuple": tuple,
    "Tuple": tuple,
}


def _split_top_level(text: str, sep: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        if char == sep and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    parts.append("".join(current).strip())
    return parts


def _lookup_name(name: str, owner: type) -> Any:
    for prefix in ("typing.", "t."):
        if name.startswith(prefix):
            name = name[len(prefix):]
    if name in _NAMES:
        return _NAMES[name]
    if name == owner.__name__:
        return owner
    module = inspect.getmodule(owner)
    if module is not None and hasattr(module, name):
        return getattr(module, name)
    raise TypeError(f"cannot resolve type annotation {name!r}")


def _parse_annotation(text: str, owner: type) -> Any:
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        text = text[1:-1].strip()
    alternatives = _split_top_level(text, "|")
    if len(alternatives) > 1:
        resolved = tuple(_parse_annotation(a, owner) for a in alternatives)
        return typing.Union[resolved]
    if text.endswith("]") and "[" in text:
        head, _, rest = text.partition("[")
        args = [_parse_annotation(a, owner) for a in _split_top_level(rest[:-1], ",") if a]
        base = head.strip()
        for prefix in ("typing.", "t."):
            if base.startswith(prefix):
                base = base[len(prefix):]
        if base == "Optional":
            return typing.Optional[args[0]]
        if base == "Union":
            return typing.Union[tuple(args)]
        origin = _lookup_name(base, owner)
        if origin is list:
            return list[args[0]] if args else list
        if origin is dict:
            return dict[args[0], args[1]] if len(args) == 2 else dict
        if origin is tuple:
            return tuple[tuple(args)] if args else tuple
        raise TypeError(f"unsupported generic annotation {text!r}")
    return _lookup_name(text, owner)


def _field_types(cls: type) -> dict[str, Any]:
    return {
        field.name: _parse_annotation(field.type, cls) if isinstance(field.type, str) else field.type
        for field in dataclasses.fields(cls)
    }


def _json_name(field: dataclasses.Field) -> str:
    return field.metadata.get("json", field.name)


def _unwrap_optional(tp: Any) -> Any:
    origin = typing.get_origin(tp)
    if origin is typing.Union or (hasattr(types, "UnionType") and origin is types.UnionType):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _schema_for(tp: Any) -> Any:
    tp = _unwrap_optional(tp)
    if tp is Any or tp is object:
        return True
    if tp is bool:
        return {"type": "boolean"}
    if tp is int:
        return {"type": "integer"}
    if tp is float:
        return {"type": "number"}
    if tp is str:
        return {"type": "string"}
    if dataclasses.is_dataclass(tp):
        return _struct_schema(tp)
    origin = typing.get_origin(tp) or tp
    args = typing.get_args(tp)
    if origin in (list, tuple):
        return {"type": "array", "items": _schema_for(args[0]) if args else True}
    if origin is dict:
        return {"type": "object", "additionalProperties": _schema_for(args[1]) if len(args) == 2 else True}
    raise TypeError(f"unsupported type for schema generation: {tp!r}")


def _struct_schema(cls: type) -> dict:
    hints = _field_types(cls)
    properties: dict[str, Any] = {}
    required: list[str] = []
    for field in dataclasses.fields(cls):
        name = _json_name(field)
        if name == "-":
            continue
        properties[name] = _schema_for(hints[field.name])
        if field.metadata.get("required"):
            required.append(name)
    schema: dict[str, Any] = {"type": "object", "properties": properties, "additionalProperties": False}
    if required:
        schema["required"] = required
    return schema


def generate_schema(cls: type) -> dict:
    """Build an inline JSON schema for a dataclass type.

    Fields are required only when their metadata says ``required=True``.
    """
    if not dataclasses.is_dataclass(cls):
        raise TypeError(f"expected a dataclass type, got {cls!r}")
    return {"$schema": "https://json-schema.org/draft/2020-12/schema", **_struct_schema(cls)}


def _to_jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out = {}
        for field in dataclasses.fields(value):
            name = _json_name(field)
            if name == "-":
                continue
            item = getattr(value, field.name)
            if field.metadata.get("omitempty") and item in (None, "", 0, False, [], {}):
                continue
            out[name] = _to_jsonable(item)
        return out
    if isinstance(value, dict):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def _zero(tp: Any) -> Any:
    if tp is bool:
        return False
    if tp is int:
        return 0
    if tp is float:
        return 0.0
    if tp is str:
        return ""
    if dataclasses.is_dataclass(tp):
        return _convert({}, tp)
    return None


def _field_default(field: dataclasses.Field, tp: Any) -> Any:
    if field.default is not dataclasses.MISSING:
        return field.default
    if field.default_factory is not dataclasses.MISSING:
        return field.default_factory()
    return _zero(tp)


def _convert(data: Any, target: Any) -> Any:
    if target is Any or target is object:
        return data
    if data is None:
        return _zero(target)
    inner = _unwrap_optional(target)
    if inner is not target:
        return _convert(data, inner)
    if target is bool:
        if not isinstance(data, bool):
            raise TypeError(f"cannot unmarshal {data!r} into bool")
        return data
    if target is int:
        if isinstance(data, bool) or not isinstance(data, (int, float)) or data != int(data):
            raise TypeError(f"cannot unmarshal {data!r} into int")
        return int(data)
    if target is float:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise TypeError(f"cannot unmarshal {data!r} into float")
        return float(data)
    if target is str:
        if not isinstance(data, str):
            raise TypeError(f"cannot unmarshal {data!r} into str")
        return data
    if dataclasses.is_dataclass(target):
        if not isinstance(data, dict):
            raise TypeError(f"cannot unmarshal {data!r} into {target.__name__}")
        hints = _field_types(target)
        kwargs = {}
        for field in dataclasses.fields(target):
            if not field.init:
                continue
            name = _json_name(field)
            tp = hints[field.name]
            if name != "-" and name in data:
                kwargs[field.name] = _convert(data[name], tp)
            else:
                kwargs[field.name] = _field_default(field, tp)
        return target(**kwargs)
    origin = typing.get_origin(target) or target
    args = typing.get_args(target)
    if origin in (list, tuple):
        if not isinstance(data, list):
            raise TypeError(f"cannot unmarshal {data!r} into list")
        item = args[0] if args else Any
        return origin(_convert(v, item) for v in data)
    if origin is dict:
        if not isinstance(data, dict):
            raise TypeError(f"cannot unmarshal {data!r} into dict")
        item = args[1] if len(args) == 2 else Any
        return {k: _convert(v, item) for k, v in data.items()}
    raise TypeError(f"unsupported target type: {target!r}")


def unmarshal_into(value: Any, target: Any) -> Any:
    """Convert ``value`` to ``target`` by way of its JSON representation."""
    data = json.loads(json.dumps(_to_jsonable(value)))
    return _convert(data, target)


def round_trip_through(value: Any, through: Any) -> Any:
    """Pass ``value`` through ``through`` and back to the type it started as."""
    intermediate = unmarshal_into(value, through)
    return unmarshal_into(intermediate, type(value))