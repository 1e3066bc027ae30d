"""Encode and decode multi-document YAML manifests of Kubernetes objects."""

from __future__ import annotations

import io
from collections.abc import Mapping
from typing import IO, Any

import yaml

_SEPARATOR = "---\n"


class DecodeError(Exception):
    """Raised when a manifest cannot be decoded into Kubernetes objects."""


def _check_object(obj: Any) -> Mapping:
    if not isinstance(obj, Mapping):
        raise ValueError(f"expected a Kubernetes object mapping, got {type(obj).__name__}")
    for key in ("apiVersion", "kind"):
        if not obj.get(key):
            raise ValueError(f"object is missing {key!r}")
    return obj


def encode_yaml_into(stream: IO, *args: Any) -> None:
    """Write each object to ``stream`` as its own YAML document."""
    text_stream = isinstance(stream, io.TextIOBase)
    for obj in args:
        document = _SEPARATOR + yaml.safe_dump(dict(_check_object(obj)), sort_keys=False)
        stream.write(document if text_stream else document.encode("utf-8"))


def encode_yaml(*args: Any) -> bytes:
    """Encode the objects as a multi-document YAML manifest."""
    buffer = io.BytesIO()
    encode_yaml_into(buffer, *args)
    return buffer.getvalue()


def decode_yaml_from(stream: IO) -> list[dict[str, Any]]:
    """Decode every object in a multi-document YAML stream.

    Documents that parse to nothing, such as the comment-only documents helm
    emits, are skipped.
    """
    content = stream.read()
    try:
        documents = list(yaml.safe_load_all(content))
    except yaml.YAMLError as exc:
        raise DecodeError(str(exc)) from exc

    objects: list[dict[str, Any]] = []
    for doc in documents:
        if doc is None:
            continue
        try:
            objects.append(dict(_check_object(doc)))
        except ValueError as exc:
            raise DecodeError(str(exc)) from exc
    return objects


def decode_yaml(manifest: bytes | str) -> list[dict[str, Any]]:
    """Decode every object in a multi-document YAML manifest."""
    if isinstance(manifest, str):
        return decode_yaml_from(io.StringIO(manifest))
    return decode_yaml_from(io.BytesIO(manifest))