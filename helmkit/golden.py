"""Golden (snapshot) assertions for YAML, JSON, text and bytes."""

from __future__ import annotations

import enum
import json
import os
from pathlib import Path
from typing import Any

import yaml


class GoldenAssertion(enum.Enum):
    """How a golden file is compared with the computed output."""

    YAML = "yaml"
    JSON = "json"
    TEXT = "text"
    BYTES = "bytes"


class GoldenMismatch(AssertionError):
    """Raised when computed output diverges from its golden file."""


def _as_bytes(data: bytes | str) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else data


def _differs(a: Any, b: Any) -> bool:
    return a != b or isinstance(a, bool) != isinstance(b, bool)


def _diff(path: str, a: Any, b: Any, out: list[str]) -> None:
    if isinstance(a, dict) and isinstance(b, dict):
        for key in a:
            if key not in b:
                out.append(f"{path}/{key}: removed {a[key]!r}")
        for key, value in b.items():
            if key not in a:
                out.append(f"{path}/{key}: added {value!r}")
            else:
                _diff(f"{path}/{key}", a[key], value, out)
    elif isinstance(a, list) and isinstance(b, list):
        for index, (x, y) in enumerate(zip(a, b)):
            _diff(f"{path}/{index}", x, y, out)
        for index in range(len(b), len(a)):
            out.append(f"{path}/{index}: removed {a[index]!r}")
        for index in range(len(a), len(b)):
            out.append(f"{path}/{index}: added {b[index]!r}")
    elif _differs(a, b):
        out.append(f"{path or '/'}: {a!r} -> {b!r}")


def yaml_diff(expected: bytes | str, actual: bytes | str) -> list[str]:
    """Return human readable differences between two multi-document YAML texts."""
    expected_docs = list(yaml.safe_load_all(_as_bytes(expected)))
    actual_docs = list(yaml.safe_load_all(_as_bytes(actual)))
    out: list[str] = []
    for index, (a, b) in enumerate(zip(expected_docs, actual_docs)):
        _diff(f"document {index} ", a, b, out)
    for index in range(len(actual_docs), len(expected_docs)):
        out.append(f"document {index}: removed")
    for index in range(len(expected_docs), len(actual_docs)):
        out.append(f"document {index}: added")
    return out


def assert_golden(
    kind: GoldenAssertion,
    path: str | os.PathLike[str],
    actual: bytes | str,
    update: bool = False,
) -> None:
    """Assert that ``actual`` matches the golden file at ``path``.

    With ``update`` the golden file is overwritten instead. A missing golden
    file compares as empty.
    """
    target = Path(path)
    actual_bytes = _as_bytes(actual)

    if update:
        target.write_bytes(actual_bytes)
        return

    try:
        expected = target.read_bytes()
    except FileNotFoundError:
        expected = b""

    msg = f"Divergence from snapshot at {os.fspath(path)!r}. If this change is expected re-run with update enabled."

    if kind is GoldenAssertion.TEXT:
        if expected.decode("utf-8") != actual_bytes.decode("utf-8"):
            raise GoldenMismatch(msg)
    elif kind is GoldenAssertion.BYTES:
        if expected != actual_bytes:
            raise GoldenMismatch(msg)
    elif kind is GoldenAssertion.JSON:
        try:
            same = json.loads(expected) == json.loads(actual_bytes)
        except ValueError as exc:
            raise GoldenMismatch(f"{msg}\n{exc}") from exc
        if not same:
            raise GoldenMismatch(msg)
    elif kind is GoldenAssertion.YAML:
        diffs = yaml_diff(expected, actual_bytes)
        if diffs:
            raise GoldenMismatch(msg + "\n" + "\n".join(diffs))
    else:
        raise ValueError(f"unknown assertion type: {kind!r}")