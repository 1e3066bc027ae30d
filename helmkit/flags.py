"""Turn option dataclasses into command line flags."""

from __future__ import annotations

import dataclasses
from typing import Any

_FLAG_KEY = "flag"


def flag(name: str, default: Any = dataclasses.MISSING, default_factory: Any = dataclasses.MISSING) -> Any:
    """Declare a dataclass field that maps onto the command line flag ``--name``.

    A name of ``"-"`` marks a field that is never rendered as a flag.
    """
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata={_FLAG_KEY: name},
    )


def _format(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_flags(options: Any) -> list[str]:
    """Render the flagged fields of a dataclass instance as ``--name=value`` arguments.

    Boolean fields whose name starts with ``no_`` are negated unless their flag
    itself starts with ``no-``. Empty strings are omitted and sequences produce
    one argument per element.
    """
    if not dataclasses.is_dataclass(options) or isinstance(options, type):
        raise TypeError(f"expected a dataclass instance, got {type(options).__name__}")

    flags: list[str] = []
    for field in dataclasses.fields(options):
        name = field.metadata.get(_FLAG_KEY, "")
        if name in ("", "-"):
            continue

        value = getattr(options, field.name)

        if isinstance(value, bool):
            if field.name.startswith("no_") and not name.startswith("no-"):
                value = not value
        elif isinstance(value, str):
            if value == "":
                continue
        elif isinstance(value, (list, tuple)):
            flags.extend(f"--{name}={_format(item)}" for item in value)
            continue
        elif value is None:
            continue

        flags.append(f"--{name}={_format(value)}")

    return flags