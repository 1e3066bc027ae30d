"""Generate random values that satisfy a JSON schema."""

from __future__ import annotations

import random
import re
import string
from typing import Any

try:
    import re._parser as _sre
except ImportError:  # Python 3.10
    import sre_parse as _sre  # type: ignore[no-redef]

MAX_DEPTH = 15
_STRING_ALPHABET = "1234567890abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ!@#$%^&*()-_=+"
_PRINTABLE = string.ascii_letters + string.digits + string.punctuation + " "
_WORD = string.ascii_letters + string.digits + "_"
_CATEGORIES = {
    _sre.CATEGORY_DIGIT: string.digits,
    _sre.CATEGORY_NOT_DIGIT: "".join(c for c in _PRINTABLE if c not in string.digits),
    _sre.CATEGORY_WORD: _WORD,
    _sre.CATEGORY_NOT_WORD: "".join(c for c in _PRINTABLE if c not in _WORD),
    _sre.CATEGORY_SPACE: " \t\n",
    _sre.CATEGORY_NOT_SPACE: _PRINTABLE.replace(" ", ""),
}


class SchemaGenerationError(Exception):
    """Raised when a schema uses something the generator cannot satisfy."""


class RegexGenerator:
    """Produces random strings matching a regular expression."""

    def __init__(self, pattern: str, rng: random.Random) -> None:
        try:
            self._parsed = _sre.parse(pattern)
        except re.error as exc:
            raise SchemaGenerationError(f"invalid pattern {pattern!r}: {exc}") from exc
        self._rng = rng

    def generate(self, limit: int) -> str:
        """Return a match; unbounded repetitions repeat at most ``limit`` extra times."""
        return "".join(self._emit(self._parsed, limit))

    def _emit(self, items: Any, limit: int):
        for op, av in items:
            yield from self._emit_one(op, av, limit)

    def _emit_one(self, op: Any, av: Any, limit: int):
        rng = self._rng
        if op == _sre.LITERAL:
            yield chr(av)
        elif op == _sre.NOT_LITERAL:
            yield rng.choice([c for c in _PRINTABLE if ord(c) != av])
        elif op == _sre.ANY:
            yield rng.choice(_PRINTABLE)
        elif op == _sre.IN:
            yield self._pick_in(av)
        elif op == _sre.CATEGORY:
            yield rng.choice(_CATEGORIES[av])
        elif op == _sre.BRANCH:
            yield from self._emit(rng.choice(av[1]), limit)
        elif op == _sre.SUBPATTERN:
            yield from self._emit(av[-1], limit)
        elif op in (_sre.MAX_REPEAT, _sre.MIN_REPEAT):
            lo, hi, sub = av
            if hi == _sre.MAXREPEAT:
                hi = lo + limit
            for _ in range(rng.randint(lo, hi)):
                yield from self._emit(sub, limit)
        # Anchors and unsupported zero-width items produce nothing.

    def _pick_in(self, items: list) -> str:
        negate = any(op == _sre.NEGATE for op, _ in items)
        if negate:
            candidates = [c for c in _PRINTABLE if not _in_set(items, c)]
        else:
            candidates = []
            for op, av in items:
                if op == _sre.LITERAL:
                    candidates.append(chr(av))
                elif op == _sre.RANGE:
                    candidates.extend(chr(c) for c in range(av[0], av[1] + 1))
                elif op == _sre.CATEGORY:
                    candidates.extend(_CATEGORIES[av])
        if not candidates:
            raise SchemaGenerationError("character class matches nothing")
        return self._rng.choice(candidates)


def _in_set(items: list, ch: str) -> bool:
    for op, av in items:
        if op == _sre.LITERAL and chr(av) == ch:
            return True
        if op == _sre.RANGE and av[0] <= ord(ch) <= av[1]:
            return True
        if op == _sre.CATEGORY and ch in _CATEGORIES[av]:
            return True
    return False


def _deprecated(schema: Any) -> bool:
    return isinstance(schema, dict) and bool(schema.get("deprecated"))


class _Generator:
    def __init__(self, rng: random.Random, root: Any) -> None:
        self.rng = rng
        self.max_depth = MAX_DEPTH
        self.skip_deprecated = True
        self.defs: dict[str, Any] = {}
        if isinstance(root, dict):
            self.defs["#" + root.get("$anchor", "")] = root
            for name, sub in root.get("$defs", {}).items():
                self.defs["#/$defs/" + name] = sub
        self._regex: dict[str, RegexGenerator] = {}

    def intn(self, n: int) -> int:
        if n <= 0:
            raise SchemaGenerationError(f"invalid range size {n}")
        return self.rng.randrange(n)

    def regex(self, pattern: str) -> str:
        if pattern not in self._regex:
            self._regex[pattern] = RegexGenerator(pattern, random.Random(self.rng.getrandbits(63)))
        return self._regex[pattern].generate(5)

    def generate(self, depth: int, s: Any) -> Any:
        if depth > self.max_depth:
            raise SchemaGenerationError("exceeded max depth")
        if s is None:
            raise SchemaGenerationError("schema is missing")
        if s is True or s == {}:
            return None
        if not isinstance(s, dict):
            raise SchemaGenerationError(f"unhandled schema: {s!r}")

        for key, label in (("$ref", "ref"), ("$dynamicRef", "dynamic ref")):
            if s.get(key):
                if s[key] in self.defs:
                    return self.generate(depth, self.defs[s[key]])
                raise SchemaGenerationError(f"unknown {label}: {s[key]!r}")
        if s.get("const") is not None:
            return s["const"]
        if s.get("enum"):
            return s["enum"][self.intn(len(s["enum"]))]
        for key in ("oneOf", "anyOf"):
            if s.get(key):
                return self.generate(depth, s[key][self.intn(len(s[key]))])

        kind = s.get("type")
        if kind == "null":
            return None
        if kind == "boolean":
            return self.intn(2) == 0
        if kind in ("number", "integer"):
            hi = int(s.get("maximum", 0))
            lo = int(s.get("minimum", 0))
            if hi == 0:
                hi = 32767
            return lo + self.intn(hi - lo)
        if kind == "string":
            return self._string(s)
        if kind == "array":
            lo = s.get("minItems", 0)
            hi = s.get("maxItems", 5)
            items = s.get("items", True)
            return [self.generate(depth, items) for _ in range(lo + self.intn(hi - lo))]
        if kind == "object":
            return self._object(depth, s)
        raise SchemaGenerationError(f"unhandled schema: {s!r}")

    def _string(self, s: dict) -> str:
        if s.get("pattern"):
            if "minLength" in s or "maxLength" in s:
                raise SchemaGenerationError("unsupported pattern + min/maxlength")
            return self.regex(s["pattern"])
        lo = s.get("minLength", 0)
        hi = s.get("maxLength", 10)
        length = lo + self.intn(hi - lo)
        return "".join(_STRING_ALPHABET[self.intn(len(_STRING_ALPHABET))] for _ in range(length))

    def _object(self, depth: int, s: dict) -> dict:
        props = s.get("properties", {})
        required = s.get("required", [])
        val: dict[str, Any] = {}
        lo = s.get("minProperties", len(props))
        hi = s.get("maxProperties", len(props) + 5)

        for key in required:
            if key not in props:
                raise SchemaGenerationError(f"missing required property {key!r}")
            schema = props[key]
            if self.skip_deprecated and _deprecated(schema):
                continue
            val[key] = self.generate(depth, schema)

        options: list[tuple[str, Any]] = [
            (re.escape(key), schema)
            for key, schema in props.items()
            if key not in required and not (self.skip_deprecated and _deprecated(schema))
        ]
        options.extend(
            (pattern, schema)
            for pattern, schema in s.get("patternProperties", {}).items()
            if not (self.skip_deprecated and _deprecated(schema))
        )
        extra = s.get("additionalProperties")
        if extra is not None and extra is not False:
            if not (self.skip_deprecated and _deprecated(extra)):
                options.append((r"\w+", extra))

        if not options or depth + self.intn(self.max_depth) >= self.max_depth:
            return val

        i = len(val)
        while i < lo + self.intn(hi - lo):
            pattern, schema = options[self.intn(len(options))]
            val[self.regex(pattern)] = self.generate(depth + 1, schema)
            i += 1
        return val


def generate(rng: random.Random, schema: Any) -> Any:
    """Generate a random value that is valid under ``schema``.

    The same seed always yields the same value.
    """
    return _Generator(rng, schema).generate(0, schema)