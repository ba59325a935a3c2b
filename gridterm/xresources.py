"""X resource database lookups for terminal preferences."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Mapping, Union

DEFAULT_NAME = "st"
DEFAULT_CLASS = "St"
_NAME_LIMIT = 255

_COMPONENT = re.compile(r"([.*]*)([^.*]+)")
_ESCAPE = re.compile(r"\\(n|\\)")
_INTEGER = re.compile(r"\s*([+-]?\d+)")
_FLOAT = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)

Value = Union[str, int, float]


class ResourceType(IntEnum):
    """How a resource's string value is converted."""

    STRING = 0
    INTEGER = 1
    FLOAT = 2


@dataclass(frozen=True)
class ResourcePref:
    """A preference looked up by name and converted to a type."""

    name: str
    type: ResourceType


def _logical_lines(text: str) -> Iterable[str]:
    pending = ""
    for line in text.split("\n"):
        if line.endswith("\\"):
            pending += line[:-1]
            continue
        yield pending + line
        pending = ""
    if pending:
        yield pending


def parse_resources(text: str) -> dict[str, str]:
    """Parse resource-manager text ("spec: value" lines) into a spec-to-value mapping."""
    db: dict[str, str] = {}
    for line in _logical_lines(text):
        stripped = line.lstrip(" \t")
        if not stripped or stripped[0] in "!#":
            continue
        spec, sep, value = stripped.partition(":")
        if not sep:
            continue
        spec = spec.strip(" \t")
        if not spec:
            continue
        value = _ESCAPE.sub(lambda m: "\n" if m.group(1) == "n" else "\\", value.lstrip(" \t"))
        db[spec] = value
    return db


def _parse_spec(spec: str) -> list[tuple[str, str]]:
    return [
        ("*" if "*" in binding else ".", component)
        for binding, component in _COMPONENT.findall(spec)
    ]


def _match(pattern: list[tuple[str, str]], levels: list[tuple[str, str]]):
    """Return a precedence key for the best way pattern matches levels, or None."""
    if not pattern:
        return () if not levels else None
    if not levels:
        return None
    binding, component = pattern[0]
    name, cls = levels[0]
    best = None
    if component == name:
        kind = 3
    elif component == cls:
        kind = 2
    elif component == "?":
        kind = 1
    else:
        kind = 0
    if kind:
        rest = _match(pattern[1:], levels[1:])
        if rest is not None:
            best = ((1, kind, int(binding == ".")),) + rest
    if binding == "*":
        rest = _match(pattern, levels[1:])
        if rest is not None:
            candidate = ((0, 0, 0),) + rest
            if best is None or candidate > best:
                best = candidate
    return best


def _lookup(db: Mapping[str, str], full_name: str, full_class: str) -> str | None:
    levels = list(zip(full_name.split("."), full_class.split(".")))
    best_key = None
    best_value = None
    for spec, value in db.items():
        key = _match(_parse_spec(spec), levels)
        if key is not None and (best_key is None or key >= best_key):
            best_key, best_value = key, value
    return best_value


def _to_int(text: str) -> int:
    match = _INTEGER.match(text)
    return int(match.group(1)) if match else 0


def _to_float(text: str) -> float:
    match = _FLOAT.match(text)
    return float(match.group(1)) if match else 0.0


def resource_load(db: Mapping[str, str], name: str, rtype: ResourceType,
                  name_prefix: str | None = None,
                  class_prefix: str | None = None) -> Value | None:
    """Look up "<name_prefix>.<name>" and convert it; None when it is not set."""
    full_name = f"{name_prefix or DEFAULT_NAME}.{name}"[:_NAME_LIMIT]
    full_class = f"{class_prefix or DEFAULT_CLASS}.{name}"[:_NAME_LIMIT]
    raw = _lookup(db, full_name, full_class)
    if raw is None:
        return None
    if rtype == ResourceType.INTEGER:
        return _to_int(raw)
    if rtype == ResourceType.FLOAT:
        return _to_float(raw)
    return raw


def config_init(db: Mapping[str, str] | str | None, prefs: Iterable[ResourcePref],
                name_prefix: str | None = None,
                class_prefix: str | None = None) -> dict[str, Value]:
    """Return the values of all preferences that the database sets.

    ``db`` may be a parsed mapping, raw resource-manager text, or None when
    the display has no resources.
    """
    if db is None:
        return {}
    if isinstance(db, str):
        db = parse_resources(db)
    found: dict[str, Value] = {}
    for pref in prefs:
        value = resource_load(db, pref.name, pref.type, name_prefix, class_prefix)
        if value is not None:
            found[pref.name] = value
    return found