"""JSON hierarchy manifests.

A manifest lists fully-resolved unit declarations:

    {"units": [
        {"name": "Base", "members": {"log": {}}},
        {"name": "Loud", "kind": "mixin",
         "members": {"log": {"delegates": true}}},
        {"name": "App", "base": "Base", "mixins": ["Loud"]}
    ]}

Member entries accept "abstract", "delegates" and "call" ("pkg.mod:func").
A concrete member without "call" gets a tracing body that returns the list
of units the call visited.
"""

from __future__ import annotations

import importlib
import json
import re

from .engine import Composer, CompositionError
from .units import MemberDef, UnitDef, UnitKind

_UNIT_KEYS = {"name", "kind", "abstract", "base", "mixins", "members"}
_MEMBER_KEYS = {"abstract", "delegates", "call"}


class ManifestError(CompositionError):
    def __init__(self, message: str, line: int = 0, col: int = 0,
                 unit: str | None = None):
        self.line = line
        self.col = col
        super().__init__(message, unit=unit)


def unit_offset(source: str, name: str) -> int | None:
    """Offset of the "name" key declaring a unit."""
    pattern = re.compile(r'"name"\s*:\s*"' + re.escape(name) + r'"')
    m = pattern.search(source)
    return m.start() if m else None


def offset_to_position(source: str, offset: int) -> tuple[int, int]:
    line = source.count("\n", 0, offset) + 1
    col = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, col


def locate_unit(source: str, name: str) -> tuple[int, int]:
    """1-based line/col of the "name" key declaring a unit, or (0, 0)."""
    offset = unit_offset(source, name)
    if offset is None:
        return 0, 0
    return offset_to_position(source, offset)


def _tracing_body(delegates: bool):
    def body(frame, *args, **kwargs):
        visited = [frame.unit]
        if delegates:
            visited += frame.next(*args, **kwargs)
        return visited
    return body


def _import_callable(spec: str, unit: str, line: int, col: int):
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ManifestError(f"Invalid call target '{spec}' in unit '{unit}' "
                            f"(expected 'module:function')", line, col, unit)
    try:
        target = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise ManifestError(f"Cannot load call target '{spec}' in unit "
                            f"'{unit}': {e}", line, col, unit) from e
    if not callable(target):
        raise ManifestError(f"Call target '{spec}' in unit '{unit}' is not "
                            f"callable", line, col, unit)
    return target


def _load_member(name: str, entry, unit: str, source: str) -> MemberDef:
    line, col = locate_unit(source, unit)
    if not isinstance(entry, dict):
        raise ManifestError(f"Member '{name}' of unit '{unit}' must be an "
                            f"object", line, col, unit)
    unknown = set(entry) - _MEMBER_KEYS
    if unknown:
        raise ManifestError(f"Unknown key(s) {sorted(unknown)} in member "
                            f"'{name}' of unit '{unit}'", line, col, unit)
    delegates = bool(entry.get("delegates", False))
    if entry.get("abstract", False):
        if "call" in entry:
            raise ManifestError(f"Abstract member '{name}' of unit '{unit}' "
                                f"cannot have a call target", line, col, unit)
        return MemberDef(name=name, delegates=delegates)
    if "call" in entry:
        body = _import_callable(entry["call"], unit, line, col)
    else:
        body = _tracing_body(delegates)
    return MemberDef(name=name, body=body, delegates=delegates)


def _load_unit(entry, index: int, source: str) -> UnitDef:
    if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
        raise ManifestError(f"Unit #{index} must be an object with a string "
                            f"'name'")
    name = entry["name"]
    line, col = locate_unit(source, name)
    unknown = set(entry) - _UNIT_KEYS
    if unknown:
        raise ManifestError(f"Unknown key(s) {sorted(unknown)} in unit "
                            f"'{name}'", line, col, name)
    try:
        kind = UnitKind(entry.get("kind", "class"))
    except ValueError:
        raise ManifestError(f"Unit '{name}' has invalid kind "
                            f"'{entry.get('kind')}'", line, col, name) from None
    mixins = entry.get("mixins", [])
    if (not isinstance(mixins, list)
            or not all(isinstance(m, str) for m in mixins)):
        raise ManifestError(f"'mixins' of unit '{name}' must be a list of "
                            f"names", line, col, name)
    base = entry.get("base")
    if base is not None and not isinstance(base, str):
        raise ManifestError(f"'base' of unit '{name}' must be a name",
                            line, col, name)
    members = entry.get("members", {})
    if not isinstance(members, dict):
        raise ManifestError(f"'members' of unit '{name}' must be an object",
                            line, col, name)
    return UnitDef(
        name=name, kind=kind,
        members=tuple(_load_member(mname, m, name, source)
                      for mname, m in members.items()),
        mixins=tuple(mixins), base=base,
        is_abstract=bool(entry.get("abstract", False)),
    )


def load_manifest(source: str) -> list[UnitDef]:
    try:
        data = json.loads(source)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON: {e.msg}", e.lineno, e.colno) from e
    if not isinstance(data, dict) or not isinstance(data.get("units"), list):
        raise ManifestError("Manifest must be an object with a 'units' list",
                            1, 1)
    return [_load_unit(entry, i, source)
            for i, entry in enumerate(data["units"])]


def build_composer(source: str) -> Composer:
    """Load a manifest into a fresh Composer."""
    composer = Composer()
    composer.define_units(load_manifest(source))
    return composer

