"""Unit graph: register unit declarations and check their references."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional, Union

from ..units import MemberDef, Unit, UnitDef, UnitKind
from .core import (
    CyclicComposition, DuplicateMember, DuplicateUnit, KindMismatch,
    NotFound, UnknownReference,
)

logger = logging.getLogger(__name__)

MemberSpec = Union[Iterable[MemberDef], Mapping[str, Optional[Callable]]]


class GraphMixin:

    def define_unit(self, unit_def: UnitDef) -> str:
        return self.define_units([unit_def])[0]

    def define(self, name: str, members: MemberSpec = (), mixins=(),
               base: Optional[str] = None, kind: UnitKind = UnitKind.CLASS,
               abstract: bool = False) -> str:
        """Shorthand for define_unit; members may be a {name: body} mapping."""
        if isinstance(members, Mapping):
            members = [MemberDef(name=n, body=b) for n, b in members.items()]
        return self.define_unit(UnitDef(
            name=name, kind=kind, members=tuple(members),
            mixins=tuple(mixins), base=base, is_abstract=abstract))

    def define_units(self, unit_defs: Iterable[UnitDef]) -> list[str]:
        """Atomically add a batch of units.

        References between members of the batch may point forward. Nothing
        is added to the graph unless the whole batch is valid.
        """
        defs = list(unit_defs)
        batch: dict[str, UnitDef] = {}
        for d in defs:
            if d.name in self._units or d.name in batch:
                raise DuplicateUnit(d.name)
            seen: set[str] = set()
            for mixin in d.mixins:
                if mixin in seen:
                    raise DuplicateUnit(mixin, f"mixed in twice by '{d.name}'")
                seen.add(mixin)
            seen_members: set[str] = set()
            for m in d.members:
                if m.name in seen_members:
                    raise DuplicateMember(d.name, m.name)
                seen_members.add(m.name)
            batch[d.name] = d

        self._check_cycles(batch)

        for d in defs:
            for ref in d.references():
                if ref not in self._units and ref not in batch:
                    raise UnknownReference(d.name, ref)
            if d.base and self._kind_of(d.base, batch) is not UnitKind.CLASS:
                raise KindMismatch(d.name, d.base, "base class")
            for mixin in d.mixins:
                if self._kind_of(mixin, batch) is not UnitKind.MIXIN:
                    raise KindMismatch(d.name, mixin, "mixin")

        for d in defs:
            self._units[d.name] = Unit(
                name=d.name, kind=d.kind,
                members=MappingProxyType({m.name: m for m in d.members}),
                mixins=tuple(d.mixins), base=d.base,
                is_abstract=d.is_abstract)
            logger.debug("defined %s %s (base=%s, mixins=%s)",
                         d.kind.value, d.name, d.base, list(d.mixins))
        return [d.name for d in defs]

    def lookup_unit(self, name: str) -> Unit:
        unit = self._units.get(name)
        if unit is None:
            raise NotFound(name)
        return unit

    def has_unit(self, name: str) -> bool:
        return name in self._units

    def _kind_of(self, name: str, batch: dict[str, UnitDef]) -> UnitKind:
        if name in batch:
            return batch[name].kind
        return self._units[name].kind

    def _check_cycles(self, batch: dict[str, UnitDef]):
        """Depth-first search over the batch; existing units cannot point back
        into it, so only batch-internal edges can close a cycle."""
        done: set[str] = set()
        path: list[str] = []
        on_path: set[str] = set()

        def visit(name: str):
            path.append(name)
            on_path.add(name)
            for ref in batch[name].references():
                if ref in on_path:
                    raise CyclicComposition(path[path.index(ref):] + [ref])
                if ref in batch and ref not in done:
                    visit(ref)
            path.pop()
            on_path.discard(name)
            done.add(name)

        for name in batch:
            if name not in done:
                visit(name)
