"""Unit declarations consumed by the composition engine.

These are the fully-resolved definitions handed over by whatever front end
produced them (a manifest, a compiler, hand-written test fixtures).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional


class UnitKind(str, Enum):
    CLASS = "class"
    MIXIN = "mixin"


@dataclass(frozen=True)
class MemberDef:
    name: str = ""
    # None means the member is abstract
    body: Optional[Callable] = None
    delegates: bool = False

    @property
    def is_abstract(self) -> bool:
        return self.body is None


@dataclass(frozen=True)
class UnitDef:
    name: str = ""
    kind: UnitKind = UnitKind.CLASS
    members: tuple[MemberDef, ...] = ()
    mixins: tuple[str, ...] = ()
    base: Optional[str] = None
    is_abstract: bool = False

    def references(self) -> list[str]:
        """Every unit name this declaration depends on, base first."""
        refs = [self.base] if self.base else []
        return refs + list(self.mixins)


@dataclass(frozen=True)
class Unit:
    """A unit as stored in the graph, members indexed by name."""

    name: str
    kind: UnitKind
    members: Mapping[str, MemberDef] = field(
        default_factory=lambda: MappingProxyType({}))
    mixins: tuple[str, ...] = ()
    base: Optional[str] = None
    is_abstract: bool = False

    @property
    def is_mixin(self) -> bool:
        return self.kind is UnitKind.MIXIN

    @property
    def instantiable(self) -> bool:
        return self.kind is UnitKind.CLASS and not self.is_abstract

    def parents(self) -> list[str]:
        """Direct parents, closest first: Tn, ..., T1, then the base."""
        parents = list(reversed(self.mixins))
        if self.base:
            parents.append(self.base)
        return parents


def member(name: str, body: Optional[Callable] = None,
           delegates: bool = False) -> MemberDef:
    return MemberDef(name=name, body=body, delegates=delegates)


def abstract(name: str) -> MemberDef:
    return MemberDef(name=name)
