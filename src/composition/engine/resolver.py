"""Call resolution: external calls, delegated calls, and instantiation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..units import MemberDef
from .core import (
    CallFrame, Instance, NoMoreProviders, NotInstantiable, ProviderChain,
    UnresolvedAbstractMember,
)


@dataclass(frozen=True)
class ResolvedMember:
    unit: str
    position: int
    definition: MemberDef


class ResolverMixin:

    def instantiate(self, class_name: str, **state) -> Instance:
        unit = self.lookup_unit(class_name)
        if not unit.instantiable:
            kind = "mixin" if unit.is_mixin else "abstract class"
            raise NotInstantiable(class_name, kind)
        return Instance(composed=self.finalize_class(class_name),
                        state=dict(state))

    def resolve(self, class_name: str, member: str,
                after: Optional[str] = None) -> ResolvedMember:
        """The provider a call to `member` lands on, optionally after a unit."""
        composed = self.finalize_class(class_name)
        chain = composed.table.chain(member)
        if after is None:
            entry = chain.first()
        else:
            entry = chain.after(composed.order.position(after))
        if entry is None:
            self._raise_missing(chain, class_name, after)
        unit_name, position = entry
        return ResolvedMember(unit_name, position,
                              self._units[unit_name].members[member])

    def invoke(self, instance: Instance, member: str, *args, **kwargs):
        chain = instance.composed.table.chain(member)
        entry = chain.first()
        if entry is None:
            self._raise_missing(chain, instance.class_name, None)
        return self._run(instance, member, entry, args, kwargs)

    def invoke_next(self, frame: CallFrame, member: str, *args, **kwargs):
        chain = frame.instance.composed.table.chain(member)
        entry = chain.after(frame.position)
        if entry is None:
            self._raise_missing(chain, frame.instance.class_name, frame.unit)
        return self._run(frame.instance, member, entry, args, kwargs)

    def _run(self, instance: Instance, member: str, entry: tuple[str, int],
             args, kwargs):
        unit_name, position = entry
        definition = self._units[unit_name].members[member]
        if definition.is_abstract:
            raise UnresolvedAbstractMember(member, unit_name,
                                           instance.class_name)
        frame = CallFrame(resolver=self, instance=instance, member=member,
                          unit=unit_name, position=position)
        return definition.body(frame, *args, **kwargs)

    def _raise_missing(self, chain: ProviderChain, class_name: str,
                       after: Optional[str]):
        if not chain.providers and chain.declarers:
            raise UnresolvedAbstractMember(chain.member, chain.declarers[0],
                                           class_name)
        if after is None:
            raise UnresolvedAbstractMember(chain.member, class_name,
                                           class_name)
        raise NoMoreProviders(chain.member, after, class_name)
