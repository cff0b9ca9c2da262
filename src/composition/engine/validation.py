"""Conflict validation for concrete classes."""

from __future__ import annotations

from .core import ResolutionOrder, UnresolvedAbstractMember


class ValidationMixin:

    def _validate(self, order: ResolutionOrder):
        self._validate_abstract_members(order)
        self._validate_delegation(order)

    def _validate_abstract_members(self, order: ResolutionOrder):
        """Every member declared abstract somewhere must be implemented somewhere.

        A closer unit may re-declare a concrete member abstract; dispatch then
        falls through to the concrete provider further back in the order, so
        only a member with no concrete provider at all is unresolved.
        """
        declarers: dict[str, str] = {}
        concrete: set[str] = set()
        for unit_name in order:
            for m in self._units[unit_name].members.values():
                if m.is_abstract:
                    declarers.setdefault(m.name, unit_name)
                else:
                    concrete.add(m.name)
        for member_name, demanding in declarers.items():
            if member_name not in concrete:
                raise UnresolvedAbstractMember(
                    member_name, demanding, order.class_name)

    def _validate_delegation(self, order: ResolutionOrder):
        """A delegating member needs a concrete provider behind it."""
        units = [self._units[u] for u in order]
        for i, unit in enumerate(units):
            for m in unit.members.values():
                if m.is_abstract or not m.delegates:
                    continue
                behind = any(
                    not later.members[m.name].is_abstract
                    for later in units[i + 1:] if m.name in later.members)
                if not behind:
                    raise UnresolvedAbstractMember(
                        m.name, unit.name, order.class_name)
