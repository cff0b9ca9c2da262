"""Linearization: compute the resolution order of a unit."""

from __future__ import annotations

import logging

from .core import InconsistentComposition, ResolutionOrder

logger = logging.getLogger(__name__)


def merge(*sequences) -> list[str]:
    """Concatenate left to right, keeping each name at its first occurrence."""
    seen: set[str] = set()
    merged: list[str] = []
    for seq in sequences:
        for name in seq:
            if name not in seen:
                seen.add(name)
                merged.append(name)
    return merged


class LinearizerMixin:

    def linearize(self, name: str) -> ResolutionOrder:
        """Resolution order of a unit, most specific first.

        order(U) = [U] ++ merge(order(Tn), ..., order(T1), order(S)) where
        T1..Tn are U's mixins in declared order and S is its base. The result
        is cached for the lifetime of the graph.
        """
        cached = self._orders.get(name)
        if cached is not None:
            return cached
        unit = self.lookup_unit(name)
        parent_orders = [self.linearize(p).units for p in unit.parents()]
        units = tuple([name] + merge(*parent_orders))
        self._check_consistency(name, units)
        order = ResolutionOrder(class_name=name, units=units)
        # Another thread may have linearized a shared ancestor meanwhile;
        # both results are identical, keep whichever was published first.
        order = self._orders.setdefault(name, order)
        logger.debug("linearized %s: %s", name, " -> ".join(units))
        return order

    def _check_consistency(self, name: str, units: tuple[str, ...]):
        """Every unit's declared parent order must survive the merge."""
        index = {u: i for i, u in enumerate(units)}
        for u in units:
            parents = self._units[u].parents()
            for first, second in zip(parents, parents[1:]):
                if index[first] > index[second]:
                    raise InconsistentComposition(name, first, second)
