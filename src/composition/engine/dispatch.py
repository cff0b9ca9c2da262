"""Dispatch table construction from a resolution order."""

from __future__ import annotations

from types import MappingProxyType

from .core import DispatchTable, ProviderChain, ResolutionOrder


class DispatchMixin:

    def _build_dispatch_table(self, order: ResolutionOrder) -> DispatchTable:
        providers: dict[str, list[tuple[str, int]]] = {}
        declarers: dict[str, list[str]] = {}
        for position, unit_name in enumerate(order):
            for m in self._units[unit_name].members.values():
                providers.setdefault(m.name, [])
                declarers.setdefault(m.name, [])
                if m.is_abstract:
                    declarers[m.name].append(unit_name)
                else:
                    providers[m.name].append((unit_name, position))
        chains = {}
        for member_name, entries in providers.items():
            chains[member_name] = ProviderChain(
                member=member_name,
                providers=tuple(u for u, _ in entries),
                positions=tuple(p for _, p in entries),
                declarers=tuple(declarers[member_name]),
            )
        return DispatchTable(class_name=order.class_name,
                             chains=MappingProxyType(chains))
