"""Engine core: errors, derived artifacts, and finalization orchestration."""

from __future__ import annotations

import bisect
import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional

from ..units import Unit

logger = logging.getLogger(__name__)


# ---- Errors ----

class CompositionError(Exception):
    def __init__(self, message: str, unit: Optional[str] = None):
        self.unit = unit
        self.message = message
        super().__init__(message)


class DuplicateUnit(CompositionError):
    def __init__(self, name: str, detail: str = ""):
        self.name = name
        msg = f"Duplicate unit name '{name}'"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg, unit=name)


class DuplicateMember(CompositionError):
    def __init__(self, unit: str, member: str):
        self.member = member
        super().__init__(
            f"Duplicate member '{member}' in unit '{unit}'", unit=unit)


class UnknownReference(CompositionError):
    def __init__(self, unit: str, reference: str):
        self.reference = reference
        super().__init__(
            f"Unit '{unit}' references '{reference}' which is not defined",
            unit=unit)


class CyclicComposition(CompositionError):
    def __init__(self, path: list[str]):
        self.path = list(path)
        super().__init__(
            "Cyclic composition detected: " + " -> ".join(self.path),
            unit=self.path[0] if self.path else None)


class KindMismatch(CompositionError):
    def __init__(self, unit: str, reference: str, expected: str):
        self.reference = reference
        self.expected = expected
        super().__init__(
            f"Unit '{unit}' uses '{reference}' as a {expected}, "
            f"but it is not one", unit=unit)


class NotFound(CompositionError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unit '{name}' not found", unit=name)


class NotInOrder(CompositionError):
    def __init__(self, name: str, class_name: str):
        self.name = name
        self.class_name = class_name
        super().__init__(
            f"Unit '{name}' is not in the resolution order of '{class_name}'",
            unit=class_name)


class InconsistentComposition(CompositionError):
    def __init__(self, unit: str, first: str, second: str):
        self.first = first
        self.second = second
        super().__init__(
            f"Inconsistent composition of '{unit}': '{first}' must precede "
            f"'{second}' but the linearization places it after", unit=unit)


class UnresolvedAbstractMember(CompositionError):
    def __init__(self, member: str, demanding_unit: str,
                 class_name: Optional[str] = None):
        self.member = member
        self.demanding_unit = demanding_unit
        self.class_name = class_name
        where = f" in class '{class_name}'" if class_name else ""
        super().__init__(
            f"Member '{member}' required by '{demanding_unit}' has no "
            f"concrete implementation{where}",
            unit=class_name or demanding_unit)


class NoMoreProviders(CompositionError):
    def __init__(self, member: str, after_unit: str, class_name: str):
        self.member = member
        self.after_unit = after_unit
        self.class_name = class_name
        super().__init__(
            f"No provider of '{member}' after '{after_unit}' in the resolution "
            f"order of '{class_name}'", unit=class_name)


class NotInstantiable(CompositionError):
    def __init__(self, name: str, kind: str):
        self.name = name
        super().__init__(f"Cannot instantiate {kind} '{name}'", unit=name)


# ---- Derived artifacts ----

@dataclass(frozen=True)
class ResolutionOrder:
    class_name: str
    units: tuple[str, ...]

    def __iter__(self) -> Iterator[str]:
        return iter(self.units)

    def __len__(self) -> int:
        return len(self.units)

    def __getitem__(self, i: int) -> str:
        return self.units[i]

    def position(self, unit: str) -> int:
        try:
            return self.units.index(unit)
        except ValueError:
            raise NotInOrder(unit, self.class_name) from None


@dataclass(frozen=True)
class ProviderChain:
    member: str
    providers: tuple[str, ...] = ()
    # Resolution-order position of each provider, parallel to providers
    positions: tuple[int, ...] = ()
    # Units declaring the member abstract, closest first
    declarers: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.providers)

    def first(self) -> Optional[tuple[str, int]]:
        if not self.providers:
            return None
        return self.providers[0], self.positions[0]

    def after(self, position: int) -> Optional[tuple[str, int]]:
        """The first provider strictly after the given order position."""
        i = bisect.bisect_right(self.positions, position)
        if i >= len(self.providers):
            return None
        return self.providers[i], self.positions[i]


@dataclass(frozen=True)
class DispatchTable:
    class_name: str
    chains: Mapping[str, ProviderChain] = field(
        default_factory=lambda: MappingProxyType({}))

    def chain(self, member: str) -> ProviderChain:
        chain = self.chains.get(member)
        if chain is None:
            return ProviderChain(member=member)
        return chain

    def members(self) -> list[str]:
        return list(self.chains)

    def __contains__(self, member: str) -> bool:
        return member in self.chains


@dataclass(frozen=True)
class ComposedClass:
    name: str
    unit: Unit
    order: ResolutionOrder
    table: DispatchTable
    validated: bool = False


@dataclass
class Instance:
    composed: ComposedClass
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def class_name(self) -> str:
        return self.composed.name


@dataclass(frozen=True)
class CallFrame:
    """Marks which provider is executing within one call chain."""

    resolver: Any
    instance: Instance
    member: str
    unit: str
    position: int

    def next(self, *args, **kwargs):
        return self.resolver.invoke_next(self, self.member, *args, **kwargs)

    def call(self, member: str, *args, **kwargs):
        """Dispatch another member on the same instance from the top."""
        return self.resolver.invoke(self.instance, member, *args, **kwargs)


# ---- Orchestration ----

class ComposerBase:
    def __init__(self):
        self._units: dict[str, Unit] = {}
        self._orders: dict[str, ResolutionOrder] = {}
        self._composed: dict[str, ComposedClass] = {}
        self._class_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def units(self) -> Mapping[str, Unit]:
        """Read-only view of the unit graph."""
        return MappingProxyType(self._units)

    def finalize_class(self, name: str) -> ComposedClass:
        """Compute, validate and cache the order and dispatch table of a unit.

        Concrete classes are validated; abstract classes and mixins are only
        linearized and tabled. Concurrent callers for the same class block on
        a per-class lock so the work happens at most once.
        """
        composed = self._composed.get(name)
        if composed is not None:
            return composed
        with self._class_lock(name):
            composed = self._composed.get(name)
            if composed is not None:
                return composed
            unit = self.lookup_unit(name)
            order = self.linearize(name)
            if unit.instantiable:
                self._validate(order)
            table = self._build_dispatch_table(order)
            composed = ComposedClass(
                name=name, unit=unit, order=order, table=table,
                validated=unit.instantiable)
            self._composed[name] = composed
        logger.debug("finalized %s: %s", name, " -> ".join(order))
        return composed

    def is_finalized(self, name: str) -> bool:
        return name in self._composed

    def _class_lock(self, name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._class_locks.get(name)
            if lock is None:
                lock = threading.Lock()
                self._class_locks[name] = lock
            return lock
