"""Composition engine: unit graph, linearizer, validator, dispatch, calls."""

from .composer import Composer as Composer
from .core import (
    CallFrame as CallFrame,
    ComposedClass as ComposedClass,
    CompositionError as CompositionError,
    CyclicComposition as CyclicComposition,
    DispatchTable as DispatchTable,
    DuplicateMember as DuplicateMember,
    DuplicateUnit as DuplicateUnit,
    InconsistentComposition as InconsistentComposition,
    Instance as Instance,
    KindMismatch as KindMismatch,
    NoMoreProviders as NoMoreProviders,
    NotFound as NotFound,
    NotInOrder as NotInOrder,
    NotInstantiable as NotInstantiable,
    ProviderChain as ProviderChain,
    ResolutionOrder as ResolutionOrder,
    UnknownReference as UnknownReference,
    UnresolvedAbstractMember as UnresolvedAbstractMember,
)
from .linearizer import merge as merge
