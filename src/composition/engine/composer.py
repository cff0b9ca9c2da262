"""Composer assembly: combines the engine mixins into the final Composer class."""

from .core import (
    CallFrame, ComposedClass, ComposerBase, CompositionError, DispatchTable,
    Instance, ProviderChain, ResolutionOrder,
)
from .graph import GraphMixin
from .linearizer import LinearizerMixin
from .validation import ValidationMixin
from .dispatch import DispatchMixin
from .resolver import ResolvedMember, ResolverMixin


class Composer(
    ResolverMixin,
    DispatchMixin,
    ValidationMixin,
    LinearizerMixin,
    GraphMixin,
    ComposerBase,
):
    """Mixin composition and dispatch engine over one closed unit graph."""
    pass


__all__ = [
    "Composer", "CompositionError", "ComposedClass", "CallFrame",
    "DispatchTable", "Instance", "ProviderChain", "ResolutionOrder",
    "ResolvedMember",
]
