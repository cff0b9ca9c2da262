"""mixc: mixin composition and dispatch engine."""

from .units import (
    MemberDef as MemberDef,
    Unit as Unit,
    UnitDef as UnitDef,
    UnitKind as UnitKind,
    abstract as abstract,
    member as member,
)
from .engine import Composer as Composer, CompositionError as CompositionError
