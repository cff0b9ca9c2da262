"""Tests for class finalization and abstract-member validation."""

import pytest

from src.composition.engine import (
    Composer,
    NotInstantiable,
    UnresolvedAbstractMember,
)
from src.composition.units import UnitKind, abstract, member

MIXIN = UnitKind.MIXIN


def returns(value):
    def body(frame, *args):
        return value
    return body


def chain(frame, *args):
    return [frame.unit] + frame.next(*args)


def abstract_chain() -> Composer:
    c = Composer()
    c.define("A", kind=MIXIN, members=[abstract("log")])
    c.define("B", kind=MIXIN, members=[member("log", returns("B"))])
    c.define("C", kind=MIXIN, members=[abstract("log")])
    return c


class TestAbstractChain:
    def test_missing_concrete_provider(self):
        c = abstract_chain()
        c.define("K", mixins=["A", "C"])
        with pytest.raises(UnresolvedAbstractMember) as exc:
            c.finalize_class("K")
        assert exc.value.member == "log"
        assert exc.value.demanding_unit == "C"
        assert exc.value.class_name == "K"

    def test_redeclared_abstract_falls_back(self):
        c = abstract_chain()
        c.define("K", mixins=["A", "B", "C"])
        composed = c.finalize_class("K")
        assert list(composed.order) == ["K", "C", "B", "A"]
        assert composed.validated
        assert c.invoke(c.instantiate("K"), "log") == "B"

    def test_failure_does_not_affect_other_classes(self):
        c = abstract_chain()
        c.define("Bad", mixins=["A", "C"])
        c.define("Good", mixins=["A", "B", "C"])
        with pytest.raises(UnresolvedAbstractMember):
            c.finalize_class("Bad")
        assert not c.is_finalized("Bad")
        assert c.finalize_class("Good").validated

    def test_class_member_provided_by_mixin(self):
        c = Composer()
        c.define("R", kind=MIXIN, members=[member("run", returns("R"))])
        c.define("X", mixins=["R"], members=[abstract("run")])
        assert c.invoke(c.instantiate("X"), "run") == "R"

    def test_inherited_abstract_member(self):
        c = Composer()
        c.define("Shape", abstract=True, members=[abstract("area")])
        c.define("Square", base="Shape")
        with pytest.raises(UnresolvedAbstractMember) as exc:
            c.finalize_class("Square")
        assert exc.value.demanding_unit == "Shape"


class TestDelegationValidation:
    def test_delegating_member_needs_provider_behind(self):
        c = Composer()
        c.define("L", kind=MIXIN,
                 members=[member("log", chain, delegates=True)])
        c.define("X", mixins=["L"])
        with pytest.raises(UnresolvedAbstractMember) as exc:
            c.finalize_class("X")
        assert exc.value.demanding_unit == "L"

    def test_provider_in_front_does_not_count(self):
        c = Composer()
        c.define("L", kind=MIXIN,
                 members=[member("log", chain, delegates=True)])
        c.define("X", mixins=["L"], members=[member("log", returns("X"))])
        with pytest.raises(UnresolvedAbstractMember):
            c.finalize_class("X")

    def test_delegating_member_with_base(self):
        c = Composer()
        c.define("Base", members=[member("log", returns(["Base"]))])
        c.define("L", kind=MIXIN,
                 members=[member("log", chain, delegates=True)])
        c.define("X", base="Base", mixins=["L"])
        assert c.invoke(c.instantiate("X"), "log") == ["L", "Base"]


class TestAbstractUnits:
    def test_abstract_class_finalizes_without_validation(self):
        c = Composer()
        c.define("Shape", abstract=True, members=[abstract("area")])
        composed = c.finalize_class("Shape")
        assert not composed.validated
        assert composed.table.chain("area").declarers == ("Shape",)

    def test_abstract_class_not_instantiable(self):
        c = Composer()
        c.define("Shape", abstract=True)
        with pytest.raises(NotInstantiable) as exc:
            c.instantiate("Shape")
        assert "abstract class" in str(exc.value)

    def test_mixin_not_instantiable(self):
        c = Composer()
        c.define("M", kind=MIXIN)
        assert list(c.finalize_class("M").order) == ["M"]
        with pytest.raises(NotInstantiable) as exc:
            c.instantiate("M")
        assert "mixin" in str(exc.value)
