"""Tests for JSON manifest loading."""

import pytest

from src.composition.manifest import (
    ManifestError,
    build_composer,
    load_manifest,
    locate_unit,
)
from src.composition.units import UnitKind

MANIFEST = """{
  "units": [
    {"name": "Base", "members": {"log": {}}},
    {"name": "A", "kind": "mixin", "members": {"log": {"delegates": true}}},
    {"name": "B", "kind": "mixin", "members": {"log": {"delegates": true}}},
    {"name": "X", "base": "Base", "mixins": ["A", "B"]}
  ]
}
"""


def shout(frame, text):
    return text.upper() + "!"


def manifest_error(source: str) -> ManifestError:
    with pytest.raises(ManifestError) as exc:
        load_manifest(source)
    return exc.value


class TestLoad:
    def test_declarations(self):
        units = {u.name: u for u in load_manifest(MANIFEST)}
        assert units["A"].kind is UnitKind.MIXIN
        assert units["X"].kind is UnitKind.CLASS
        assert units["X"].base == "Base"
        assert units["X"].mixins == ("A", "B")
        assert units["A"].members[0].delegates

    def test_abstract_members(self):
        units = load_manifest('{"units": [{"name": "S", "abstract": true, '
                              '"members": {"area": {"abstract": true}}}]}')
        assert units[0].is_abstract
        assert units[0].members[0].is_abstract

    def test_tracing_bodies(self):
        c = build_composer(MANIFEST)
        assert c.invoke(c.instantiate("X"), "log") == ["B", "A", "Base"]

    def test_call_target(self):
        c = build_composer(
            '{"units": [{"name": "P", "members": {"say": '
            '{"call": "src.composition.tests.test_manifest:shout"}}}]}')
        assert c.invoke(c.instantiate("P"), "say", "hi") == "HI!"


class TestErrors:
    def test_invalid_json(self):
        err = manifest_error('{\n  "units": [\n}')
        assert err.line == 3
        assert "Invalid JSON" in str(err)

    def test_missing_units(self):
        assert "'units'" in str(manifest_error('{"classes": []}'))

    def test_unit_without_name(self):
        assert "Unit #0" in str(manifest_error('{"units": [{}]}'))

    def test_unknown_unit_key(self):
        err = manifest_error('{"units": [{"name": "A", "traits": []}]}')
        assert "traits" in str(err)
        assert err.unit == "A"
        assert (err.line, err.col) == (1, 13)

    def test_invalid_kind(self):
        assert "invalid kind" in str(
            manifest_error('{"units": [{"name": "A", "kind": "trait"}]}'))

    def test_bad_mixins(self):
        manifest_error('{"units": [{"name": "A", "mixins": "B"}]}')

    def test_bad_member(self):
        manifest_error('{"units": [{"name": "A", "members": {"f": true}}]}')

    def test_abstract_member_with_call(self):
        manifest_error('{"units": [{"name": "A", "members": '
                       '{"f": {"abstract": true, "call": "json:dumps"}}}]}')

    def test_malformed_call_target(self):
        assert "module:function" in str(manifest_error(
            '{"units": [{"name": "A", "members": {"f": {"call": "dumps"}}}]}'))

    def test_missing_call_target(self):
        assert "Cannot load" in str(manifest_error(
            '{"units": [{"name": "A", "members": '
            '{"f": {"call": "no_such_module_xyz:f"}}}]}'))

    def test_uncallable_call_target(self):
        assert "not callable" in str(manifest_error(
            '{"units": [{"name": "A", "members": '
            '{"f": {"call": "json:__doc__"}}}]}'))


class TestLocate:
    def test_locate_unit(self):
        assert locate_unit(MANIFEST, "X") == (6, 6)
        assert locate_unit(MANIFEST, "Base") == (3, 6)

    def test_locate_missing(self):
        assert locate_unit(MANIFEST, "Nope") == (0, 0)
