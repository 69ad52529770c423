"""Tests for module identities and identity matching."""

import tempfile
from pathlib import Path

import pytest
import yaml

from apiskel.resolver.identity import MismatchKind, match_identity
from apiskel.symbols.models import ModuleIdentity
from apiskel.symbols.reader import ManifestReader
from apiskel.symbols.universe import SymbolUniverse


def _bind(tmpdir: str, name: str, version: str = "1.0.0.0", token: str = "") -> SymbolUniverse:
    path = Path(tmpdir) / f"{name}.yaml"
    with open(path, "w") as f:
        yaml.dump({"module": {"name": name, "version": version, "public_key_token": token}}, f)
    universe = SymbolUniverse(ManifestReader())
    universe.bind(path)
    return universe


def test_parse_identity():
    identity = ModuleIdentity.parse("Foo, Version=1.2.3.4, Culture=neutral, PublicKeyToken=b03f5f7f11d50a3a")
    assert identity.name == "Foo"
    assert identity.version == (1, 2, 3, 4)
    assert identity.key_token_hex == "b03f5f7f11d50a3a"
    assert str(identity) == "Foo, Version=1.2.3.4, PublicKeyToken=b03f5f7f11d50a3a"


def test_parse_identity_name_only():
    identity = ModuleIdentity.parse("Bar")
    assert identity.version == (0, 0, 0, 0)
    assert not identity.has_public_key
    assert str(identity) == "Bar, Version=0.0.0.0"


def test_parse_identity_null_token():
    assert ModuleIdentity.parse("Bar, PublicKeyToken=null").public_key_token == b""


def test_parse_identity_rejects_garbage():
    with pytest.raises(ValueError):
        ModuleIdentity.parse("")
    with pytest.raises(ValueError):
        ModuleIdentity.parse("Foo, 1.0")


def test_exact_match_has_no_notices():
    with tempfile.TemporaryDirectory() as tmpdir:
        universe = _bind(tmpdir, "Foo", "1.0.0.0")
        result = match_identity(ModuleIdentity("Foo", (1, 0, 0, 0)), universe)

        assert result.resolved
        assert result.module.symbol.identity.name == "Foo"
        assert result.notices == []


def test_version_mismatch_is_a_notice():
    with tempfile.TemporaryDirectory() as tmpdir:
        universe = _bind(tmpdir, "Foo", "1.2.0.0")
        result = match_identity(ModuleIdentity("Foo", (1, 0, 0, 0)), universe)

        assert result.resolved
        assert len(result.notices) == 1
        notice = result.notices[0]
        assert notice.kind == MismatchKind.VERSION
        assert str(notice) == "Found 'Foo' with version '1.2.0.0' instead of '1.0.0.0'."


def test_public_key_mismatch_is_a_notice():
    with tempfile.TemporaryDirectory() as tmpdir:
        universe = _bind(tmpdir, "Foo", "1.0.0.0", token="aabbccdd")
        requested = ModuleIdentity("Foo", (1, 0, 0, 0), bytes.fromhex("11223344"))
        result = match_identity(requested, universe)

        assert result.resolved
        assert [n.kind for n in result.notices] == [MismatchKind.PUBLIC_KEY_TOKEN]
        assert str(result.notices[0]) == "Found 'Foo' with PublicKeyToken 'aabbccdd' instead of '11223344'."


def test_both_mismatches_reported_version_first():
    with tempfile.TemporaryDirectory() as tmpdir:
        universe = _bind(tmpdir, "Foo", "2.0.0.0", token="aabbccdd")
        result = match_identity(ModuleIdentity("Foo", (1, 0, 0, 0)), universe)
        assert [n.kind for n in result.notices] == [MismatchKind.VERSION, MismatchKind.PUBLIC_KEY_TOKEN]


def test_unbound_name_is_unresolved():
    with tempfile.TemporaryDirectory() as tmpdir:
        universe = _bind(tmpdir, "Foo")
        result = match_identity(ModuleIdentity("Missing"), universe)
        assert not result.resolved
        assert result.notices == []


def test_candidate_is_classified_instead_of_name_lookup():
    with tempfile.TemporaryDirectory() as tmpdir:
        universe = _bind(tmpdir, "Foo", "0.9.0.0")
        other = Path(tmpdir) / "other"
        other.mkdir()
        with open(other / "Foo.yaml", "w") as f:
            yaml.dump({"module": {"name": "Foo", "version": "1.2.0.0"}}, f)
        candidate = universe.bind(other / "Foo.yaml")

        result = match_identity(ModuleIdentity("Foo", (1, 2, 0, 0)), universe, candidate)
        assert result.module is candidate
        assert result.notices == []
