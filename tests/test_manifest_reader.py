"""Tests for the YAML manifest reader."""

import tempfile
from pathlib import Path

import pytest
import yaml

from apiskel.errors import ModuleReadError
from apiskel.symbols.models import Accessibility, MethodSymbol, PropertySymbol, TypeKind
from apiskel.symbols.reader import ManifestReader


def _write_manifest(tmpdir: str, data, file_name: str = "Sample.yaml") -> Path:
    path = Path(tmpdir) / file_name
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


SAMPLE = {
    "module": {"name": "Sample", "version": "1.2.0.0", "public_key_token": "b77a5c561934e089"},
    "references": ["System.Runtime, Version=4.0.0.0", {"name": "Other", "version": "2.0"}],
    "types": [{"name": "TopLevel", "kind": "struct"}],
    "namespaces": [
        {
            "name": "Sample.Collections",
            "types": [
                {
                    "name": "Bag",
                    "type_parameters": [{"name": "T", "constraints": ["class"]}],
                    "interfaces": ["System.IDisposable"],
                    "modifiers": ["sealed"],
                    "attributes": [{"type": "System.ObsoleteAttribute", "arguments": ['"old"']}],
                    "members": [
                        {"kind": "constructor"},
                        {"kind": "method", "name": "Add", "parameters": [{"name": "item", "type": "T"}]},
                        {"kind": "property", "name": "Count", "type": "System.Int32"},
                        {"kind": "indexer", "type": "T", "parameters": [{"name": "i", "type": "System.Int32"}]},
                        {"kind": "field", "name": "Max", "type": "System.Int32", "const": 10},
                        {"kind": "method", "name": "Hidden", "accessibility": "internal"},
                    ],
                    "nested_types": [{"name": "Enumerator", "kind": "struct"}],
                },
                {"name": "Color", "kind": "enum", "enum_members": ["Red", {"name": "Blue", "value": 4}]},
            ],
        }
    ],
}


def test_read_identity_and_references():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_manifest(tmpdir, SAMPLE)
        module = ManifestReader().read_module(path)

        assert module.identity.name == "Sample"
        assert module.identity.version == (1, 2, 0, 0)
        assert module.identity.key_token_hex == "b77a5c561934e089"
        assert module.path == str(path)
        assert [r.name for r in module.references] == ["System.Runtime", "Other"]
        assert module.references[0].version == (4, 0, 0, 0)
        assert module.references[1].version == (2, 0)


def test_read_namespaces_and_types():
    with tempfile.TemporaryDirectory() as tmpdir:
        module = ManifestReader().read_module(_write_manifest(tmpdir, SAMPLE))
        root = module.global_namespace

        assert [t.name for t in root.get_type_members()] == ["TopLevel"]
        assert root.get_type_members()[0].kind == TypeKind.STRUCT

        sample = root.get_namespace_members()[0]
        assert sample.display_name == "Sample"
        collections = sample.get_namespace_members()[0]
        assert collections.display_name == "Sample.Collections"
        assert [t.name for t in collections.types] == ["Bag", "Color"]


def test_read_members():
    with tempfile.TemporaryDirectory() as tmpdir:
        module = ManifestReader().read_module(_write_manifest(tmpdir, SAMPLE))
        bag = module.global_namespace.all_types()[1]

        assert bag.qualified_name == "Sample.Collections.Bag"
        assert bag.is_sealed
        assert bag.type_parameters[0].constraints == ["class"]
        assert bag.attributes[0].arguments == ['"old"']

        ctor, add, count, indexer, const, hidden = bag.members
        assert isinstance(ctor, MethodSymbol) and ctor.is_constructor
        assert ctor.name == "Bag"
        assert add.return_type == "System.Void"
        assert add.parameters[0].type_name == "T"
        assert isinstance(count, PropertySymbol) and not count.is_indexer
        assert indexer.is_indexer
        assert const.is_const and const.constant_value == "10"
        assert hidden.accessibility == Accessibility.INTERNAL

        assert bag.nested_types[0].qualified_name == "Sample.Collections.Bag.Enumerator"


def test_read_enum_members():
    with tempfile.TemporaryDirectory() as tmpdir:
        module = ManifestReader().read_module(_write_manifest(tmpdir, SAMPLE))
        color = module.global_namespace.all_types()[-1]

        assert color.kind == TypeKind.ENUM
        assert [(m.name, m.value) for m in color.enum_members] == [("Red", None), ("Blue", "4")]


def test_missing_file_raises():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ModuleReadError) as exc:
            ManifestReader().read_module(Path(tmpdir) / "Nope.yaml")
        assert exc.value.path.endswith("Nope.yaml")


def test_malformed_manifest_raises():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "Broken.yaml"
        path.write_text("module: [unclosed\n")
        with pytest.raises(ModuleReadError):
            ManifestReader().read_module(path)


def test_manifest_without_module_name_raises():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = _write_manifest(tmpdir, {"types": []})
        with pytest.raises(ModuleReadError, match="no module name"):
            ManifestReader().read_module(path)


def test_unknown_kinds_become_diagnostics():
    data = {
        "module": {"name": "Odd"},
        "types": [
            {"name": "Weird", "kind": "delegate"},
            {"name": "Fine", "members": [{"kind": "operator", "name": "op_Addition"}]},
            {"name": "Hidden", "accessibility": "friend"},
        ],
    }
    with tempfile.TemporaryDirectory() as tmpdir:
        reader = ManifestReader()
        module = reader.read_module(_write_manifest(tmpdir, data, "Odd.yaml"))

        assert [t.name for t in module.global_namespace.types] == ["Fine", "Hidden"]
        messages = [d.message for d in reader.diagnostics()]
        assert any("unknown type kind" in m for m in messages)
        assert any("unknown member kind" in m for m in messages)
        assert any("unknown accessibility" in m for m in messages)
        assert all(str(d).startswith(str(Path(tmpdir) / "Odd.yaml")) for d in reader.diagnostics())


def test_wrongly_shaped_entries_become_diagnostics():
    data = {
        "module": {"name": "Odd"},
        "namespaces": [
            "N",
            {
                "name": "M",
                "types": [
                    {
                        "name": "Color",
                        "kind": "enum",
                        "enum_members": ["Red", 123, {"value": 2}],
                    },
                    {
                        "name": "Widget",
                        "type_parameters": [{"constraints": ["class"]}],
                        "attributes": [{"arguments": ["1"]}],
                        "members": [{"kind": "method", "name": "Run", "parameters": ["x"]}],
                    },
                ],
            },
        ],
    }
    with tempfile.TemporaryDirectory() as tmpdir:
        reader = ManifestReader()
        module = reader.read_module(_write_manifest(tmpdir, data, "Odd.yaml"))

        [ns] = module.global_namespace.namespaces
        color, widget = ns.types
        assert [m.name for m in color.enum_members] == ["Red"]
        assert widget.type_parameters == []
        assert widget.attributes == []
        assert widget.members[0].parameters == []

        messages = [d.message for d in reader.diagnostics()]
        assert any("invalid namespace entry" in m for m in messages)
        assert sum("invalid enum member" in m for m in messages) == 2
        assert any("invalid type parameter entry" in m for m in messages)
        assert any("invalid attribute entry" in m for m in messages)
        assert any("invalid parameter entry" in m for m in messages)


def test_unexpected_value_types_raise_read_error():
    data = {"module": {"name": "Odd"}, "types": [{"name": "Widget", "modifiers": 5}]}
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(ModuleReadError, match="malformed manifest"):
            ManifestReader().read_module(_write_manifest(tmpdir, data, "Odd.yaml"))


def test_handles_are_distinct():
    reader = ManifestReader()
    with tempfile.TemporaryDirectory() as tmpdir:
        a = reader.read_module(_write_manifest(tmpdir, {"module": {"name": "A"}}, "A.yaml"))
        b = reader.read_module(_write_manifest(tmpdir, {"module": {"name": "B"}}, "B.yaml"))
        assert reader.bind_reference(a) != reader.bind_reference(b)
