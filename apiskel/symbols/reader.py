"""Module readers — turn a module file into a symbol graph.

``ModuleReader`` is the seam the resolver depends on. ``ManifestReader`` is
the bundled implementation: it reads YAML symbol manifests that describe one
module's identity, references, namespaces and types. Readers for other
formats only need to satisfy the protocol.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import yaml

from apiskel.errors import ModuleReadError
from apiskel.symbols.models import (
    Accessibility,
    AttributeSymbol,
    Diagnostic,
    EnumMemberSymbol,
    EventSymbol,
    FieldSymbol,
    MethodKind,
    MethodSymbol,
    ModuleIdentity,
    ModuleSymbol,
    NamespaceSymbol,
    ParameterSymbol,
    PropertySymbol,
    TypeKind,
    TypeParameterSymbol,
    TypeSymbol,
    parse_version,
)


class ModuleReader(Protocol):
    """What the symbol universe needs from a module file format."""

    extension: str

    def read_module(self, path: str | Path) -> ModuleSymbol:
        """Read a module file; raise ModuleReadError if it is unusable."""
        ...

    def bind_reference(self, module: ModuleSymbol) -> int:
        """Return a handle for a module that is being bound."""
        ...

    def diagnostics(self) -> list[Diagnostic]:
        """Problems found in modules that were read successfully."""
        ...


ACCESSIBILITY_NAMES = {a.value: a for a in Accessibility} | {
    "protected_internal": Accessibility.PROTECTED_OR_INTERNAL,
    "protected_or_internal": Accessibility.PROTECTED_OR_INTERNAL,
    "private_protected": Accessibility.PROTECTED_AND_INTERNAL,
    "protected_and_internal": Accessibility.PROTECTED_AND_INTERNAL,
}


class ManifestReader:
    """Reads YAML symbol manifests (``<ModuleName>.yaml``)."""

    def __init__(self, extension: str = ".yaml"):
        self.extension = extension
        self._next_handle = 1
        self._diagnostics: list[Diagnostic] = []

    def read_module(self, path: str | Path) -> ModuleSymbol:
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ModuleReadError(str(path), f"cannot open: {e.strerror or e}") from e
        except yaml.YAMLError as e:
            raise ModuleReadError(str(path), f"malformed manifest: {e}") from e

        if not isinstance(data, dict):
            raise ModuleReadError(str(path), "manifest must be a mapping")

        try:
            return _ManifestParser(str(path), self._diagnostics).parse(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ModuleReadError(str(path), f"malformed manifest: {e!r}") from e

    def bind_reference(self, module: ModuleSymbol) -> int:
        handle = self._next_handle
        self._next_handle += 1
        return handle

    def diagnostics(self) -> list[Diagnostic]:
        return list(self._diagnostics)


class _ManifestParser:
    """Builds a ModuleSymbol from one parsed manifest document."""

    def __init__(self, path: str, diagnostics: list[Diagnostic]):
        self.path = path
        self.diagnostics = diagnostics

    def parse(self, data: dict) -> ModuleSymbol:
        module_data = data.get("module") or {}
        if not isinstance(module_data, dict) or not module_data.get("name"):
            raise ModuleReadError(self.path, "manifest has no module name")

        identity = self._identity(module_data)
        references = [
            ref
            for ref in (self._reference(r) for r in data.get("references") or [])
            if ref is not None
        ]

        global_ns = NamespaceSymbol()
        for t in data.get("types") or []:
            type_symbol = self._type(t, namespace="")
            if type_symbol:
                global_ns.types.append(type_symbol)

        for ns_data in data.get("namespaces") or []:
            if not isinstance(ns_data, dict):
                self._diag(f"invalid namespace entry: {ns_data!r}")
                continue
            name = str(ns_data.get("name", "")).strip()
            if not name:
                self._diag("namespace entry without a name")
                continue
            ns = _get_or_create_namespace(global_ns, name)
            for t in ns_data.get("types") or []:
                type_symbol = self._type(t, namespace=name)
                if type_symbol:
                    ns.types.append(type_symbol)

        return ModuleSymbol(
            identity=identity,
            path=self.path,
            global_namespace=global_ns,
            references=references,
        )

    # --- identities ---

    def _identity(self, data: dict) -> ModuleIdentity:
        token = str(data.get("public_key_token") or "")
        try:
            key = bytes.fromhex(token)
        except ValueError:
            self._diag(f"invalid public key token {token!r} for {data.get('name')}")
            key = b""
        try:
            version = parse_version(data.get("version"))
        except ValueError:
            self._diag(f"invalid version {data.get('version')!r} for {data.get('name')}")
            version = (0, 0, 0, 0)
        return ModuleIdentity(name=str(data["name"]), version=version, public_key_token=key)

    def _reference(self, data) -> ModuleIdentity | None:
        if isinstance(data, str):
            try:
                return ModuleIdentity.parse(data)
            except ValueError as e:
                self._diag(f"invalid reference: {e}")
                return None
        if isinstance(data, dict) and data.get("name"):
            return self._identity(data)
        self._diag(f"invalid reference entry: {data!r}")
        return None

    # --- types ---

    def _type(self, data: dict, namespace: str) -> TypeSymbol | None:
        if not isinstance(data, dict) or not data.get("name"):
            self._diag(f"type entry without a name in namespace {namespace or '<global>'}")
            return None

        name = str(data["name"])
        try:
            kind = TypeKind(data.get("kind", "class"))
        except ValueError:
            self._diag(f"unknown type kind {data.get('kind')!r} for {name}")
            return None

        modifiers = set(data.get("modifiers") or [])
        type_symbol = TypeSymbol(
            name=name,
            kind=kind,
            accessibility=self._accessibility(data, name),
            namespace=namespace,
            base_type=data.get("base"),
            interfaces=list(data.get("interfaces") or []),
            type_parameters=self._type_parameters(data),
            attributes=self._attributes(data),
            enum_underlying_type=data.get("underlying_type"),
            is_static="static" in modifiers,
            is_abstract="abstract" in modifiers,
            is_sealed="sealed" in modifiers,
        )

        for member in data.get("members") or []:
            symbol = self._member(member, type_symbol)
            if symbol is not None:
                type_symbol.members.append(symbol)

        for m in data.get("enum_members") or []:
            if isinstance(m, str):
                type_symbol.enum_members.append(EnumMemberSymbol(name=m))
            elif isinstance(m, dict) and m.get("name"):
                value = m.get("value")
                type_symbol.enum_members.append(
                    EnumMemberSymbol(name=str(m["name"]), value=None if value is None else str(value))
                )
            else:
                self._diag(f"invalid enum member in {type_symbol.qualified_name}: {m!r}")

        nested_namespace = type_symbol.qualified_name
        for nested in data.get("nested_types") or []:
            nested_symbol = self._type(nested, namespace=nested_namespace)
            if nested_symbol:
                type_symbol.nested_types.append(nested_symbol)

        return type_symbol

    def _member(self, data: dict, owner: TypeSymbol):
        if not isinstance(data, dict):
            self._diag(f"invalid member entry in {owner.qualified_name}: {data!r}")
            return None

        kind = data.get("kind", "")
        modifiers = set(data.get("modifiers") or [])
        accessibility = self._accessibility(data, data.get("name", owner.name))
        attributes = self._attributes(data)

        if kind in ("method", "constructor"):
            is_ctor = kind == "constructor"
            return MethodSymbol(
                name=owner.name if is_ctor else str(data.get("name", "")),
                return_type=str(data.get("returns") or "System.Void"),
                method_kind=MethodKind.CONSTRUCTOR if is_ctor else MethodKind.ORDINARY,
                accessibility=accessibility,
                parameters=self._parameters(data),
                type_parameters=self._type_parameters(data),
                is_static="static" in modifiers,
                is_abstract="abstract" in modifiers,
                is_virtual="virtual" in modifiers,
                is_override="override" in modifiers,
                is_sealed="sealed" in modifiers,
                attributes=attributes,
            )
        if kind in ("property", "indexer"):
            return PropertySymbol(
                name="this" if kind == "indexer" else str(data.get("name", "")),
                type_name=str(data.get("type", "System.Object")),
                accessibility=accessibility,
                has_getter=bool(data.get("get", True)),
                has_setter=bool(data.get("set", False)),
                parameters=self._parameters(data),
                is_static="static" in modifiers,
                is_abstract="abstract" in modifiers,
                is_virtual="virtual" in modifiers,
                is_override="override" in modifiers,
                attributes=attributes,
            )
        if kind == "field":
            const = data.get("const")
            return FieldSymbol(
                name=str(data.get("name", "")),
                type_name=str(data.get("type", "System.Object")),
                accessibility=accessibility,
                is_static="static" in modifiers,
                is_readonly="readonly" in modifiers,
                constant_value=None if const is None else str(const),
                attributes=attributes,
            )
        if kind == "event":
            return EventSymbol(
                name=str(data.get("name", "")),
                type_name=str(data.get("type", "System.EventHandler")),
                accessibility=accessibility,
                is_static="static" in modifiers,
                attributes=attributes,
            )

        self._diag(f"unknown member kind {kind!r} in {owner.qualified_name}")
        return None

    def _parameters(self, data: dict) -> list[ParameterSymbol]:
        params = []
        for p in data.get("parameters") or []:
            if not isinstance(p, dict):
                self._diag(f"invalid parameter entry: {p!r}")
                continue
            default = p.get("default")
            params.append(
                ParameterSymbol(
                    name=str(p.get("name", "")),
                    type_name=str(p.get("type", "System.Object")),
                    modifier=str(p.get("modifier", "")),
                    default_value=None if default is None else str(default),
                )
            )
        return params

    def _type_parameters(self, data: dict) -> list[TypeParameterSymbol]:
        result = []
        for tp in data.get("type_parameters") or []:
            if isinstance(tp, str):
                result.append(TypeParameterSymbol(name=tp))
            elif isinstance(tp, dict) and tp.get("name"):
                result.append(
                    TypeParameterSymbol(
                        name=str(tp["name"]),
                        constraints=[str(c) for c in tp.get("constraints") or []],
                    )
                )
            else:
                self._diag(f"invalid type parameter entry: {tp!r}")
        return result

    def _attributes(self, data: dict) -> list[AttributeSymbol]:
        result = []
        for a in data.get("attributes") or []:
            if isinstance(a, str):
                result.append(AttributeSymbol(type_name=a))
            elif isinstance(a, dict) and a.get("type"):
                result.append(
                    AttributeSymbol(
                        type_name=str(a["type"]),
                        arguments=[str(arg) for arg in a.get("arguments") or []],
                    )
                )
            else:
                self._diag(f"invalid attribute entry: {a!r}")
        return result

    def _accessibility(self, data: dict, owner: str) -> Accessibility:
        value = str(data.get("accessibility", "public")).lower()
        if value not in ACCESSIBILITY_NAMES:
            self._diag(f"unknown accessibility {value!r} for {owner}")
            return Accessibility.PRIVATE
        return ACCESSIBILITY_NAMES[value]

    def _diag(self, message: str) -> None:
        self.diagnostics.append(Diagnostic(path=self.path, message=message))


def _get_or_create_namespace(root: NamespaceSymbol, dotted: str) -> NamespaceSymbol:
    current = root
    for part in dotted.split("."):
        display = f"{current.display_name}.{part}" if current.display_name else part
        found = next((ns for ns in current.namespaces if ns.name == part), None)
        if found is None:
            found = NamespaceSymbol(name=part, display_name=display)
            current.namespaces.append(found)
        current = found
    return current
