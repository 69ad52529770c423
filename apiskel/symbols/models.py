"""Symbol models — the queryable form of a compiled module.

A reader turns a module file into these models; the resolver binds them
into a symbol universe, and the synthesizer drafts declarations from them.
Type references are fully-qualified display strings
(e.g. ``System.Collections.Generic.List<System.String>``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum


class Accessibility(Enum):
    PUBLIC = "public"
    PROTECTED = "protected"
    PROTECTED_OR_INTERNAL = "protected internal"
    PROTECTED_AND_INTERNAL = "private protected"
    INTERNAL = "internal"
    PRIVATE = "private"

    @property
    def is_visible_outside_module(self) -> bool:
        return self in (
            Accessibility.PUBLIC,
            Accessibility.PROTECTED,
            Accessibility.PROTECTED_OR_INTERNAL,
        )


class TypeKind(Enum):
    CLASS = "class"
    STRUCT = "struct"
    INTERFACE = "interface"
    ENUM = "enum"


class MethodKind(Enum):
    ORDINARY = "method"
    CONSTRUCTOR = "constructor"


_IDENTITY_PART = re.compile(r"^\s*(?P<key>[A-Za-z]+)\s*=\s*(?P<value>.*?)\s*$")


@dataclass(frozen=True)
class ModuleIdentity:
    """The (name, version, public key token) triple that requests a module."""

    name: str
    version: tuple[int, ...] = (0, 0, 0, 0)
    public_key_token: bytes = b""

    @property
    def version_string(self) -> str:
        return ".".join(str(part) for part in self.version)

    @property
    def key_token_hex(self) -> str:
        return "".join(f"{b:02x}" for b in self.public_key_token)

    @property
    def has_public_key(self) -> bool:
        return len(self.public_key_token) > 0

    def __str__(self) -> str:
        text = f"{self.name}, Version={self.version_string}"
        if self.has_public_key:
            text += f", PublicKeyToken={self.key_token_hex}"
        return text

    @classmethod
    def parse(cls, text: str) -> ModuleIdentity:
        """Parse ``Name[, Version=1.2.0.0][, PublicKeyToken=abcdef...]``."""
        parts = text.split(",")
        name = parts[0].strip()
        if not name:
            raise ValueError(f"Module identity has no name: {text!r}")

        version: tuple[int, ...] = (0, 0, 0, 0)
        token = b""
        for part in parts[1:]:
            m = _IDENTITY_PART.match(part)
            if not m:
                raise ValueError(f"Malformed identity component {part.strip()!r} in {text!r}")
            key = m.group("key").lower()
            value = m.group("value")
            if key == "version":
                version = parse_version(value)
            elif key == "publickeytoken":
                token = b"" if value.lower() in ("", "null") else bytes.fromhex(value)
            # Culture and other components do not take part in matching.

        return cls(name=name, version=version, public_key_token=token)


def parse_version(value: str | int | float | tuple | list | None) -> tuple[int, ...]:
    """Normalize a version given as text (``1.2``) or a sequence of ints."""
    if value is None or value == "":
        return (0, 0, 0, 0)
    if isinstance(value, (tuple, list)):
        return tuple(int(v) for v in value)
    return tuple(int(v) for v in str(value).split("."))


# --- Members ---


@dataclass
class AttributeSymbol:
    """A custom attribute applied to a type or member."""

    type_name: str
    arguments: list[str] = field(default_factory=list)


@dataclass
class ParameterSymbol:
    name: str
    type_name: str
    modifier: str = ""  # ref, out, in, params
    default_value: str | None = None


@dataclass
class TypeParameterSymbol:
    name: str
    constraints: list[str] = field(default_factory=list)


@dataclass
class FieldSymbol:
    name: str
    type_name: str
    accessibility: Accessibility = Accessibility.PUBLIC
    is_static: bool = False
    is_readonly: bool = False
    constant_value: str | None = None
    attributes: list[AttributeSymbol] = field(default_factory=list)

    @property
    def is_const(self) -> bool:
        return self.constant_value is not None


@dataclass
class MethodSymbol:
    name: str
    return_type: str = "System.Void"
    method_kind: MethodKind = MethodKind.ORDINARY
    accessibility: Accessibility = Accessibility.PUBLIC
    parameters: list[ParameterSymbol] = field(default_factory=list)
    type_parameters: list[TypeParameterSymbol] = field(default_factory=list)
    is_static: bool = False
    is_abstract: bool = False
    is_virtual: bool = False
    is_override: bool = False
    is_sealed: bool = False
    attributes: list[AttributeSymbol] = field(default_factory=list)

    @property
    def is_constructor(self) -> bool:
        return self.method_kind == MethodKind.CONSTRUCTOR


@dataclass
class PropertySymbol:
    """A property, or an indexer when it has parameters."""

    name: str
    type_name: str
    accessibility: Accessibility = Accessibility.PUBLIC
    has_getter: bool = True
    has_setter: bool = False
    parameters: list[ParameterSymbol] = field(default_factory=list)
    is_static: bool = False
    is_abstract: bool = False
    is_virtual: bool = False
    is_override: bool = False
    attributes: list[AttributeSymbol] = field(default_factory=list)

    @property
    def is_indexer(self) -> bool:
        return len(self.parameters) > 0


@dataclass
class EventSymbol:
    name: str
    type_name: str
    accessibility: Accessibility = Accessibility.PUBLIC
    is_static: bool = False
    attributes: list[AttributeSymbol] = field(default_factory=list)


@dataclass
class EnumMemberSymbol:
    name: str
    value: str | None = None


MemberSymbol = FieldSymbol | MethodSymbol | PropertySymbol | EventSymbol


# --- Types and containers ---


@dataclass
class TypeSymbol:
    """A named type declared in a module."""

    name: str
    kind: TypeKind = TypeKind.CLASS
    accessibility: Accessibility = Accessibility.PUBLIC
    namespace: str = ""
    base_type: str | None = None
    interfaces: list[str] = field(default_factory=list)
    type_parameters: list[TypeParameterSymbol] = field(default_factory=list)
    attributes: list[AttributeSymbol] = field(default_factory=list)
    members: list[MemberSymbol] = field(default_factory=list)
    nested_types: list[TypeSymbol] = field(default_factory=list)
    enum_members: list[EnumMemberSymbol] = field(default_factory=list)
    enum_underlying_type: str | None = None
    is_static: bool = False
    is_abstract: bool = False
    is_sealed: bool = False

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.name}" if self.namespace else self.name

    @property
    def is_visible_outside_module(self) -> bool:
        return self.accessibility.is_visible_outside_module


@dataclass
class NamespaceSymbol:
    """A namespace; the global namespace has an empty name."""

    name: str = ""
    display_name: str = ""
    types: list[TypeSymbol] = field(default_factory=list)
    namespaces: list[NamespaceSymbol] = field(default_factory=list)

    def get_type_members(self) -> list[TypeSymbol]:
        return list(self.types)

    def get_namespace_members(self) -> list[NamespaceSymbol]:
        return list(self.namespaces)

    def all_types(self) -> list[TypeSymbol]:
        """Every type in this namespace and below, nested types excluded."""
        result = list(self.types)
        for ns in self.namespaces:
            result.extend(ns.all_types())
        return result


@dataclass
class ModuleSymbol:
    """A module read from one file."""

    identity: ModuleIdentity
    path: str = ""
    global_namespace: NamespaceSymbol = field(default_factory=NamespaceSymbol)
    references: list[ModuleIdentity] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.identity.name


@dataclass(frozen=True)
class LoadedModule:
    """A module bound into the symbol universe, once per distinct file name."""

    file_name: str
    path: str
    handle: int
    symbol: ModuleSymbol


@dataclass(frozen=True)
class Diagnostic:
    """A problem found while reading a module into the universe."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: error: {self.message}"
