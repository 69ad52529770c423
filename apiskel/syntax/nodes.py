"""Declaration tree — tokens with trivia, nodes with named slots.

Every node kind has a fixed, ordered set of slots (see ``SLOTS``). A slot
holds a ``Token``, a ``Node``, a tuple of nodes and separator tokens, or
``None`` when the construct is absent. Trees are immutable; ``with_`` and
the trivia helpers return new nodes.

Rendering concatenates every token with its leading and trailing trivia in
slot order, so the text of a tree is fully determined by its tokens.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, replace
from enum import Enum


class SyntaxKind(Enum):
    NAMESPACE_DECLARATION = "namespace_declaration"
    CLASS_DECLARATION = "class_declaration"
    STRUCT_DECLARATION = "struct_declaration"
    INTERFACE_DECLARATION = "interface_declaration"
    ENUM_DECLARATION = "enum_declaration"
    ENUM_MEMBER_DECLARATION = "enum_member_declaration"
    BASE_LIST = "base_list"
    SIMPLE_BASE_TYPE = "simple_base_type"
    TYPE_PARAMETER_LIST = "type_parameter_list"
    TYPE_PARAMETER = "type_parameter"
    TYPE_PARAMETER_CONSTRAINT_CLAUSE = "type_parameter_constraint_clause"
    TYPE_CONSTRAINT = "type_constraint"
    KEYWORD_CONSTRAINT = "keyword_constraint"
    ATTRIBUTE_LIST = "attribute_list"
    ATTRIBUTE = "attribute"
    ATTRIBUTE_ARGUMENT_LIST = "attribute_argument_list"
    FIELD_DECLARATION = "field_declaration"
    EVENT_FIELD_DECLARATION = "event_field_declaration"
    CONSTRUCTOR_DECLARATION = "constructor_declaration"
    METHOD_DECLARATION = "method_declaration"
    PROPERTY_DECLARATION = "property_declaration"
    INDEXER_DECLARATION = "indexer_declaration"
    ACCESSOR_LIST = "accessor_list"
    GET_ACCESSOR_DECLARATION = "get_accessor_declaration"
    SET_ACCESSOR_DECLARATION = "set_accessor_declaration"
    PARAMETER_LIST = "parameter_list"
    BRACKETED_PARAMETER_LIST = "bracketed_parameter_list"
    PARAMETER = "parameter"
    EQUALS_VALUE_CLAUSE = "equals_value_clause"
    BLOCK = "block"
    STATEMENT = "statement"
    ARROW_EXPRESSION_CLAUSE = "arrow_expression_clause"
    IDENTIFIER_NAME = "identifier_name"
    GENERIC_NAME = "generic_name"
    TYPE_ARGUMENT_LIST = "type_argument_list"
    QUALIFIED_NAME = "qualified_name"
    ALIAS_QUALIFIED_NAME = "alias_qualified_name"
    PREDEFINED_TYPE = "predefined_type"
    ARRAY_TYPE = "array_type"
    NULLABLE_TYPE = "nullable_type"


TYPE_DECLARATION_SLOTS = (
    "attribute_lists",
    "modifiers",
    "keyword",
    "identifier",
    "type_parameter_list",
    "base_list",
    "constraint_clauses",
    "open_brace",
    "members",
    "close_brace",
)

ACCESSOR_SLOTS = ("attribute_lists", "modifiers", "keyword", "body", "semicolon")

SLOTS: dict[SyntaxKind, tuple[str, ...]] = {
    SyntaxKind.NAMESPACE_DECLARATION: (
        "namespace_keyword",
        "name",
        "open_brace",
        "members",
        "close_brace",
    ),
    SyntaxKind.CLASS_DECLARATION: TYPE_DECLARATION_SLOTS,
    SyntaxKind.STRUCT_DECLARATION: TYPE_DECLARATION_SLOTS,
    SyntaxKind.INTERFACE_DECLARATION: TYPE_DECLARATION_SLOTS,
    SyntaxKind.ENUM_DECLARATION: (
        "attribute_lists",
        "modifiers",
        "keyword",
        "identifier",
        "base_list",
        "open_brace",
        "members",
        "close_brace",
    ),
    SyntaxKind.ENUM_MEMBER_DECLARATION: ("identifier", "equals_value"),
    SyntaxKind.BASE_LIST: ("colon", "types"),
    SyntaxKind.SIMPLE_BASE_TYPE: ("type",),
    SyntaxKind.TYPE_PARAMETER_LIST: ("less_than", "parameters", "greater_than"),
    SyntaxKind.TYPE_PARAMETER: ("identifier",),
    SyntaxKind.TYPE_PARAMETER_CONSTRAINT_CLAUSE: ("where_keyword", "name", "colon", "constraints"),
    SyntaxKind.TYPE_CONSTRAINT: ("type",),
    SyntaxKind.KEYWORD_CONSTRAINT: ("tokens",),
    SyntaxKind.ATTRIBUTE_LIST: ("open_bracket", "attributes", "close_bracket"),
    SyntaxKind.ATTRIBUTE: ("name", "argument_list"),
    SyntaxKind.ATTRIBUTE_ARGUMENT_LIST: ("open_paren", "arguments", "close_paren"),
    SyntaxKind.FIELD_DECLARATION: (
        "attribute_lists",
        "modifiers",
        "type",
        "identifier",
        "equals_value",
        "semicolon",
    ),
    SyntaxKind.EVENT_FIELD_DECLARATION: (
        "attribute_lists",
        "modifiers",
        "event_keyword",
        "type",
        "identifier",
        "semicolon",
    ),
    SyntaxKind.CONSTRUCTOR_DECLARATION: (
        "attribute_lists",
        "modifiers",
        "identifier",
        "parameter_list",
        "body",
        "semicolon",
    ),
    SyntaxKind.METHOD_DECLARATION: (
        "attribute_lists",
        "modifiers",
        "return_type",
        "identifier",
        "type_parameter_list",
        "parameter_list",
        "constraint_clauses",
        "body",
        "expression_body",
        "semicolon",
    ),
    SyntaxKind.PROPERTY_DECLARATION: (
        "attribute_lists",
        "modifiers",
        "type",
        "identifier",
        "accessor_list",
    ),
    SyntaxKind.INDEXER_DECLARATION: (
        "attribute_lists",
        "modifiers",
        "type",
        "this_keyword",
        "parameter_list",
        "accessor_list",
    ),
    SyntaxKind.ACCESSOR_LIST: ("open_brace", "accessors", "close_brace"),
    SyntaxKind.GET_ACCESSOR_DECLARATION: ACCESSOR_SLOTS,
    SyntaxKind.SET_ACCESSOR_DECLARATION: ACCESSOR_SLOTS,
    SyntaxKind.PARAMETER_LIST: ("open_paren", "parameters", "close_paren"),
    SyntaxKind.BRACKETED_PARAMETER_LIST: ("open_bracket", "parameters", "close_bracket"),
    SyntaxKind.PARAMETER: ("attribute_lists", "modifiers", "type", "identifier", "default"),
    SyntaxKind.EQUALS_VALUE_CLAUSE: ("equals", "value"),
    SyntaxKind.BLOCK: ("open_brace", "statements", "close_brace"),
    SyntaxKind.STATEMENT: ("tokens",),
    SyntaxKind.ARROW_EXPRESSION_CLAUSE: ("arrow", "expression"),
    SyntaxKind.IDENTIFIER_NAME: ("identifier",),
    SyntaxKind.GENERIC_NAME: ("identifier", "type_argument_list"),
    SyntaxKind.TYPE_ARGUMENT_LIST: ("less_than", "arguments", "greater_than"),
    SyntaxKind.QUALIFIED_NAME: ("left", "dot", "right"),
    SyntaxKind.ALIAS_QUALIFIED_NAME: ("alias", "colon_colon", "name"),
    SyntaxKind.PREDEFINED_TYPE: ("keyword",),
    SyntaxKind.ARRAY_TYPE: ("element_type", "rank_specifiers"),
    SyntaxKind.NULLABLE_TYPE: ("element_type", "question"),
}

TYPE_DECLARATION_KINDS = frozenset(
    {
        SyntaxKind.CLASS_DECLARATION,
        SyntaxKind.STRUCT_DECLARATION,
        SyntaxKind.INTERFACE_DECLARATION,
    }
)

NAME_KINDS = frozenset(
    {
        SyntaxKind.IDENTIFIER_NAME,
        SyntaxKind.GENERIC_NAME,
        SyntaxKind.QUALIFIED_NAME,
        SyntaxKind.ALIAS_QUALIFIED_NAME,
    }
)


@dataclass(frozen=True)
class Token:
    """A token with the trivia around it."""

    text: str
    leading: str = ""
    trailing: str = ""

    def with_leading_trivia(self, text: str) -> Token:
        return replace(self, leading=text)

    def with_trailing_trivia(self, text: str) -> Token:
        return replace(self, trailing=text)

    def to_full_string(self) -> str:
        return self.leading + self.text + self.trailing

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Node:
    kind: SyntaxKind
    slots: tuple[tuple[str, Slot], ...]

    def __getitem__(self, name: str) -> Slot:
        for slot_name, value in self.slots:
            if slot_name == name:
                return value
        raise KeyError(f"{self.kind.value} has no slot {name!r}")

    def get(self, name: str, default: Slot = None) -> Slot:
        for slot_name, value in self.slots:
            if slot_name == name:
                return value
        return default

    def with_(self, **changes: Slot) -> Node:
        unknown = set(changes) - set(SLOTS[self.kind])
        if unknown:
            raise KeyError(f"{self.kind.value} has no slot(s) {', '.join(sorted(unknown))}")
        return Node(
            self.kind,
            tuple((name, _freeze(changes[name]) if name in changes else value) for name, value in self.slots),
        )

    # --- traversal ---

    def tokens(self) -> Iterator[Token]:
        for _, value in self.slots:
            yield from iter_tokens(value)

    def child_nodes(self) -> Iterator[Node]:
        for _, value in self.slots:
            if isinstance(value, Node):
                yield value
            elif isinstance(value, tuple):
                yield from (v for v in value if isinstance(v, Node))

    def descendants(self) -> Iterator[Node]:
        for child in self.child_nodes():
            yield child
            yield from child.descendants()

    @property
    def first_token(self) -> Token | None:
        return next(self.tokens(), None)

    @property
    def last_token(self) -> Token | None:
        last = None
        for tok in self.tokens():
            last = tok
        return last

    # --- trivia ---

    def with_leading_trivia(self, text: str) -> Node:
        node, _ = _map_edge_token(self, lambda t: t.with_leading_trivia(text), from_end=False)
        return node

    def with_trailing_trivia(self, text: str) -> Node:
        node, _ = _map_edge_token(self, lambda t: t.with_trailing_trivia(text), from_end=True)
        return node

    # --- rendering ---

    def to_full_string(self) -> str:
        return "".join(t.to_full_string() for t in self.tokens())

    def __str__(self) -> str:
        toks = list(self.tokens())
        if not toks:
            return ""
        text = self.to_full_string()
        start = len(toks[0].leading)
        end = len(text) - len(toks[-1].trailing)
        return text[start:end]


Slot = Token | Node | tuple | None


def make(kind: SyntaxKind, **values: Slot) -> Node:
    """Build a node, filling absent slots with ``None``."""
    names = SLOTS[kind]
    unknown = set(values) - set(names)
    if unknown:
        raise KeyError(f"{kind.value} has no slot(s) {', '.join(sorted(unknown))}")
    return Node(kind, tuple((name, _freeze(values.get(name))) for name in names))


def separated(items: list, separator: str = ",") -> tuple:
    """Interleave items with separator tokens: (a, ",", b, ",", c)."""
    result: list = []
    for i, item in enumerate(items):
        if i:
            result.append(Token(separator))
        result.append(item)
    return tuple(result)


def elements(value: Slot) -> list[Node]:
    """The nodes of a (possibly separated) list slot."""
    if value is None:
        return []
    if isinstance(value, Node):
        return [value]
    return [v for v in value if isinstance(v, Node)]


def iter_tokens(value: Slot) -> Iterator[Token]:
    if value is None:
        return
    if isinstance(value, Token):
        yield value
    elif isinstance(value, Node):
        yield from value.tokens()
    else:
        for item in value:
            yield from iter_tokens(item)


def map_tokens(value: Slot, replacements: Iterator[Token]) -> Slot:
    """Rebuild a slot, taking each token in order from ``replacements``."""
    if value is None:
        return None
    if isinstance(value, Token):
        return next(replacements)
    if isinstance(value, Node):
        return Node(value.kind, tuple((name, map_tokens(v, replacements)) for name, v in value.slots))
    return tuple(map_tokens(item, replacements) for item in value)


def has_modifier(node: Node, keyword: str) -> bool:
    return any(t.text == keyword for t in iter_tokens(node.get("modifiers")))


def _freeze(value):
    if isinstance(value, list):
        return tuple(value)
    return value


def _map_edge_token(value: Slot, fn, from_end: bool):
    """Apply ``fn`` to the first (or last) token under ``value``."""
    if value is None:
        return None, False
    if isinstance(value, Token):
        return fn(value), True
    if isinstance(value, Node):
        items = list(value.slots)
        order = range(len(items) - 1, -1, -1) if from_end else range(len(items))
        for i in order:
            name, slot = items[i]
            new_slot, done = _map_edge_token(slot, fn, from_end)
            if done:
                items[i] = (name, new_slot)
                return Node(value.kind, tuple(items)), True
        return value, False
    items = list(value)
    order = range(len(items) - 1, -1, -1) if from_end else range(len(items))
    for i in order:
        new_item, done = _map_edge_token(items[i], fn, from_end)
        if done:
            items[i] = new_item
            return tuple(items), True
    return value, False


# --- Name and type parsing ---

PREDEFINED_TYPES = frozenset(
    {
        "bool",
        "byte",
        "sbyte",
        "char",
        "decimal",
        "double",
        "float",
        "int",
        "uint",
        "long",
        "ulong",
        "short",
        "ushort",
        "object",
        "string",
        "void",
        "nint",
        "nuint",
        "dynamic",
    }
)

_NAME_TOKEN = re.compile(r"\s*(::|[A-Za-z_@][A-Za-z0-9_`]*|[.<>,\[\]?])")


def _tokenize_name(text: str) -> list[str]:
    pos = 0
    result = []
    text = text.rstrip()
    while pos < len(text):
        m = _NAME_TOKEN.match(text, pos)
        if not m:
            raise ValueError(f"Cannot parse type name {text!r} at offset {pos}")
        result.append(m.group(1))
        pos = m.end()
    return result


class _NameParser:
    def __init__(self, text: str):
        self.text = text
        self.toks = _tokenize_name(text)
        self.pos = 0

    def peek(self) -> str | None:
        return self.toks[self.pos] if self.pos < len(self.toks) else None

    def take(self, expected: str | None = None) -> str:
        tok = self.peek()
        if tok is None or (expected is not None and tok != expected):
            raise ValueError(f"Cannot parse type name {self.text!r}: expected {expected or 'a name'}")
        self.pos += 1
        return tok

    def parse(self) -> Node:
        result = self.type()
        if self.peek() is not None:
            raise ValueError(f"Unexpected {self.peek()!r} in type name {self.text!r}")
        return result

    def type(self) -> Node:
        first = self.peek()
        if first in PREDEFINED_TYPES and self._next_is_not_qualifier():
            self.take()
            result = make(SyntaxKind.PREDEFINED_TYPE, keyword=Token(first))
        else:
            result = self.name()

        while self.peek() in ("[", "?"):
            if self.take() == "?":
                result = make(SyntaxKind.NULLABLE_TYPE, element_type=result, question=Token("?"))
                continue
            rank = [Token("[")]
            while self.peek() == ",":
                rank.append(Token(self.take()))
            rank.append(Token(self.take("]")))
            if result.kind == SyntaxKind.ARRAY_TYPE:
                result = result.with_(rank_specifiers=result["rank_specifiers"] + tuple(rank))
            else:
                result = make(SyntaxKind.ARRAY_TYPE, element_type=result, rank_specifiers=tuple(rank))
        return result

    def name(self) -> Node:
        first = self.take()
        if self.peek() == "::":
            self.take()
            left = make(
                SyntaxKind.ALIAS_QUALIFIED_NAME,
                alias=Token(first),
                colon_colon=Token("::"),
                name=self.simple_name(self.take()),
            )
        else:
            left = self.simple_name(first)

        while self.peek() == ".":
            self.take()
            left = make(
                SyntaxKind.QUALIFIED_NAME,
                left=left,
                dot=Token("."),
                right=self.simple_name(self.take()),
            )
        return left

    def simple_name(self, identifier: str) -> Node:
        if self.peek() != "<":
            return make(SyntaxKind.IDENTIFIER_NAME, identifier=Token(identifier))
        self.take("<")
        args = [self.type()]
        while self.peek() == ",":
            self.take()
            args.append(self.type())
        self.take(">")
        return make(
            SyntaxKind.GENERIC_NAME,
            identifier=Token(identifier),
            type_argument_list=make(
                SyntaxKind.TYPE_ARGUMENT_LIST,
                less_than=Token("<"),
                arguments=separated(args),
                greater_than=Token(">"),
            ),
        )

    def _next_is_not_qualifier(self) -> bool:
        nxt = self.toks[self.pos + 1] if self.pos + 1 < len(self.toks) else None
        return nxt not in (".", "::")


def parse_name(text: str) -> Node:
    """Parse a type display string (``global::A.B<int>[]``) into a type node."""
    return _NameParser(text).parse()
