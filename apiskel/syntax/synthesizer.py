"""Declaration synthesizer — draft a verbose declaration tree for a type.

The draft is deliberately literal: every type reference is written with
the ``global::`` root qualifier, classes always spell out their base class
(``global::System.Object`` included), all modifiers and attributes are
attached, and members carry placeholder bodies. No trivia is produced;
``format.normalize_whitespace`` lays the tree out and the rewriter reduces
it to canonical form.
"""

from __future__ import annotations

from apiskel.symbols.models import (
    Accessibility,
    AttributeSymbol,
    EnumMemberSymbol,
    EventSymbol,
    FieldSymbol,
    MethodSymbol,
    ParameterSymbol,
    PropertySymbol,
    TypeKind,
    TypeParameterSymbol,
    TypeSymbol,
)
from apiskel.syntax.nodes import (
    NAME_KINDS,
    Node,
    SyntaxKind,
    Token,
    make,
    parse_name,
    separated,
)

GLOBAL_PREFIX = "global::"
OBJECT_TYPE = "System.Object"

# Types the C# compiler spells with a keyword.
KEYWORD_TYPES = {
    "System.Boolean": "bool",
    "System.Byte": "byte",
    "System.SByte": "sbyte",
    "System.Char": "char",
    "System.Decimal": "decimal",
    "System.Double": "double",
    "System.Single": "float",
    "System.Int32": "int",
    "System.UInt32": "uint",
    "System.Int64": "long",
    "System.UInt64": "ulong",
    "System.Int16": "short",
    "System.UInt16": "ushort",
    "System.Object": "object",
    "System.String": "string",
    "System.Void": "void",
}

KEYWORD_CONSTRAINTS = {"class", "struct", "unmanaged", "notnull", "new()"}

TYPE_KEYWORDS = {
    TypeKind.CLASS: (SyntaxKind.CLASS_DECLARATION, "class"),
    TypeKind.STRUCT: (SyntaxKind.STRUCT_DECLARATION, "struct"),
    TypeKind.INTERFACE: (SyntaxKind.INTERFACE_DECLARATION, "interface"),
    TypeKind.ENUM: (SyntaxKind.ENUM_DECLARATION, "enum"),
}


def qualify_type_name(
    type_name: str, type_parameters: frozenset[str] = frozenset(), keywords: bool = True
) -> str:
    """Render a symbol type reference the way the draft spells it.

    ``System.Collections.Generic.List<System.String>`` becomes
    ``global::System.Collections.Generic.List<string>``; type parameters
    stay bare. With ``keywords=False`` the top-level name is never turned
    into a keyword, which is how base types are written.
    """
    return _qualify(parse_name(type_name), type_parameters, keywords)


def _qualify(node: Node, type_parameters: frozenset[str], keywords: bool = True) -> str:
    if node.kind == SyntaxKind.PREDEFINED_TYPE:
        return node["keyword"].text
    if node.kind == SyntaxKind.ARRAY_TYPE:
        rank = "".join(t.text for t in node["rank_specifiers"])
        return _qualify(node["element_type"], type_parameters) + rank
    if node.kind == SyntaxKind.NULLABLE_TYPE:
        return _qualify(node["element_type"], type_parameters) + "?"
    if node.kind not in NAME_KINDS:
        raise ValueError(f"Unexpected {node.kind.value} in type name {node}")

    segments = _name_segments(node)
    has_arguments = any(args for _, args in segments)
    dotted = ".".join(ident for ident, _ in segments)

    if keywords and not has_arguments and dotted in KEYWORD_TYPES:
        return KEYWORD_TYPES[dotted]
    if len(segments) == 1 and not has_arguments and dotted in type_parameters:
        return dotted

    parts = []
    for ident, args in segments:
        if args:
            ident += "<" + ", ".join(_qualify(a, type_parameters) for a in args) + ">"
        parts.append(ident)
    return GLOBAL_PREFIX + ".".join(parts)


def _name_segments(node: Node) -> list[tuple[str, list[Node]]]:
    if node.kind == SyntaxKind.QUALIFIED_NAME:
        return _name_segments(node["left"]) + _name_segments(node["right"])
    if node.kind == SyntaxKind.ALIAS_QUALIFIED_NAME:
        # Already rooted; drop the alias, it is re-added uniformly.
        return _name_segments(node["name"])
    if node.kind == SyntaxKind.GENERIC_NAME:
        args = [n for n in node["type_argument_list"]["arguments"] if isinstance(n, Node)]
        return [(node["identifier"].text, args)]
    return [(node["identifier"].text, [])]


def type_syntax(
    type_name: str, type_parameters: frozenset[str] = frozenset(), keywords: bool = True
) -> Node:
    return parse_name(qualify_type_name(type_name, type_parameters, keywords))


def namespace_declaration(name: str, members: list[Node]) -> Node:
    return make(
        SyntaxKind.NAMESPACE_DECLARATION,
        namespace_keyword=Token("namespace"),
        name=parse_name(name),
        open_brace=Token("{"),
        members=tuple(members),
        close_brace=Token("}"),
    )


class DeclarationSynthesizer:
    """Builds draft declaration trees from type symbols."""

    def synthesize(self, type_symbol: TypeSymbol) -> Node:
        return self._type(type_symbol, frozenset())

    def __call__(self, type_symbol: TypeSymbol) -> Node:
        return self.synthesize(type_symbol)

    # --- types ---

    def _type(self, t: TypeSymbol, outer_type_parameters: frozenset[str]) -> Node:
        if t.kind == TypeKind.ENUM:
            return self._enum(t)

        kind, keyword = TYPE_KEYWORDS[t.kind]
        scope = outer_type_parameters | {tp.name for tp in t.type_parameters}
        in_interface = t.kind == TypeKind.INTERFACE

        members = [
            self._member(m, t, scope, in_interface)
            for m in t.members
            if m.accessibility.is_visible_outside_module
        ]
        members.extend(
            self._type(nested, scope)
            for nested in t.nested_types
            if nested.is_visible_outside_module
        )

        return make(
            kind,
            attribute_lists=self._attribute_lists(t.attributes, scope),
            modifiers=_modifiers(
                t.accessibility,
                static=t.is_static,
                abstract=t.is_abstract and t.kind == TypeKind.CLASS and not t.is_static,
                sealed=t.is_sealed and t.kind == TypeKind.CLASS and not t.is_static,
            ),
            keyword=Token(keyword),
            identifier=Token(t.name),
            type_parameter_list=_type_parameter_list(t.type_parameters),
            base_list=self._base_list(t, scope),
            constraint_clauses=_constraint_clauses(t.type_parameters, scope),
            open_brace=Token("{"),
            members=tuple(members),
            close_brace=Token("}"),
        )

    def _enum(self, t: TypeSymbol) -> Node:
        base_list = None
        underlying = t.enum_underlying_type
        if underlying and underlying != "System.Int32":
            base_list = _base_list([type_syntax(underlying)])

        return make(
            SyntaxKind.ENUM_DECLARATION,
            attribute_lists=self._attribute_lists(t.attributes, frozenset()),
            modifiers=_modifiers(t.accessibility),
            keyword=Token("enum"),
            identifier=Token(t.name),
            base_list=base_list,
            open_brace=Token("{"),
            members=separated([_enum_member(m) for m in t.enum_members]),
            close_brace=Token("}"),
        )

    def _base_list(self, t: TypeSymbol, scope: frozenset[str]) -> Node | None:
        types = []
        if t.kind == TypeKind.CLASS:
            types.append(type_syntax(t.base_type or OBJECT_TYPE, scope, keywords=False))
        types.extend(type_syntax(i, scope, keywords=False) for i in t.interfaces)
        return _base_list(types) if types else None

    # --- members ---

    def _member(self, m, owner: TypeSymbol, scope: frozenset[str], in_interface: bool) -> Node:
        if isinstance(m, MethodSymbol):
            if m.is_constructor:
                return self._constructor(m, owner, scope)
            return self._method(m, scope, in_interface)
        if isinstance(m, PropertySymbol):
            return self._property(m, scope, in_interface)
        if isinstance(m, FieldSymbol):
            return self._field(m, scope)
        if isinstance(m, EventSymbol):
            return self._event(m, scope, in_interface)
        raise TypeError(f"Unsupported member symbol: {type(m).__name__}")

    def _constructor(self, m: MethodSymbol, owner: TypeSymbol, scope: frozenset[str]) -> Node:
        return make(
            SyntaxKind.CONSTRUCTOR_DECLARATION,
            attribute_lists=self._attribute_lists(m.attributes, scope),
            modifiers=_modifiers(m.accessibility),
            identifier=Token(owner.name),
            parameter_list=self._parameter_list(m.parameters, scope),
            body=_empty_block(),
        )

    def _method(self, m: MethodSymbol, outer_scope: frozenset[str], in_interface: bool) -> Node:
        scope = outer_scope | {tp.name for tp in m.type_parameters}
        bodiless = m.is_abstract or in_interface
        return make(
            SyntaxKind.METHOD_DECLARATION,
            attribute_lists=self._attribute_lists(m.attributes, scope),
            modifiers=()
            if in_interface
            else _modifiers(
                m.accessibility,
                static=m.is_static,
                abstract=m.is_abstract,
                virtual=m.is_virtual and not m.is_abstract and not m.is_override,
                sealed=m.is_sealed and m.is_override,
                override=m.is_override,
            ),
            return_type=type_syntax(m.return_type, scope),
            identifier=Token(m.name),
            type_parameter_list=_type_parameter_list(m.type_parameters),
            parameter_list=self._parameter_list(m.parameters, scope),
            constraint_clauses=_constraint_clauses(m.type_parameters, scope),
            body=None if bodiless else _empty_block(),
            semicolon=Token(";") if bodiless else None,
        )

    def _property(self, p: PropertySymbol, scope: frozenset[str], in_interface: bool) -> Node:
        accessors = []
        if p.has_getter:
            accessors.append(_accessor(SyntaxKind.GET_ACCESSOR_DECLARATION, "get"))
        if p.has_setter:
            accessors.append(_accessor(SyntaxKind.SET_ACCESSOR_DECLARATION, "set"))
        accessor_list = make(
            SyntaxKind.ACCESSOR_LIST,
            open_brace=Token("{"),
            accessors=tuple(accessors),
            close_brace=Token("}"),
        )
        modifiers = (
            ()
            if in_interface
            else _modifiers(
                p.accessibility,
                static=p.is_static,
                abstract=p.is_abstract,
                virtual=p.is_virtual and not p.is_abstract and not p.is_override,
                override=p.is_override,
            )
        )

        if p.is_indexer:
            return make(
                SyntaxKind.INDEXER_DECLARATION,
                attribute_lists=self._attribute_lists(p.attributes, scope),
                modifiers=modifiers,
                type=type_syntax(p.type_name, scope),
                this_keyword=Token("this"),
                parameter_list=self._parameter_list(p.parameters, scope, bracketed=True),
                accessor_list=accessor_list,
            )
        return make(
            SyntaxKind.PROPERTY_DECLARATION,
            attribute_lists=self._attribute_lists(p.attributes, scope),
            modifiers=modifiers,
            type=type_syntax(p.type_name, scope),
            identifier=Token(p.name),
            accessor_list=accessor_list,
        )

    def _field(self, f: FieldSymbol, scope: frozenset[str]) -> Node:
        return make(
            SyntaxKind.FIELD_DECLARATION,
            attribute_lists=self._attribute_lists(f.attributes, scope),
            modifiers=_modifiers(
                f.accessibility,
                const=f.is_const,
                static=f.is_static and not f.is_const,
                readonly=f.is_readonly and not f.is_const,
            ),
            type=type_syntax(f.type_name, scope),
            identifier=Token(f.name),
            equals_value=_equals_value(f.constant_value) if f.is_const else None,
            semicolon=Token(";"),
        )

    def _event(self, e: EventSymbol, scope: frozenset[str], in_interface: bool) -> Node:
        return make(
            SyntaxKind.EVENT_FIELD_DECLARATION,
            attribute_lists=self._attribute_lists(e.attributes, scope),
            modifiers=() if in_interface else _modifiers(e.accessibility, static=e.is_static),
            event_keyword=Token("event"),
            type=type_syntax(e.type_name, scope),
            identifier=Token(e.name),
            semicolon=Token(";"),
        )

    # --- pieces ---

    def _parameter_list(
        self, params: list[ParameterSymbol], scope: frozenset[str], bracketed: bool = False
    ) -> Node:
        nodes = [self._parameter(p, scope) for p in params]
        if bracketed:
            return make(
                SyntaxKind.BRACKETED_PARAMETER_LIST,
                open_bracket=Token("["),
                parameters=separated(nodes),
                close_bracket=Token("]"),
            )
        return make(
            SyntaxKind.PARAMETER_LIST,
            open_paren=Token("("),
            parameters=separated(nodes),
            close_paren=Token(")"),
        )

    def _parameter(self, p: ParameterSymbol, scope: frozenset[str]) -> Node:
        return make(
            SyntaxKind.PARAMETER,
            modifiers=(Token(p.modifier),) if p.modifier else (),
            type=type_syntax(p.type_name, scope),
            identifier=Token(p.name),
            default=_equals_value(p.default_value) if p.default_value is not None else None,
        )

    def _attribute_lists(self, attributes: list[AttributeSymbol], scope: frozenset[str]) -> tuple:
        lists = []
        for a in attributes:
            argument_list = None
            if a.arguments:
                argument_list = make(
                    SyntaxKind.ATTRIBUTE_ARGUMENT_LIST,
                    open_paren=Token("("),
                    arguments=separated([Token(arg) for arg in a.arguments]),
                    close_paren=Token(")"),
                )
            attribute = make(
                SyntaxKind.ATTRIBUTE,
                name=type_syntax(a.type_name, scope),
                argument_list=argument_list,
            )
            lists.append(
                make(
                    SyntaxKind.ATTRIBUTE_LIST,
                    open_bracket=Token("["),
                    attributes=(attribute,),
                    close_bracket=Token("]"),
                )
            )
        return tuple(lists)


def _modifiers(
    accessibility: Accessibility,
    *,
    const: bool = False,
    static: bool = False,
    abstract: bool = False,
    virtual: bool = False,
    sealed: bool = False,
    override: bool = False,
    readonly: bool = False,
) -> tuple[Token, ...]:
    words = accessibility.value.split()
    flags = [
        ("const", const),
        ("static", static),
        ("abstract", abstract),
        ("virtual", virtual),
        ("sealed", sealed),
        ("override", override),
        ("readonly", readonly),
    ]
    words.extend(word for word, on in flags if on)
    return tuple(Token(w) for w in words)


def _type_parameter_list(type_parameters: list[TypeParameterSymbol]) -> Node | None:
    if not type_parameters:
        return None
    return make(
        SyntaxKind.TYPE_PARAMETER_LIST,
        less_than=Token("<"),
        parameters=separated(
            [make(SyntaxKind.TYPE_PARAMETER, identifier=Token(tp.name)) for tp in type_parameters]
        ),
        greater_than=Token(">"),
    )


def _constraint_clauses(type_parameters: list[TypeParameterSymbol], scope: frozenset[str]) -> tuple:
    clauses = []
    for tp in type_parameters:
        if not tp.constraints:
            continue
        constraints = []
        for c in tp.constraints:
            if c in KEYWORD_CONSTRAINTS:
                toks = (Token("new"), Token("("), Token(")")) if c == "new()" else (Token(c),)
                constraints.append(make(SyntaxKind.KEYWORD_CONSTRAINT, tokens=toks))
            else:
                constraints.append(make(SyntaxKind.TYPE_CONSTRAINT, type=type_syntax(c, scope)))
        clauses.append(
            make(
                SyntaxKind.TYPE_PARAMETER_CONSTRAINT_CLAUSE,
                where_keyword=Token("where"),
                name=make(SyntaxKind.IDENTIFIER_NAME, identifier=Token(tp.name)),
                colon=Token(":"),
                constraints=separated(constraints),
            )
        )
    return tuple(clauses)


def _base_list(types: list[Node]) -> Node:
    return make(
        SyntaxKind.BASE_LIST,
        colon=Token(":"),
        types=separated([make(SyntaxKind.SIMPLE_BASE_TYPE, type=t) for t in types]),
    )


def _enum_member(m: EnumMemberSymbol) -> Node:
    return make(
        SyntaxKind.ENUM_MEMBER_DECLARATION,
        identifier=Token(m.name),
        equals_value=_equals_value(m.value) if m.value is not None else None,
    )


def _equals_value(value: str) -> Node:
    return make(SyntaxKind.EQUALS_VALUE_CLAUSE, equals=Token("="), value=Token(value))


def _accessor(kind: SyntaxKind, keyword: str) -> Node:
    return make(kind, keyword=Token(keyword), semicolon=Token(";"))


def _empty_block() -> Node:
    return make(SyntaxKind.BLOCK, open_brace=Token("{"), statements=(), close_brace=Token("}"))
