"""Canonicalization rewriter — reduce a draft declaration tree to canonical form.

The rewrite is a post-order transform dispatched on ``SyntaxKind`` through
``RULES``. A rule receives the rewriter and a node and returns the new node,
or ``None`` to drop it from its parent. Kinds without a rule are rebuilt from
their rewritten children.

Canonical form:
- bodies replaced by stand-ins: ``{ throw null; }`` for anything that returns
  a value, ``{ }`` otherwise; abstract and interface members keep no body
- the implicit ``System.Object`` base type removed
- the ``global::`` root qualifier stripped from every name
- members on single lines, with exactly one line break closing each type
  header

Rewriting a canonical tree returns an identical tree.
"""

from __future__ import annotations

from collections.abc import Callable

from apiskel.errors import RewriteError
from apiskel.syntax.nodes import (
    TYPE_DECLARATION_KINDS,
    Node,
    SyntaxKind,
    Token,
    elements,
    has_modifier,
    make,
)

SPACE = " "
GLOBAL_PREFIX = "global::"
OBJECT_NAMES = frozenset({"global::System.Object", "System.Object"})
VOID_NAMES = frozenset({"void", "System.Void", "global::System.Void"})

Rule = Callable[["CanonicalRewriter", Node], "Node | None"]


class CanonicalRewriter:
    """Applies the canonicalization rules to a declaration tree."""

    def __init__(self, newline: str = "\n"):
        self.newline = newline
        self._containers: list[SyntaxKind] = []
        self._bodiless_accessors: list[bool] = []

    def rewrite(self, node: Node) -> Node | None:
        self._containers = []
        self._bodiless_accessors = []
        return self.visit(node)

    def __call__(self, node: Node) -> Node | None:
        return self.rewrite(node)

    # --- dispatch ---

    def visit(self, node: Node) -> Node | None:
        rule = RULES.get(node.kind, CanonicalRewriter.visit_children)
        return rule(self, node)

    def visit_children(self, node: Node) -> Node:
        changed = {}
        for name, value in node.slots:
            if isinstance(value, Node):
                new = self.visit(value)
                if new is not value:
                    changed[name] = new
            elif isinstance(value, tuple):
                items = []
                for item in value:
                    if isinstance(item, Node):
                        item = self.visit(item)
                        if item is None:
                            continue
                    items.append(item)
                new_items = tuple(items)
                if new_items != value:
                    changed[name] = new_items
        return node.with_(**changed) if changed else node

    # --- context ---

    @property
    def in_interface(self) -> bool:
        return bool(self._containers) and self._containers[-1] == SyntaxKind.INTERFACE_DECLARATION

    @property
    def accessors_bodiless(self) -> bool:
        return bool(self._bodiless_accessors) and self._bodiless_accessors[-1]

    def is_bodiless(self, member: Node) -> bool:
        """Abstract members, and members declared directly in an interface."""
        return has_modifier(member, "abstract") or self.in_interface

    # --- body stand-ins ---

    def empty_body(self, newline: bool = True) -> Node:
        return make(
            SyntaxKind.BLOCK,
            open_brace=Token("{", trailing=SPACE),
            statements=(),
            close_brace=Token("}", trailing=self.newline if newline else SPACE),
        )

    def throw_null_body(self, newline: bool = True) -> Node:
        statement = make(
            SyntaxKind.STATEMENT,
            tokens=(Token("throw", trailing=SPACE), Token("null"), Token(";", trailing=SPACE)),
        )
        return make(
            SyntaxKind.BLOCK,
            open_brace=Token("{", trailing=SPACE),
            statements=(statement,),
            close_brace=Token("}", trailing=self.newline if newline else SPACE),
        )


# --- rules ---


def rewrite_type_declaration(rw: CanonicalRewriter, node: Node) -> Node:
    # Children first: the base list may disappear, which decides where the
    # header's line break goes.
    node = node.with_trailing_trivia(rw.newline)
    rw._containers.append(node.kind)
    try:
        node = rw.visit_children(node)
    finally:
        rw._containers.pop()

    if node["base_list"] is None:
        type_parameters = node["type_parameter_list"]
        if type_parameters is None:
            node = node.with_(identifier=_required(node, "identifier").with_trailing_trivia(rw.newline))
        elif not node["constraint_clauses"]:
            node = node.with_(type_parameter_list=type_parameters.with_trailing_trivia(rw.newline))
    return node


def rewrite_enum_declaration(rw: CanonicalRewriter, node: Node) -> Node:
    node = node.with_trailing_trivia(rw.newline)
    rw._containers.append(node.kind)
    try:
        return rw.visit_children(node)
    finally:
        rw._containers.pop()


def rewrite_base_list(rw: CanonicalRewriter, node: Node) -> Node | None:
    items = list(node["types"] or ())
    for i, item in enumerate(items):
        if not isinstance(item, Node):
            continue
        if item.kind != SyntaxKind.SIMPLE_BASE_TYPE or item["type"] is None:
            raise RewriteError(f"Unexpected {item.kind.value} in base list: {node}")
        if str(item["type"]) not in OBJECT_NAMES:
            continue

        if i + 1 < len(items):
            # Take the following separator with it.
            del items[i : i + 2]
        elif i > 0:
            # Last entry: take the preceding separator and hand the entry's
            # trailing trivia to the new last entry.
            trailing = item.last_token.trailing
            del items[i - 1 : i + 1]
            items[-1] = items[-1].with_trailing_trivia(trailing)
        else:
            del items[i]
        node = node.with_(types=tuple(items))
        break

    if not elements(node["types"]):
        return None
    return rw.visit_children(node)


def rewrite_qualified_name(rw: CanonicalRewriter, node: Node) -> Node:
    if str(node).startswith(GLOBAL_PREFIX):
        node = _strip_global(node)
    return rw.visit_children(node)


def rewrite_alias_qualified_name(rw: CanonicalRewriter, node: Node) -> Node:
    if not _is_global_alias(node):
        return rw.visit_children(node)
    return rw.visit(_strip_global(node))


def rewrite_constructor(rw: CanonicalRewriter, node: Node) -> Node:
    parameter_list = _required(node, "parameter_list")
    node = node.with_(
        body=rw.empty_body(),
        semicolon=None,
        parameter_list=parameter_list.with_trailing_trivia(SPACE),
    )
    return rw.visit_children(node)


def rewrite_method(rw: CanonicalRewriter, node: Node) -> Node:
    # Subtree first so type names are already unqualified.
    node = rw.visit_children(node)
    if rw.is_bodiless(node):
        return node

    return_type = node["return_type"]
    if return_type is None or str(return_type) in VOID_NAMES:
        body = rw.empty_body()
    else:
        body = rw.throw_null_body()
    node = node.with_(expression_body=None, semicolon=None, body=body)

    constraints = node["constraint_clauses"]
    if constraints:
        last = constraints[-1].with_trailing_trivia(SPACE)
        return node.with_(constraint_clauses=constraints[:-1] + (last,))
    return node.with_(parameter_list=_required(node, "parameter_list").with_trailing_trivia(SPACE))


def rewrite_property(rw: CanonicalRewriter, node: Node) -> Node:
    node = node.with_(
        identifier=_required(node, "identifier").with_trailing_trivia(SPACE),
        accessor_list=_collapse_accessor_list(rw, _required(node, "accessor_list")),
    )
    return _visit_accessor_owner(rw, node)


def rewrite_indexer(rw: CanonicalRewriter, node: Node) -> Node:
    parameter_list = _required(node, "parameter_list")
    close = parameter_list["close_bracket"].with_trailing_trivia(SPACE)
    node = node.with_(
        parameter_list=parameter_list.with_(close_bracket=close),
        accessor_list=_collapse_accessor_list(rw, _required(node, "accessor_list")),
    )
    return _visit_accessor_owner(rw, node)


def rewrite_accessor(rw: CanonicalRewriter, node: Node) -> Node:
    keyword = _required(node, "keyword").with_leading_trivia("")
    if rw.accessors_bodiless:
        return node.with_(
            keyword=keyword.with_trailing_trivia(""),
            body=None,
            semicolon=Token(";", trailing=SPACE),
        )

    if node.kind == SyntaxKind.GET_ACCESSOR_DECLARATION:
        body = rw.throw_null_body(newline=False)
    else:
        body = rw.empty_body(newline=False)
    return node.with_(keyword=keyword.with_trailing_trivia(SPACE), semicolon=None, body=body)


def rewrite_type_argument_list(rw: CanonicalRewriter, node: Node) -> Node:
    return rw.visit_children(node)


RULES: dict[SyntaxKind, Rule] = {
    **{kind: rewrite_type_declaration for kind in TYPE_DECLARATION_KINDS},
    SyntaxKind.ENUM_DECLARATION: rewrite_enum_declaration,
    SyntaxKind.BASE_LIST: rewrite_base_list,
    SyntaxKind.QUALIFIED_NAME: rewrite_qualified_name,
    SyntaxKind.ALIAS_QUALIFIED_NAME: rewrite_alias_qualified_name,
    SyntaxKind.CONSTRUCTOR_DECLARATION: rewrite_constructor,
    SyntaxKind.METHOD_DECLARATION: rewrite_method,
    SyntaxKind.PROPERTY_DECLARATION: rewrite_property,
    SyntaxKind.INDEXER_DECLARATION: rewrite_indexer,
    SyntaxKind.GET_ACCESSOR_DECLARATION: rewrite_accessor,
    SyntaxKind.SET_ACCESSOR_DECLARATION: rewrite_accessor,
    SyntaxKind.TYPE_ARGUMENT_LIST: rewrite_type_argument_list,
}


# --- helpers ---


def _collapse_accessor_list(rw: CanonicalRewriter, accessor_list: Node) -> Node:
    return accessor_list.with_(
        open_brace=accessor_list["open_brace"].with_leading_trivia("").with_trailing_trivia(SPACE),
        close_brace=accessor_list["close_brace"].with_leading_trivia("").with_trailing_trivia(rw.newline),
    )


def _visit_accessor_owner(rw: CanonicalRewriter, node: Node) -> Node:
    rw._bodiless_accessors.append(rw.is_bodiless(node))
    try:
        return rw.visit_children(node)
    finally:
        rw._bodiless_accessors.pop()


def _is_global_alias(node: Node) -> bool:
    return node["alias"].text + node["colon_colon"].text == GLOBAL_PREFIX


def _strip_global(node: Node) -> Node:
    """Drop ``global::`` from the leftmost segment, keeping every other token."""
    if node.kind == SyntaxKind.QUALIFIED_NAME:
        return node.with_(left=_strip_global(node["left"]))
    if node.kind == SyntaxKind.ALIAS_QUALIFIED_NAME and _is_global_alias(node):
        return node["name"].with_leading_trivia(node.first_token.leading)
    return node


def _required(node: Node, slot: str):
    value = node[slot]
    if value is None:
        raise RewriteError(f"{node.kind.value} has no {slot}: {node}")
    return value


def rewrite(node: Node, newline: str = "\n") -> Node | None:
    """Rewrite ``node`` into canonical form."""
    return CanonicalRewriter(newline).rewrite(node)
