"""Whitespace normalization — lay a declaration tree out in one fixed form.

Every existing trivia is replaced. Declarations, members and statements go
on their own lines, braces of namespaces, types, blocks and accessor lists
sit on lines of their own, and tokens within a line are separated by single
spaces except around punctuation that binds tightly.
"""

from __future__ import annotations

from apiskel.syntax.nodes import (
    SLOTS,
    TYPE_DECLARATION_KINDS,
    Node,
    SyntaxKind,
    Token,
    iter_tokens,
    map_tokens,
)

NO_SPACE_AFTER = frozenset({"(", "[", "<", ".", "::"})
NO_SPACE_BEFORE = frozenset({")", "]", ">", ",", ";", ".", "::", "(", "<", "[", "?"})

TYPE_HEADER = ("modifiers", "keyword", "identifier", "type_parameter_list", "base_list", "constraint_clauses")
METHOD_HEADER = (
    "modifiers",
    "return_type",
    "identifier",
    "type_parameter_list",
    "parameter_list",
    "constraint_clauses",
)
PROPERTY_HEADER = ("modifiers", "type", "identifier", "this_keyword", "parameter_list")


def space_between(left: Token, right: Token | None) -> str:
    if right is None:
        return ""
    if left.text in NO_SPACE_AFTER or right.text in NO_SPACE_BEFORE:
        return ""
    return " "


def normalize_whitespace(node: Node, indent: str = "    ", newline: str = "\n", depth: int = 0) -> Node:
    """Return ``node`` with all trivia replaced by the canonical layout."""
    return _Formatter(indent, newline).format(node, depth)


class _Formatter:
    def __init__(self, indent: str, newline: str):
        self.indent = indent
        self.newline = newline

    def format(self, node: Node, depth: int) -> Node:
        kind = node.kind
        if kind == SyntaxKind.NAMESPACE_DECLARATION:
            return self._container(node, ("namespace_keyword", "name"), depth)
        if kind in TYPE_DECLARATION_KINDS:
            return self._container(node, TYPE_HEADER, depth)
        if kind == SyntaxKind.ENUM_DECLARATION:
            return self._enum(node, depth)
        if kind in (SyntaxKind.METHOD_DECLARATION, SyntaxKind.CONSTRUCTOR_DECLARATION):
            return self._method(node, depth)
        if kind in (SyntaxKind.PROPERTY_DECLARATION, SyntaxKind.INDEXER_DECLARATION):
            return self._property(node, depth)
        return self._attributed_line(node, depth)

    # --- layouts ---

    def _container(self, node: Node, header: tuple[str, ...], depth: int) -> Node:
        node = self._attributes(node, depth)
        node = self._line(node, header, depth)
        members = tuple(self.format(m, depth + 1) for m in node["members"])
        return node.with_(
            open_brace=self._brace(node["open_brace"], depth),
            members=members,
            close_brace=self._brace(node["close_brace"], depth),
        )

    def _enum(self, node: Node, depth: int) -> Node:
        node = self._attributes(node, depth)
        node = self._line(node, ("modifiers", "keyword", "identifier", "base_list"), depth)

        items = list(node["members"])
        laid_out = []
        for i, item in enumerate(items):
            if isinstance(item, Token):
                laid_out.append(Token(item.text, "", self.newline))
                continue
            end = self.newline if i == len(items) - 1 else ""
            laid_out.append(self._inline(item, self._indent(depth + 1), end))

        return node.with_(
            open_brace=self._brace(node["open_brace"], depth),
            members=tuple(laid_out),
            close_brace=self._brace(node["close_brace"], depth),
        )

    def _method(self, node: Node, depth: int) -> Node:
        node = self._attributes(node, depth)
        if node["body"] is None:
            # Semicolon or expression-bodied forms stay on one line.
            return self._line(node, _remaining(node, ("attribute_lists",)), depth)
        node = self._line(node, METHOD_HEADER, depth)
        return node.with_(body=self._block(node["body"], depth))

    def _property(self, node: Node, depth: int) -> Node:
        node = self._attributes(node, depth)
        node = self._line(node, PROPERTY_HEADER, depth)
        accessor_list = node["accessor_list"]
        if accessor_list is None:
            return node

        accessors = tuple(self._accessor(a, depth + 1) for a in accessor_list["accessors"])
        return node.with_(
            accessor_list=accessor_list.with_(
                open_brace=self._brace(accessor_list["open_brace"], depth),
                accessors=accessors,
                close_brace=self._brace(accessor_list["close_brace"], depth),
            )
        )

    def _accessor(self, node: Node, depth: int) -> Node:
        node = self._attributes(node, depth)
        if node["body"] is None:
            return self._line(node, ("modifiers", "keyword", "semicolon"), depth)
        node = self._line(node, ("modifiers", "keyword"), depth)
        return node.with_(body=self._block(node["body"], depth))

    def _block(self, block: Node, depth: int) -> Node:
        statements = tuple(
            self._inline(s, self._indent(depth + 1), self.newline) for s in block["statements"]
        )
        return block.with_(
            open_brace=self._brace(block["open_brace"], depth),
            statements=statements,
            close_brace=self._brace(block["close_brace"], depth),
        )

    def _attributed_line(self, node: Node, depth: int) -> Node:
        node = self._attributes(node, depth)
        return self._line(node, _remaining(node, ("attribute_lists",)), depth)

    # --- helpers ---

    def _attributes(self, node: Node, depth: int) -> Node:
        if "attribute_lists" not in SLOTS[node.kind] or not node["attribute_lists"]:
            return node
        lists = tuple(
            self._inline(a, self._indent(depth), self.newline) for a in node["attribute_lists"]
        )
        return node.with_(attribute_lists=lists)

    def _line(self, node: Node, names: tuple[str, ...], depth: int) -> Node:
        """Lay the given slots out as one indented line."""
        present = [n for n in SLOTS[node.kind] if n in names]
        toks = [t for n in present for t in iter_tokens(node[n])]
        spaced = self._spaced(toks, self._indent(depth), self.newline)
        it = iter(spaced)
        return node.with_(**{n: map_tokens(node[n], it) for n in present})

    def _inline(self, node: Node, leading: str, trailing: str) -> Node:
        spaced = self._spaced(list(node.tokens()), leading, trailing)
        return map_tokens(node, iter(spaced))

    def _spaced(self, toks: list[Token], leading: str, trailing: str) -> list[Token]:
        result = []
        for i, tok in enumerate(toks):
            nxt = toks[i + 1] if i + 1 < len(toks) else None
            result.append(
                Token(
                    tok.text,
                    leading if i == 0 else "",
                    trailing if nxt is None else space_between(tok, nxt),
                )
            )
        return result

    def _brace(self, tok: Token, depth: int) -> Token:
        return Token(tok.text, self._indent(depth), self.newline)

    def _indent(self, depth: int) -> str:
        return self.indent * depth


def _remaining(node: Node, excluded: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(n for n in SLOTS[node.kind] if n not in excluded)
