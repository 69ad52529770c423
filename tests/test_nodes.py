"""Tests for the declaration tree and type-name parsing."""

import pytest

from apiskel.syntax.nodes import SyntaxKind, Token, elements, make, parse_name, separated


def test_parse_identifier_and_predefined():
    assert parse_name("Foo").kind == SyntaxKind.IDENTIFIER_NAME
    assert parse_name("int").kind == SyntaxKind.PREDEFINED_TYPE


def test_parse_qualified_is_left_associative():
    node = parse_name("A.B.C")
    assert node.kind == SyntaxKind.QUALIFIED_NAME
    assert str(node["left"]) == "A.B"
    assert str(node["right"]) == "C"


def test_parse_alias_qualified():
    node = parse_name("global::System.Object")
    assert node.kind == SyntaxKind.QUALIFIED_NAME
    left = node["left"]
    assert left.kind == SyntaxKind.ALIAS_QUALIFIED_NAME
    assert left["alias"].text == "global"
    assert str(node) == "global::System.Object"


def test_parse_generic_array_nullable():
    node = parse_name("global::System.Collections.Generic.Dictionary<string, int[]>")
    assert str(node) == "global::System.Collections.Generic.Dictionary<string,int[]>"

    array = parse_name("int[,][]")
    assert array.kind == SyntaxKind.ARRAY_TYPE
    assert str(array) == "int[,][]"

    nullable = parse_name("System.Int32?")
    assert nullable.kind == SyntaxKind.NULLABLE_TYPE


def test_parse_keyword_used_as_namespace_prefix():
    # "string" followed by a dot is a name, not the keyword.
    assert parse_name("string.Foo").kind == SyntaxKind.QUALIFIED_NAME


def test_parse_name_rejects_bad_input():
    with pytest.raises(ValueError):
        parse_name("Foo<")
    with pytest.raises(ValueError):
        parse_name("Foo Bar")
    with pytest.raises(ValueError):
        parse_name("Foo+Bar")


def test_full_string_includes_trivia_str_does_not():
    node = parse_name("A.B").with_leading_trivia("  ").with_trailing_trivia("\n")
    assert node.to_full_string() == "  A.B\n"
    assert str(node) == "A.B"
    assert node.first_token == Token("A", "  ", "")
    assert node.last_token == Token("B", "", "\n")


def test_with_validates_slot_names():
    node = parse_name("Foo")
    with pytest.raises(KeyError):
        node.with_(nonsense=Token("x"))
    with pytest.raises(KeyError):
        make(SyntaxKind.BLOCK, body=None)


def test_make_fills_missing_slots_and_freezes_lists():
    block = make(SyntaxKind.BLOCK, open_brace=Token("{"), statements=[], close_brace=Token("}"))
    assert block["statements"] == ()
    assert make(SyntaxKind.METHOD_DECLARATION)["body"] is None


def test_separated_and_elements():
    items = separated([parse_name("A"), parse_name("B")])
    assert [t.text for t in items if isinstance(t, Token)] == [","]
    assert [str(n) for n in elements(items)] == ["A", "B"]


def test_trees_are_values():
    assert parse_name("A.B<C>") == parse_name("A.B<C>")
    node = parse_name("A")
    assert node.with_trailing_trivia(" ") != node
    assert node.with_trailing_trivia("") == node


def test_descendants():
    node = parse_name("A.B<C>")
    kinds = [n.kind for n in node.descendants()]
    assert SyntaxKind.TYPE_ARGUMENT_LIST in kinds
    assert kinds.count(SyntaxKind.IDENTIFIER_NAME) == 2
