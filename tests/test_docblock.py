"""Tests for doc comment parsing and @var type resolution."""

from __future__ import annotations

import pytest

from mirrorphp.docblock.parser import DocBlock
from mirrorphp.docblock.types import (
    ArrayOf,
    ClassReference,
    Scalar,
    resolve_type,
    resolve_types,
    split_type_strings,
)


class TestDocBlock:
    def test_summary_and_tags(self):
        block = DocBlock.from_comment(
            "/**\n * The user's email.\n *\n * @var string|null Contact address\n * @deprecated\n */"
        )
        assert block.summary == "The user's email."
        assert [t.name for t in block.tag_list] == ["var", "deprecated"]
        assert block.var_tag_value == "string|null Contact address"

    def test_single_line(self):
        assert DocBlock.from_comment("/** @var int */").var_tag_value == "int"

    def test_first_var_tag_wins(self):
        block = DocBlock.from_comment("/**\n * @var int\n * @var string\n */")
        assert block.var_tag_value == "int"
        assert len(block.tags("var")) == 2

    def test_tag_continuation_lines(self):
        block = DocBlock.from_comment("/**\n * @see Foo\n *      and Bar\n */")
        assert block.tags("see")[0].value == "Foo\nand Bar"

    @pytest.mark.parametrize("comment", ["", None, "/** */", "/** Just words */"])
    def test_no_var_tag(self, comment):
        assert DocBlock.from_comment(comment).var_tag_value is None


class TestTypeStrings:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("int|float|\\stdClass", ["int", "float", "\\stdClass"]),
            ("bool|bool[]|bool[][]", ["bool", "bool[]", "bool[][]"]),
            ("string $name the name", ["string"]),
            ("int | null", ["int", "null"]),
            ("array<int, string> $map", ["array<int, string>"]),
            ("array<int|string, Foo>|null", ["array<int|string, Foo>", "null"]),
            ("(int|string)[]", ["(int|string)[]"]),
            ("", []),
            (None, []),
        ],
    )
    def test_split(self, value, expected):
        assert split_type_strings(value) == expected


class TestResolve:
    def test_scalars_are_lowercased_and_canonical(self):
        assert resolve_types("Integer|BOOLEAN|double|String") == [
            Scalar("int"),
            Scalar("bool"),
            Scalar("float"),
            Scalar("string"),
        ]

    def test_class_reference_keeps_spelling(self):
        assert resolve_type("\\App\\Model\\User") == [ClassReference("\\App\\Model\\User")]
        assert resolve_type("User") == [ClassReference("User")]

    def test_arrays(self):
        nested = resolve_type("Foo[][]")[0]
        assert nested == ArrayOf(ArrayOf(ClassReference("Foo")))
        assert nested.depth == 2
        assert str(nested) == "Foo[][]"

    def test_nullable(self):
        assert resolve_type("?Foo") == [ClassReference("Foo"), Scalar("null")]

    def test_generics_resolve_on_base(self):
        assert resolve_type("array<int, string>") == [Scalar("array")]
        assert resolve_type("Collection<User>") == [ClassReference("Collection")]
        assert resolve_type("array{id: int}") == [Scalar("array")]

    def test_parenthesised(self):
        assert resolve_type("(int|string)[]") == [ArrayOf(Scalar("mixed"))]
        assert resolve_type("(Foo)") == [ClassReference("Foo")]

    def test_pseudo_types(self):
        assert resolve_types("$this|static|void") == [Scalar("$this"), Scalar("static"), Scalar("void")]
