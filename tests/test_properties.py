"""Property-based tests for modifier and visibility invariants."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

hypothesis = pytest.importorskip("hypothesis")
from hypothesis import assume, given, settings  # noqa: E402
from hypothesis import strategies as st  # noqa: E402

sys.path.insert(0, str(Path(__file__).parent))
from conftest import reflector_for_source  # noqa: E402
from mirrorphp.exit_codes import InvalidArgumentError  # noqa: E402
from mirrorphp.reflection.modifiers import (  # noqa: E402
    IS_PRIVATE,
    IS_PROTECTED,
    IS_PUBLIC,
    IS_STATIC,
    VISIBILITY_FLAGS,
    get_modifier_names,
)

_KEYWORDS = {"public": IS_PUBLIC, "protected": IS_PROTECTED, "private": IS_PRIVATE, "var": IS_PUBLIC}


def _reflect(keyword: str, is_static: bool):
    static = " static" if is_static else ""
    php = f"<?php class T {{ {keyword}{static} $p = 1; }}"
    return reflector_for_source(php).reflect("T").get_property("p")


def _exactly_one_visibility(prop) -> bool:
    return [prop.is_public(), prop.is_protected(), prop.is_private()].count(True) == 1


@given(keyword=st.sampled_from(sorted(_KEYWORDS)), is_static=st.booleans())
@settings(max_examples=30, deadline=None)
def test_declared_modifiers(keyword, is_static):
    # ``var`` cannot be combined with other modifiers
    assume(not (keyword == "var" and is_static))
    prop = _reflect(keyword, is_static)
    assert _exactly_one_visibility(prop)
    assert prop.is_static() is is_static
    assert prop.get_modifiers() == _KEYWORDS[keyword] | (IS_STATIC if is_static else 0)
    names = get_modifier_names(prop.get_modifiers())
    assert ("static" in names) is is_static
    assert ("<default>" in str(prop)) is not is_static


@given(
    is_static=st.booleans(),
    visibilities=st.lists(st.sampled_from(VISIBILITY_FLAGS), min_size=1, max_size=6),
)
@settings(max_examples=50, deadline=None)
def test_set_visibility_sequence(is_static, visibilities):
    prop = _reflect("public", is_static)
    for visibility in visibilities:
        prop.set_visibility(visibility)
        assert _exactly_one_visibility(prop)
        assert prop.is_static() is is_static
        assert prop.get_modifiers() & (IS_PUBLIC | IS_PROTECTED | IS_PRIVATE) == visibility


@given(value=st.integers().filter(lambda v: v not in VISIBILITY_FLAGS))
@settings(max_examples=50, deadline=None)
def test_set_visibility_rejects_non_flags(value):
    prop = _reflect("protected", False)
    with pytest.raises(InvalidArgumentError):
        prop.set_visibility(value)
    assert prop.is_protected()
