"""Tests for the exit code constants and the error taxonomy."""

from __future__ import annotations

import click
import pytest

from mirrorphp.exit_codes import (
    DESCRIPTIONS,
    EXIT_ERROR,
    EXIT_INVALID_INPUT,
    EXIT_NOT_FOUND,
    EXIT_SUCCESS,
    EXIT_USAGE,
    CircularReferenceError,
    IdentifierNotFoundError,
    InvalidArgumentError,
    InvalidNodeError,
    ReflectionError,
    SourceIOError,
    UncloneableError,
    UnfoldableExpressionError,
    UnsupportedOperationError,
)


def test_codes_are_distinct():
    codes = [EXIT_SUCCESS, EXIT_ERROR, EXIT_USAGE, EXIT_NOT_FOUND, EXIT_INVALID_INPUT]
    assert len(set(codes)) == len(codes)
    assert set(DESCRIPTIONS) == set(codes)


@pytest.mark.parametrize(
    "error, builtin, code",
    [
        (IdentifierNotFoundError("x"), LookupError, EXIT_NOT_FOUND),
        (InvalidNodeError("x"), TypeError, EXIT_INVALID_INPUT),
        (InvalidArgumentError("x"), ValueError, EXIT_INVALID_INPUT),
        (UnfoldableExpressionError("x"), ValueError, EXIT_INVALID_INPUT),
        (UnsupportedOperationError("x"), NotImplementedError, EXIT_ERROR),
        (SourceIOError("x"), OSError, EXIT_ERROR),
        (UncloneableError("x"), ReflectionError, EXIT_ERROR),
        (CircularReferenceError("x"), ReflectionError, EXIT_ERROR),
    ],
)
def test_taxonomy(error, builtin, code):
    assert isinstance(error, ReflectionError)
    assert isinstance(error, click.ClickException)
    assert isinstance(error, builtin)
    assert error.exit_code == code
    assert str(error) == "x"


def test_exit_code_override():
    assert ReflectionError("boom", exit_code=EXIT_USAGE).exit_code == EXIT_USAGE
    assert ReflectionError("boom").exit_code == EXIT_ERROR


def test_not_found_messages():
    err = IdentifierNotFoundError.for_class("App\\Missing")
    assert err.identifier == "App\\Missing"
    assert "App\\Missing" in str(err)

    err = IdentifierNotFoundError.for_property("App\\User", "email")
    assert str(err) == "Property App\\User::$email does not exist"
    assert err.identifier == "email"


def test_uncloneable_message_names_class():
    assert "ReflectionProperty" in str(UncloneableError.for_object(type("ReflectionProperty", (), {})()))
