"""Shared test fixtures and helpers for mirrorphp tests.

Provides:
- Fixture paths: FIXTURES, fixture_path()
- Reflector builders: reflector_for_source(), reflector_for_files()
- CliRunner fixtures: cli_runner, invoke_cli()
- JSON validation helpers: parse_json_output(), assert_json_envelope()
"""

from __future__ import annotations

import json
import os
import shutil
from pathlib import Path

import pytest
from click.testing import CliRunner

from mirrorphp.reflector import ClassReflector
from mirrorphp.source_locator.single_file import SingleFileSourceLocator
from mirrorphp.source_locator.string import StringSourceLocator

FIXTURES = Path(__file__).parent / "fixtures"


def fixture_path(name: str) -> Path:
    return FIXTURES / name


# ===========================================================================
# Reflector helpers
# ===========================================================================


def reflector_for_source(php: str) -> ClassReflector:
    """Reflector over one in-memory PHP snippet."""
    return ClassReflector(StringSourceLocator(php))


def reflector_for_file(name: str) -> ClassReflector:
    """Reflector over one file from tests/fixtures."""
    return ClassReflector(SingleFileSourceLocator(fixture_path(name)))


@pytest.fixture
def example_reflector():
    return reflector_for_file("ExampleClass.php")


@pytest.fixture
def example_class(example_reflector):
    return example_reflector.reflect("Mirror\\Fixture\\ExampleClass")


@pytest.fixture
def defaults_class():
    return reflector_for_file("DefaultProperties.php").reflect("Foo")


@pytest.fixture
def composer_project(tmp_path):
    """Copy of the composer fixture project in a scratch directory."""
    target = tmp_path / "project"
    shutil.copytree(fixture_path("composer_project"), target)
    return target


# ===========================================================================
# CliRunner helpers
# ===========================================================================


@pytest.fixture
def cli_runner():
    """Provide a Click CliRunner for in-process CLI testing."""
    return CliRunner()


def invoke_cli(runner, args, cwd=None, json_mode=False):
    """Invoke the mirrorphp CLI via CliRunner.

    Args:
        runner: CliRunner instance
        args: list of CLI arguments (e.g. ["class", "Foo"])
        cwd: directory to run in
        json_mode: if True, prepend --json flag
    Returns:
        click.testing.Result
    """
    from mirrorphp.cli import cli

    full_args = []
    if json_mode:
        full_args.append("--json")
    full_args.extend(str(a) for a in args)

    old_cwd = os.getcwd()
    try:
        if cwd:
            os.chdir(str(cwd))
        result = runner.invoke(cli, full_args, catch_exceptions=False)
    finally:
        os.chdir(old_cwd)
    return result


def parse_json_output(result, command=None):
    """Parse JSON from a CliRunner result, failing with context on bad output."""
    assert result.exit_code == 0, f"Command {command or '?'} failed (exit {result.exit_code}):\n{result.output}"
    try:
        return json.loads(result.output)
    except json.JSONDecodeError as e:
        pytest.fail(f"Invalid JSON from {command or '?'}: {e}\nOutput was:\n{result.output[:500]}")


def assert_json_envelope(data, command=None):
    """Validate that a parsed JSON dict follows the mirrorphp envelope contract."""
    assert isinstance(data, dict), f"Expected dict, got {type(data)}"
    for key in ("schema", "schema_version", "command", "summary"):
        assert key in data, f"Missing {key!r} key in envelope"
    if command:
        assert data["command"] == command, f"Expected command={command}, got {data['command']}"
    assert isinstance(data["summary"], dict), f"summary should be dict, got {type(data['summary'])}"
