"""CLI integration tests via CliRunner: text output, JSON envelopes and exit codes."""

from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
from conftest import assert_json_envelope, fixture_path, invoke_cli, parse_json_output
from mirrorphp.exit_codes import EXIT_NOT_FOUND, EXIT_USAGE

EXAMPLE_FILE = fixture_path("ExampleClass.php")
DEFAULTS_FILE = fixture_path("DefaultProperties.php")


class TestPropertyCommand:
    def test_text_output(self, cli_runner):
        result = invoke_cli(cli_runner, ["property", "Foo", "hasDefault", "--file", DEFAULTS_FILE])
        assert result.exit_code == 0, result.output
        assert "Property [ <default> public $hasDefault ]" in result.output
        assert "declared in  Foo" in result.output
        assert "default      123" in result.output
        assert "lines        8-8" in result.output

    def test_doc_block_types_shown(self, cli_runner):
        result = invoke_cli(
            cli_runner, ["property", "Mirror\\Fixture\\ExampleClass", "privateProperty", "--file", EXAMPLE_FILE]
        )
        assert result.exit_code == 0, result.output
        assert "@var         int | float | \\stdClass" in result.output
        assert "modifiers    4 (private)" in result.output

    def test_json_output(self, cli_runner):
        result = invoke_cli(
            cli_runner,
            ["property", "Mirror\\Fixture\\ExampleClass", "publicStaticProperty", "--file", EXAMPLE_FILE],
            json_mode=True,
        )
        data = parse_json_output(result, "property")
        assert_json_envelope(data, "property")
        assert data["name"] == "publicStaticProperty"
        assert data["modifiers"] == 17
        assert data["modifier_names"] == ["public", "static"]
        assert data["display"] == "Property [ public static $publicStaticProperty ]"
        assert data["declaring_class"] == "Mirror\\Fixture\\ExampleClass"

    def test_unfoldable_default_is_reported(self, cli_runner):
        result = invoke_cli(cli_runner, ["property", "Foo", "interpolated", "--file", DEFAULTS_FILE], json_mode=True)
        data = parse_json_output(result, "property")
        assert data["has_default_value"] is True
        assert data["default_value"] is None
        assert "default_value_error" in data

    def test_inline_source(self, cli_runner):
        result = invoke_cli(
            cli_runner, ["property", "T", "x", "--source", "<?php class T { protected $x = [1, 'a' => true]; }"]
        )
        assert result.exit_code == 0, result.output
        assert "default      [0 => 1, 'a' => true]" in result.output

    def test_missing_property(self, cli_runner):
        result = invoke_cli(cli_runner, ["property", "Foo", "nope", "--file", DEFAULTS_FILE])
        assert result.exit_code == EXIT_NOT_FOUND
        assert "Property Foo::$nope does not exist" in result.output


class TestClassCommand:
    def test_text_output(self, cli_runner):
        result = invoke_cli(cli_runner, ["class", "Mirror\\Fixture\\ExampleClass", "--file", EXAMPLE_FILE])
        assert result.exit_code == 0, result.output
        assert "class Mirror\\Fixture\\ExampleClass" in result.output
        assert "Properties (4):" in result.output
        assert "$publicStaticProperty" in result.output
        assert "bool|bool[]|bool[][]" in result.output

    def test_inherited_properties(self, cli_runner):
        path = fixture_path("Inheritance.php")
        result = invoke_cli(cli_runner, ["class", "App\\GrandChild", "--file", path], json_mode=True)
        data = parse_json_output(result, "class")
        assert_json_envelope(data, "class")
        assert data["parent"] == "App\\Child"
        assert [p["name"] for p in data["properties"]] == ["limit", "shadowed", "own", "inherited", "secret"]
        assert data["summary"]["properties"] == 5

    def test_declared_only(self, cli_runner):
        path = fixture_path("Inheritance.php")
        result = invoke_cli(cli_runner, ["class", "App\\GrandChild", "--declared", "--file", path], json_mode=True)
        data = parse_json_output(result, "class")
        assert [p["name"] for p in data["properties"]] == ["limit"]

    def test_missing_class(self, cli_runner):
        result = invoke_cli(cli_runner, ["class", "Nope", "--file", EXAMPLE_FILE])
        assert result.exit_code == EXIT_NOT_FOUND
        assert "Nope" in result.output

    def test_composer_project_from_cwd(self, cli_runner, composer_project):
        result = invoke_cli(cli_runner, ["class", "Acme\\Model\\User"], cwd=composer_project, json_mode=True)
        data = parse_json_output(result, "class")
        assert data["parent"] == "Acme\\Model\\Entity"
        assert {p["name"] for p in data["properties"]} == {"email", "id"}

    def test_composer_project_option(self, cli_runner, composer_project):
        result = invoke_cli(cli_runner, ["class", "Old_Widget", "--project", composer_project])
        assert result.exit_code == 0, result.output
        assert "$count" in result.output

    def test_invalid_composer_config(self, cli_runner, tmp_path):
        (tmp_path / "composer.json").write_text('{"autoload": []}')
        result = invoke_cli(cli_runner, ["class", "Foo", "--project", tmp_path])
        assert result.exit_code == 1
        assert "'autoload' must be an object" in result.output

    def test_no_source_is_usage_error(self, cli_runner, tmp_path):
        result = invoke_cli(cli_runner, ["class", "Foo"], cwd=tmp_path)
        assert result.exit_code == EXIT_USAGE


class TestClassesCommand:
    def test_lists_classes(self, cli_runner):
        result = invoke_cli(cli_runner, ["classes", "--file", fixture_path("Traits.php")])
        assert result.exit_code == 0, result.output
        assert "HasName" in result.output
        assert "Person" in result.output

    def test_json(self, cli_runner):
        result = invoke_cli(
            cli_runner,
            ["classes", "--file", fixture_path("Traits.php"), "--file", fixture_path("Promoted.php")],
            json_mode=True,
        )
        data = parse_json_output(result, "classes")
        assert_json_envelope(data, "classes")
        assert [(c["name"], c["kind"]) for c in data["classes"]] == [
            ("HasName", "trait"),
            ("Person", "class"),
            ("Point", "class"),
        ]
        assert data["summary"]["classes"] == 3


def test_help_lists_commands(cli_runner):
    result = invoke_cli(cli_runner, ["--help"])
    assert result.exit_code == 0
    for name in ("class", "classes", "property"):
        assert name in result.output


def test_json_output_is_sorted(cli_runner):
    result = invoke_cli(cli_runner, ["classes", "--file", fixture_path("Traits.php")], json_mode=True)
    data = json.loads(result.output)
    assert list(data) == sorted(data)
