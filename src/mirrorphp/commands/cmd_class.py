import click

from mirrorphp.commands.locator_options import locator_options
from mirrorphp.exit_codes import UnfoldableExpressionError
from mirrorphp.output.formatter import (
    format_table, json_envelope, loc, php_export, property_facts, section, to_json,
)
from mirrorphp.reflection.modifiers import get_modifier_names


def _default_cell(prop):
    if not prop.has_default_value():
        return ""
    try:
        return php_export(prop.get_default_value())
    except UnfoldableExpressionError:
        return "<unfoldable>"


@click.command('class')
@click.argument('identifier')
@click.option('--inherited/--declared', default=True, help='Include inherited properties (default) or only declared ones')
@locator_options
@click.pass_context
def class_cmd(ctx, identifier, inherited, reflector):
    """Show a class-like and its properties."""
    json_mode = ctx.obj.get('json') if ctx.obj else False
    cls = reflector.reflect(identifier)
    props = cls.get_properties() if inherited else cls.get_immediate_properties()

    if json_mode:
        click.echo(to_json(json_envelope(
            "class",
            summary={"properties": len(props)},
            name=cls.get_name(),
            kind=cls.get_kind(),
            parent=cls.get_parent_class_name(),
            interfaces=cls.get_interface_names(),
            file=cls.get_file_name(),
            start_line=cls.get_start_line(),
            end_line=cls.get_end_line(),
            properties=[property_facts(p) for p in props.values()],
        )))
        return

    header = f"{cls.get_kind()} {cls.get_name()}"
    if cls.get_parent_class_name():
        header += f" extends {cls.get_parent_class_name()}"
    click.echo(header)
    click.echo(f"  {loc(cls.get_file_name(), cls.get_start_line())}")

    rows = []
    for prop in props.values():
        declaring = prop.get_declaring_class().get_name()
        rows.append([
            f"${prop.get_name()}",
            " ".join(get_modifier_names(prop.get_modifiers())),
            _default_cell(prop),
            "|".join(prop.get_doc_block_type_strings()),
            f"{prop.get_start_line()}-{prop.get_end_line()}",
            "" if declaring == cls.get_name() else declaring,
        ])
    click.echo("")
    click.echo(section(
        f"Properties ({len(rows)}):",
        [format_table(["name", "modifiers", "default", "@var", "lines", "inherited from"], rows)],
    ))
