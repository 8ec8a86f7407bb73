import click

from mirrorphp.commands.locator_options import locator_options
from mirrorphp.output.formatter import format_table, json_envelope, loc, to_json


@click.command()
@locator_options
@click.pass_context
def classes(ctx, reflector):
    """List every class-like declared in the given sources."""
    json_mode = ctx.obj.get('json') if ctx.obj else False
    found = reflector.get_all_classes()

    if json_mode:
        click.echo(to_json(json_envelope(
            "classes",
            summary={"classes": len(found)},
            classes=[
                {
                    "name": c.get_name(),
                    "kind": c.get_kind(),
                    "file": c.get_file_name(),
                    "line": c.get_start_line(),
                    "properties": len(c.get_immediate_properties()),
                }
                for c in found
            ],
        )))
        return

    rows = [
        [c.get_kind(), c.get_name(), str(len(c.get_immediate_properties())), loc(c.get_file_name(), c.get_start_line())]
        for c in found
    ]
    click.echo(format_table(["kind", "name", "props", "location"], rows))
