import click

from mirrorphp.commands.locator_options import locator_options
from mirrorphp.output.formatter import json_envelope, php_export, property_facts, to_json
from mirrorphp.reflection.reflection_property import ReflectionProperty


@click.command('property')
@click.argument('identifier')
@click.argument('name')
@locator_options
@click.pass_context
def property_cmd(ctx, identifier, name, reflector):
    """Show every reflected fact about one property."""
    json_mode = ctx.obj.get('json') if ctx.obj else False
    prop = ReflectionProperty.create_from_name(reflector, identifier, name)
    facts = property_facts(prop)

    if json_mode:
        click.echo(to_json(json_envelope("property", summary={"name": facts["name"]}, **facts)))
        return

    click.echo(facts["display"])
    click.echo(f"  declared in  {facts['declaring_class']}")
    click.echo(f"  modifiers    {facts['modifiers']} ({' '.join(facts['modifier_names'])})")
    if facts["type"]:
        click.echo(f"  type         {facts['type']}")
    if "default_value_error" in facts:
        click.echo(f"  default      <unfoldable: {facts['default_value_error']}>")
    elif facts["has_default_value"]:
        click.echo(f"  default      {php_export(facts['default_value'])}")
    if facts["doc_block_types"]:
        click.echo(f"  @var         {' | '.join(facts['doc_block_types'])}")
    click.echo(f"  lines        {facts['start_line']}-{facts['end_line']}")
    if facts["doc_comment"]:
        for line in facts["doc_comment"].splitlines():
            click.echo(f"  | {line.strip()}")
