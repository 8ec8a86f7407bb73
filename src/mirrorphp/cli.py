"""Click CLI entry point with lazy-loaded subcommands."""

import logging

import click

# Lazy-loading command group: imports command modules only when invoked.
_COMMANDS = {
    "class":    ("mirrorphp.commands.cmd_class",    "class_cmd"),
    "classes":  ("mirrorphp.commands.cmd_classes",  "classes"),
    "property": ("mirrorphp.commands.cmd_property", "property_cmd"),
}


class LazyGroup(click.Group):
    """A Click group that lazy-loads command modules on first access."""

    def list_commands(self, ctx):
        return sorted(_COMMANDS.keys())

    def get_command(self, ctx, cmd_name):
        if cmd_name not in _COMMANDS:
            return None
        module_path, attr_name = _COMMANDS[cmd_name]
        import importlib
        mod = importlib.import_module(module_path)
        return getattr(mod, attr_name)


@click.group(cls=LazyGroup)
@click.version_option(package_name="mirrorphp")
@click.option('--json', 'json_mode', is_flag=True, help='Output in JSON format')
@click.option('-v', '--verbose', is_flag=True, help='Log locator, parser and cache activity to stderr')
@click.pass_context
def cli(ctx, json_mode, verbose):
    """mirrorphp: static reflection for PHP classes and properties."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = json_mode
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
