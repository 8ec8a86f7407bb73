from mirrorphp.cli import cli

cli()
