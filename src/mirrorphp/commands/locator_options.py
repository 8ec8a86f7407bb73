"""Shared ``--file`` / ``--source`` / ``--project`` options for commands."""

from __future__ import annotations

import functools
from pathlib import Path

import click

from mirrorphp.config import find_project_root
from mirrorphp.exit_codes import ReflectionError
from mirrorphp.reflector import ClassReflector
from mirrorphp.source_locator.aggregate import AggregateSourceLocator
from mirrorphp.source_locator.autoload import AutoloadSourceLocator, ComposerAutoloadContext
from mirrorphp.source_locator.single_file import SingleFileSourceLocator
from mirrorphp.source_locator.string import StringSourceLocator


def locator_options(fn):
    """Attach the source locating options to a command."""

    @click.option('--file', 'files', multiple=True, type=click.Path(exists=True, dir_okay=False),
                  help='PHP file to search (repeatable)')
    @click.option('--source', 'source_text', default=None, help='PHP source code given inline')
    @click.option('--project', type=click.Path(exists=True, file_okay=False), default=None,
                  help='Project root with composer.json (default: nearest above cwd)')
    @functools.wraps(fn)
    def wrapper(*args, files, source_text, project, **kwargs):
        kwargs['reflector'] = build_reflector(files, source_text, project)
        return fn(*args, **kwargs)

    return wrapper


def build_reflector(files=(), source_text=None, project=None) -> ClassReflector:
    """Reflector over the given files and inline source, then the composer project."""
    locators = [SingleFileSourceLocator(f) for f in files]
    if source_text:
        locators.append(StringSourceLocator(source_text))

    root = Path(project) if project else None
    if root is None and not locators:
        root = find_project_root()
        if root is None:
            raise click.UsageError("No --file or --source given and no composer.json found above the current directory")
    if root is not None:
        try:
            context = ComposerAutoloadContext.from_project(root)
        except (FileNotFoundError, ValueError) as exc:
            raise ReflectionError(str(exc)) from exc
        locators.append(AutoloadSourceLocator(context))
    return ClassReflector(AggregateSourceLocator(locators))
