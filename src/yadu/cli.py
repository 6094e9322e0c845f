# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from yadu.config import CONTEXT_ENV, Settings
from yadu.context import Context
from yadu.environments import apply_environment, find_environment, load_environments
from yadu.errors import (
    ContextError,
    EnvironmentApplyError,
    ExecutionError,
    FileFormatError,
    GraphConstructionError,
    NotFoundError,
    UnitNotFoundError,
    YaduError,
)
from yadu.runner import Runner
from yadu.scaffold import create_unit
from yadu.ui.console import Console, get_console, set_console


def report_error(exc: YaduError) -> None:
    """Render a yadu error as a titled block on stderr."""
    console = get_console()

    if isinstance(exc, NotFoundError):
        console.print_error("Not found", str(exc), suggestion="Run `yadu list` or `yadu env list` to see what exists.")
    elif isinstance(exc, GraphConstructionError):
        console.print_error(
            "Failed to load units",
            str(exc),
            suggestion="Every unit must define `description` and `dependencies` when sourced by bash.",
        )
    elif isinstance(exc, (ExecutionError, EnvironmentApplyError)):
        console.print_error("Apply failed", str(exc))
    elif isinstance(exc, FileFormatError):
        console.print_error("Invalid configuration", str(exc), details=exc.details or None)
    else:
        console.print_error("yadu failed", str(exc))

    if console.debug:
        console.print_exception(exc)


def context_dir(ctx: click.Context) -> Path:
    """
    Resolve the context directory: --context / $YADU_CONTEXT first, then the
    one stored in the settings file.

    Raises:
        ContextError: none configured
    """
    explicit = ctx.obj.get("context")
    if explicit:
        return Path(explicit)

    settings = Settings.load()
    if not settings.context:
        raise ContextError(
            path=None,
            reason="no context directory configured; run `yadu context DIRECTORY` or pass --context",
        )
    return Path(settings.context)


def load_context(ctx: click.Context) -> Context:
    directory = context_dir(ctx)
    get_console().print_debug(f"loading context {directory}")
    return Context.hydrate(directory)


def _run(fn) -> None:
    """Call fn, turning yadu errors and Ctrl-C into exit codes."""
    console = get_console()
    try:
        fn()
    except YaduError as e:
        report_error(e)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--context",
    "context",
    envvar=CONTEXT_ENV,
    default=None,
    type=click.Path(file_okay=False),
    help="Context directory to use instead of the configured one",
)
@click.pass_context
def cli(ctx, debug, context):
    """yadu: Yet Another Dotfiles Utility."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["context"] = context


@cli.command("list")
@click.pass_context
def list_units(ctx):
    """List all available units."""

    def go():
        context = load_context(ctx)
        get_console().print_units(context.units_and_descriptions())

    _run(go)


@cli.command()
@click.argument("unit")
@click.option("--deps/--no-deps", default=True, show_default=True, help="Apply the unit's dependencies first")
@click.pass_context
def apply(ctx, unit, deps):
    """Apply a specific unit."""

    def go():
        context = load_context(ctx)
        Runner(context).run_unit(unit, include_dependencies=deps)

    _run(go)


@cli.command("context")
@click.argument("directory", required=False, type=click.Path(exists=True, file_okay=False))
def context_cmd(directory):
    """Get or set the context directory."""

    def go():
        settings = Settings.load()
        if directory is None:
            get_console().print_info(settings.context or "(no context set)")
            return
        settings.set_context(directory)
        get_console().print_info(settings.context)

    _run(go)


@cli.command()
@click.argument("name")
@click.option("--description", "-m", default="", help="One-line description of the unit")
@click.option("--depends-on", "-d", multiple=True, help="Unit this one depends on (repeatable)")
@click.option("--edit/--no-edit", default=False, help="Open the new unit in $EDITOR")
@click.pass_context
def new(ctx, name, description, depends_on, edit):
    """Create a new unit from the template."""

    def go():
        context = Context(context_dir(ctx))
        path = create_unit(context, name, description=description, dependencies=depends_on)
        get_console().print_info(f"Created {path}")
        if edit:
            click.edit(filename=str(path))

    _run(go)


@cli.command()
@click.argument("name")
@click.pass_context
def edit(ctx, name):
    """Open a unit in $EDITOR."""

    def go():
        # no hydration: a unit that breaks introspection must still be editable
        context = Context(context_dir(ctx))
        path = context.unit_file(name)
        if not path.is_file():
            raise UnitNotFoundError(name)
        click.edit(filename=str(path))

    _run(go)


# ----------------------------------------------------------------------
# Environments
# ----------------------------------------------------------------------

@cli.group(invoke_without_command=True)
@click.pass_context
def env(ctx):
    """Show the active environment, or manage environments."""
    if ctx.invoked_subcommand is not None:
        return

    def go():
        settings = Settings.load()
        get_console().print_info(settings.environment or "(no environment set)")

    _run(go)


@env.command("list")
@click.pass_context
def env_list(ctx):
    """List environments defined in the context."""

    def go():
        context = Context(context_dir(ctx))
        environments = load_environments(context.environments_file)
        get_console().print_environments(
            ((e.name, e.units) for e in environments),
            active=Settings.load().environment,
        )

    _run(go)


@env.command("set")
@click.argument("name")
@click.pass_context
def env_set(ctx, name):
    """Make NAME the active environment."""

    def go():
        context = Context(context_dir(ctx))
        find_environment(load_environments(context.environments_file), name)
        Settings.load().set_environment(name)
        get_console().print_info(f"Active environment: {name}")

    _run(go)


@env.command("apply")
@click.argument("name", required=False)
@click.pass_context
def env_apply(ctx, name):
    """Apply environment NAME (defaults to the active one)."""

    def go():
        target = name or Settings.load().environment
        if not target:
            raise ContextError(
                path=None,
                reason="no environment given and none active; run `yadu env set NAME`",
            )
        context = load_context(ctx)
        apply_environment(context, Runner(context), target)

    _run(go)


if __name__ == "__main__":
    cli()
