"""
CLI interface for callgate.

Dispatches registered handlers from the command line, mostly for trying out
handler modules without an HTTP front end:

    callgate invoke Greeter hello World
    callgate call ping
    callgate handlers list

Handler modules are imported from the handler_modules config key (or from
--module) before dispatching.
"""


import sys

import click

from callgate import __version__


def _prepare(ctx, modules: tuple[str, ...]):
    """Set up logging and import handler modules; return the app config."""
    from callgate.handlers import get_registry
    from callgate.utils import setup_logging

    if "config_error" in ctx.obj:
        click.echo(f"✗ Config not loaded: {ctx.obj['config_error']}", err=True)
        click.echo("Fix the file or run 'callgate init --force'.", err=True)
        raise SystemExit(1)

    config = ctx.obj.get("config")
    if config is not None:
        setup_logging(
            log_file=config.get_log_file_path(),
            log_level=config.get_log_level(),
            log_format=config.log_format,
            console_output=config.console,
        )
        module_names = list(config.handler_modules) + list(modules)
        app_config = config.app_config
    else:
        setup_logging(log_format="pretty")
        module_names = list(modules)
        app_config = {}

    try:
        get_registry().load_modules(module_names)
    except ImportError as e:
        click.echo(f"✗ Could not import handler module: {e}", err=True)
        raise SystemExit(1)

    return app_config


def _run(dispatcher, as_json: bool) -> None:
    import json

    from callgate.utils import print_result

    result = dispatcher.invoke()
    if as_json:
        click.echo(json.dumps(result.to_dict(), default=repr))
    else:
        print_result(result)
    if not result.ok():
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="callgate")
@click.pass_context
def main(ctx):
    """
    callgate - Safe handler dispatch.

    Invoke registered handler classes and functions through the
    before/render/after lifecycle.
    """
    from callgate.config import load_config

    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = load_config()
    except FileNotFoundError:
        # No config yet: commands fall back to defaults, init creates the file
        pass
    except Exception as e:
        ctx.obj["config_error"] = str(e)


@main.command("invoke")
@click.argument("class_name")
@click.argument("method")
@click.argument("params", nargs=-1)
@click.option("--module", "-m", "modules", multiple=True, help="Extra handler module to import")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def invoke(ctx, class_name: str, method: str, params: tuple[str, ...], modules, as_json: bool):
    """
    Invoke METHOD on a fresh instance of CLASS_NAME.

    Examples:

        callgate invoke Greeter hello World

        callgate invoke Greeter hello World --json
    """
    from callgate.dispatch import Dispatcher

    app_config = _prepare(ctx, modules)
    dispatcher = Dispatcher(app_config=app_config)
    dispatcher.set_route_class_method(class_name, method)
    dispatcher.set_parameters(params)
    _run(dispatcher, as_json)


@main.command("call")
@click.argument("function")
@click.argument("params", nargs=-1)
@click.option("--module", "-m", "modules", multiple=True, help="Extra handler module to import")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
@click.pass_context
def call(ctx, function: str, params: tuple[str, ...], modules, as_json: bool):
    """Call the registered FUNCTION with PARAMS."""
    from callgate.dispatch import Dispatcher

    app_config = _prepare(ctx, modules)
    dispatcher = Dispatcher(app_config=app_config)
    dispatcher.set_route_function(function)
    dispatcher.set_parameters(params)
    _run(dispatcher, as_json)


@main.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """Initialize callgate configuration."""
    from callgate.config import get_callgate_home
    import yaml

    home = get_callgate_home()
    if not home.exists():
        home.mkdir(parents=True)

    cfg_path = home / "config.yaml"
    if cfg_path.exists() and not force:
        click.echo(f"Config already exists at {cfg_path}. Use --force to overwrite.", err=True)
        raise SystemExit(1)

    default_cfg = {
        "handler_modules": [],
        "app_config": {},
        "log_level": "INFO",
        "log_format": "pretty",
        "log_file": None,
        "console": True,
        "env_file": str(home / ".env"),
    }
    cfg_path.write_text(yaml.safe_dump(default_cfg, sort_keys=False))

    env_path = home / ".env"
    if not env_path.exists():
        env_path.write_text("# APP_ENV=...\n")

    click.echo(f"Initialized callgate config at {cfg_path}")


@main.group("handlers")
def handlers_group():
    """Inspect registered handlers."""
    pass


@handlers_group.command("list")
@click.option("--module", "-m", "modules", multiple=True, help="Extra handler module to import")
@click.pass_context
def list_handlers(ctx, modules):
    """List registered handler classes and functions."""
    from callgate.handlers import get_registry

    _prepare(ctx, modules)
    registry = get_registry()

    classes = registry.list_classes()
    functions = registry.list_functions()
    if not classes and not functions:
        click.echo("No handlers registered.")
        return

    if classes:
        click.echo("classes:")
        for name in classes:
            click.echo(f"  {name}")
    if functions:
        click.echo("functions:")
        for name in functions:
            click.echo(f"  {name}")


if __name__ == "__main__":
    sys.exit(main())
