"""Routedoc CLI - Main Entry Point.

Commands:
    generate - Write the OpenAPI document as JSON
    serve    - Serve /openapi.json and /docs with uvicorn
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from .. import __version__
from ..config import DocsConfig
from ..faults import Fault
from ..openapi.generator import OpenAPIGenerator
from . import __cli_name__


def success(message: str) -> None:
    """Print success message in green (to stderr, stdout may carry the document)."""
    click.echo(click.style(message, fg="green"), err=True)


def error(message: str) -> None:
    """Print error message in red."""
    click.echo(click.style(message, fg="red"), err=True)


def _load_config(
    env_file: Optional[str],
    packages: Tuple[str, ...],
    title: Optional[str] = None,
    base_url: Optional[str] = None,
) -> DocsConfig:
    config = DocsConfig.from_env(env_file)
    if packages:
        config.controller_packages = list(packages)
    if title:
        config.title = title
    if base_url:
        config.base_url = base_url
    return config


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, verbose: bool):
    """Generate OpenAPI documents from marked controller classes."""
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command('generate')
@click.argument('packages', nargs=-1)
@click.option('--controller', '-c', 'controllers', multiple=True,
              help='Controller identifier (module.ClassName), repeatable')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write to file instead of stdout')
@click.option('--indent', type=int, default=2, show_default=True, help='JSON indentation')
@click.option('--env-file', type=click.Path(dir_okay=False), default='.env', show_default=True)
@click.option('--title', type=str, help='Document title')
@click.option('--base-url', type=str, help='Server URL (overrides APP_URL)')
@click.pass_context
def generate(
    ctx,
    packages: Tuple[str, ...],
    controllers: Tuple[str, ...],
    output: Optional[str],
    indent: int,
    env_file: str,
    title: Optional[str],
    base_url: Optional[str],
):
    """
    Generate the OpenAPI document.

    Examples:
      routedoc generate myapp.controllers
      routedoc generate -c myapp.users.UsersController -o openapi.json
    """
    try:
        config = _load_config(env_file, packages, title, base_url)
        generator = OpenAPIGenerator(config, controllers=list(controllers))
        document = generator.generate_json(indent=indent or None)
    except Fault as fault:
        error(f"error: {fault}")
        sys.exit(1)

    if output:
        Path(output).write_text(document + "\n", encoding="utf-8")
        if ctx.obj['verbose']:
            success(f"Wrote {output}")
    else:
        click.echo(document)


@cli.command('serve')
@click.argument('packages', nargs=-1)
@click.option('--host', default='127.0.0.1', show_default=True)
@click.option('--port', default=8000, type=int, show_default=True)
@click.option('--env-file', type=click.Path(dir_okay=False), default='.env', show_default=True)
def serve(packages: Tuple[str, ...], host: str, port: int, env_file: str):
    """
    Serve the document and Swagger UI.

    Examples:
      routedoc serve myapp.controllers --port 8080
    """
    import uvicorn

    from ..asgi import create_app
    from ..service import DocsService

    try:
        config = _load_config(env_file, packages)
    except Fault as fault:
        error(f"error: {fault}")
        sys.exit(1)

    uvicorn.run(create_app(DocsService(config)), host=host, port=port)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
