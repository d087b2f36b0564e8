"""CLI for castore."""

import logging
import shutil
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .config import load_store_options
from .constants import BASE_PATH_ENV, MISSING_SIZE
from .errors import ConfigurationError, SizeExceededError, StoreIOError
from .store import Store


app = typer.Typer(help="""\
Content-addressed object store. Objects are stored under the hex digest
of their content and retrieved by that key.""")

console = Console(stderr=True)


def _fail(message: str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]✗[/red] {escape(message)}")
    raise typer.Exit(1)


def _open_store(ctx: typer.Context) -> Store:
    """Build the store from the global options.

    Raises:
        typer.Exit: If the configuration is invalid or the base path is unusable
    """
    settings = ctx.obj or {}
    try:
        options = load_store_options(settings.get("config"), **settings.get("overrides", {}))
        return Store(options)
    except (ConfigurationError, StoreIOError) as e:
        _fail(str(e))


@app.callback()
def main_options(
    ctx: typer.Context,
    base_path: Optional[Path] = typer.Option(
        None, "--base-path", "-b", envvar=BASE_PATH_ENV, help="Root directory of the store"
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML config file"),
    layout: Optional[str] = typer.Option(None, "--layout", help="Directory layout: flat or depth"),
    depth: Optional[int] = typer.Option(None, "--depth", help="Directory levels for the depth layout"),
    max_size: Optional[int] = typer.Option(None, "--max-size", help="Maximum object size in bytes"),
    hash_name: Optional[str] = typer.Option(None, "--hash", help="hashlib algorithm name (default: sha256)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Global store options."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    ctx.obj = {
        "config": config,
        "overrides": {
            "base_path": base_path,
            "layout": layout,
            "depth": depth,
            "max_size": max_size,
            "hash": hash_name,
        },
    }


@app.command()
def put(
    ctx: typer.Context,
    file: str = typer.Argument("-", help="File to store ('-' reads stdin)"),
):
    """Store a file and print its key."""
    store = _open_store(ctx)
    try:
        if file == "-":
            key = store.put(typer.get_binary_stream("stdin"))
        else:
            key = store.put_file(Path(file))
    except (SizeExceededError, StoreIOError) as e:
        _fail(str(e))
    typer.echo(key)


@app.command()
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Object key"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
):
    """Write a stored object to stdout or a file."""
    store = _open_store(ctx)
    try:
        src = store.get(key)
    except (StoreIOError, ValueError) as e:
        _fail(str(e))
    if src is None:
        _fail(f"No object stored under {key}")

    with src:
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            with output.open("wb") as dst:
                shutil.copyfileobj(src, dst)
        else:
            dst = typer.get_binary_stream("stdout")
            shutil.copyfileobj(src, dst)
            dst.flush()


@app.command()
def size(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Object key"),
):
    """Print the size of a stored object in bytes."""
    store = _open_store(ctx)
    try:
        n = store.size(key)
    except (StoreIOError, ValueError) as e:
        _fail(str(e))
    if n == MISSING_SIZE:
        _fail(f"No object stored under {key}")
    typer.echo(n)


@app.command()
def has(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Object key"),
):
    """Exit 0 if an object is stored under KEY, 1 otherwise."""
    store = _open_store(ctx)
    try:
        found = store.has(key)
    except (StoreIOError, ValueError) as e:
        _fail(str(e))
    raise typer.Exit(0 if found else 1)


@app.command()
def path(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Object key"),
):
    """Print the path KEY is (or would be) stored at."""
    store = _open_store(ctx)
    try:
        typer.echo(str(store.path_for(key)))
    except ValueError as e:
        _fail(str(e))


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
