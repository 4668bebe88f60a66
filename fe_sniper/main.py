"""CLI entry point using typer."""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from . import __version__
from . import logger
from .config import Config
from .display import console, print_banner, sku_table, error_box

app = typer.Typer(
    name="fe-sniper",
    help="FE Sniper - Founders Edition stock watcher and auto-carter",
    add_completion=False,
)


def version_callback(value: bool):
    if value:
        console.print(f"[bold]FE Sniper[/] v{__version__}")
        raise typer.Exit()


def parse_when(value: str) -> float:
    """Parse a drop time: epoch seconds or an ISO datetime (local if naive)."""
    from .timing import to_epoch

    try:
        return float(value)
    except ValueError:
        pass

    try:
        return to_epoch(datetime.fromisoformat(value))
    except ValueError:
        raise typer.BadParameter(f"'{value}' is neither epoch seconds nor an ISO datetime")


def resolve_headless(flag: Optional[bool], config: Config) -> bool:
    """CLI flag wins, then HEADLESS from .env, then ask."""
    if flag is not None:
        return flag
    if config.headless is not None:
        return config.headless

    from .wizard import ask_headless
    return ask_headless()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True,
        help="Show version and exit"
    ),
):
    """FE Sniper - Founders Edition stock watcher."""
    pass


@app.command()
def run(
    headless: Optional[bool] = typer.Option(
        None, "--headless/--no-headless", help="Run Chrome without a window"
    ),
    env: Path = typer.Option(Path(".env"), "--env", "-e", help="Environment file"),
    keep_running: bool = typer.Option(
        False, "--keep-running", help="Keep polling after a successful cart"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """Poll NVIDIA's feeds and cart any Founders Edition that goes live."""
    logger.setup(debug=debug)
    config = Config.load(env)

    print_banner(__version__)
    use_headless = resolve_headless(headless, config)

    from .runner import run_reactive

    code = asyncio.run(run_reactive(config, use_headless, keep_running=keep_running))
    raise typer.Exit(code)


@app.command()
def drop(
    url: str = typer.Argument(..., help="Product page URL"),
    at: str = typer.Option(..., "--at", "-a", help="Drop time: epoch seconds or ISO datetime"),
    headless: Optional[bool] = typer.Option(
        None, "--headless/--no-headless", help="Run Chrome without a window"
    ),
    env: Path = typer.Option(Path(".env"), "--env", "-e", help="Environment file"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """Wait for a scheduled drop and reload the product page until it carts."""
    logger.setup(debug=debug)
    config = Config.load(env)
    target = parse_when(at)

    print_banner(__version__)
    use_headless = resolve_headless(headless, config)

    from .runner import run_drop

    code = asyncio.run(run_drop(config, url, target, use_headless))
    raise typer.Exit(code)


@app.command()
def status(
    env: Path = typer.Option(Path(".env"), "--env", "-e", help="Environment file"),
):
    """Show the cached SKU data."""
    logger.setup()
    config = Config.load(env)

    from .runner import load_cache

    cache = load_cache(config)
    if cache is None:
        console.print(error_box(f"Cannot load {config.sku_data_path}"))
        raise typer.Exit(1)

    console.print(sku_table(cache))


@app.command()
def check(
    env: Path = typer.Option(Path(".env"), "--env", "-e", help="Environment file"),
    save: bool = typer.Option(False, "--save", help="Persist SKU changes from the listing"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """Run one listing and one inventory tick without a browser."""
    logger.setup(debug=debug)
    config = Config.load(env)

    from .runner import load_cache
    from .http_client import HTTPClient, UpstreamError
    from .inventory import InventoryProber
    from .listing import fetch_listing, reconcile

    cache = load_cache(config)
    if cache is None:
        raise typer.Exit(1)

    cache.write_through = save

    async def report_only(gpu, url):
        console.print(f"[bold green]{gpu.value} in stock:[/] {url}")

    async def one_pass():
        async with HTTPClient(locale=config.locale) as client:
            try:
                changed = reconcile(cache, await fetch_listing(client, config.locale))
                if changed:
                    console.print(f"[yellow]SKU changes:[/] {', '.join(m.value for m in changed)}")
            except UpstreamError as e:
                console.print(f"[red]Listing fetch failed:[/] {e}")

            prober = InventoryProber(cache, client, report_only, locale=config.locale)
            stock = await prober.tick()
            await prober.drain()
            return stock

    stock = asyncio.run(one_pass())

    console.print(sku_table(cache, stock))


@app.command()
def setup(
    env: Path = typer.Option(Path(".env"), "--env", "-e", help="Environment file"),
):
    """Capture proshop credentials into the .env file."""
    from .wizard import setup_env

    setup_env(env)


@app.command()
def health(
    env: Path = typer.Option(Path(".env"), "--env", "-e", help="Environment file"),
):
    """Run pre-flight health checks."""
    logger.setup()
    config = Config.load(env)

    from .health import run_all_checks, print_results

    async def run_checks():
        results = await run_all_checks(config)
        if not print_results(results):
            raise typer.Exit(1)

    asyncio.run(run_checks())


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
