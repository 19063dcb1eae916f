"""Command-line interface for ghstars."""

import asyncio
import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ghstars.cache import CacheGateway, FileStore, cache_key
from ghstars.config import get_settings
from ghstars.errors import GhStarsError
from ghstars.fetcher import HttpxBatchFetcher, build_locators
from ghstars.periods import parse_period
from ghstars.service import StarsService

console = Console()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """GitHub star counts per repository for days, weeks and months."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@main.command()
@click.option("--host", help="Interface to bind (default from settings)")
@click.option("--port", type=int, help="Port to bind (default from settings)")
def serve(host: str | None, port: int | None) -> None:
    """Serve the HTTP API.

    Examples:
        ghstars serve                     # Settings defaults
        ghstars serve --port 9000         # Custom port
    """
    import uvicorn

    from ghstars.api import create_app

    settings = get_settings()
    uvicorn.run(create_app(), host=host or settings.host, port=port or settings.port)


async def _get_counts(identifier: str, limit: int | None) -> bytes:
    settings = get_settings()
    store = FileStore(settings.cache_dir)
    async with HttpxBatchFetcher(settings.fetch_concurrency, settings.fetch_timeout) as fetcher:
        service = StarsService(CacheGateway(store), fetcher, settings)
        return await service.get_counts(identifier, limit)


@main.command()
@click.argument("period")
@click.option("--limit", "-n", type=click.IntRange(min=0), help="Top N repositories only")
def get(period: str, limit: int | None) -> None:
    """Print counts for a period, computing and caching them on a miss.

    Examples:
        ghstars get 2024-01-01            # One day
        ghstars get 2024-W5 -n 10         # Top 10 of a week
        ghstars get 2024-02               # One month
    """
    try:
        body = asyncio.run(_get_counts(period, limit))
    except GhStarsError as e:
        raise click.ClickException(str(e)) from e

    click.echo(body.decode("utf-8"))


@main.command()
@click.argument("period")
def locators(period: str) -> None:
    """List the subordinate locators a period would fetch."""
    try:
        resolved = parse_period(period)
    except GhStarsError as e:
        raise click.ClickException(str(e)) from e

    settings = get_settings()
    urls = build_locators(resolved, settings)
    console.print(
        f"[bold]{resolved.identifier}[/bold] "
        f"({resolved.start_date} to {resolved.end_date}), key {cache_key(resolved)}"
    )
    for url in urls:
        console.print(f"  {url}")
    console.print(f"[dim]{len(urls)} locators[/dim]")


@main.command()
def keys() -> None:
    """List cached period keys."""
    settings = get_settings()
    stored = FileStore(settings.cache_dir).keys()

    if not stored:
        console.print("[yellow]No cached periods. Run 'ghstars get' first.[/yellow]")
        return

    table = Table(title=f"Cached periods ({settings.cache_dir})")
    table.add_column("Key", style="cyan")
    for key in stored:
        table.add_row(key)

    console.print(table)


if __name__ == "__main__":
    main()
