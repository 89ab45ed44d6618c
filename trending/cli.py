"""
Command line display for trending repositories and their favorite flags.
"""

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from .client import ClientConfig, ProxyClient, load_repositories, open_favorites
from .errors import FetchError
from .favorites import toggle_favorite
from .models import RepositoryRecord

console = Console()


SORT_KEYS = ("stars", "name")


def sort_rows(records: list[RepositoryRecord], by: str = "stars") -> list[RepositoryRecord]:
    """Favorites first, then by name or by star count (highest first)."""
    if by == "name":
        return sorted(records, key=lambda r: (not r.favorite, r.name.lower()))
    return sorted(records, key=lambda r: (not r.favorite, -r.stargazer_count))


def filter_rows(
    records: list[RepositoryRecord],
    language: str | None = None,
    min_stars: int | None = None,
    favorites_only: bool = False,
) -> list[RepositoryRecord]:
    rows = records
    if language:
        wanted = language.lower()
        rows = [r for r in rows if any(wanted in lang.lower() for lang in r.languages)]
    if min_stars is not None:
        rows = [r for r in rows if r.stargazer_count >= min_stars]
    if favorites_only:
        rows = [r for r in rows if r.favorite]
    return rows


def render_table(records: list[RepositoryRecord]) -> Table:
    table = Table(title="GitHub Repositories - Favorites")
    table.add_column("", style="yellow", width=2)
    table.add_column("Name", style="green")
    table.add_column("Description", style="white", max_width=60)
    table.add_column("Stars", style="yellow", justify="right")
    table.add_column("Languages", style="magenta")
    table.add_column("URL", style="blue")

    for record in records:
        table.add_row(
            "★" if record.favorite else "☆",
            record.name,
            record.description,
            str(record.stargazer_count),
            ", ".join(record.languages),
            record.url,
        )
    return table


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose):
    """Trending GitHub repositories of the past week, with local favorites."""
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    ctx.obj = ClientConfig()


def fetch_rows(config: ClientConfig, store) -> list[RepositoryRecord]:
    try:
        return asyncio.run(load_repositories(ProxyClient(config), store))
    except FetchError as e:
        logging.error(f"Fetching repositories failed: {e}")
        console.print(f"[red]Could not fetch repositories: {e}[/red]")
        sys.exit(1)


@cli.command("list")
@click.option("--language", help="Only repositories using this language")
@click.option("--min-stars", type=int, help="Only repositories with at least this many stars")
@click.option("--favorites-only", is_flag=True, help="Only favorite repositories")
@click.option("--sort", "sort_by", type=click.Choice(SORT_KEYS), default="stars", show_default=True)
@click.pass_obj
def list_command(config: ClientConfig, language, min_stars, favorites_only, sort_by):
    """Fetch the list through the proxy and show it."""
    records = fetch_rows(config, open_favorites(config))
    rows = filter_rows(sort_rows(records, sort_by), language, min_stars, favorites_only)
    console.print(render_table(rows))


@cli.command("toggle")
@click.argument("name")
@click.option("--sort", "sort_by", type=click.Choice(SORT_KEYS), default="stars", show_default=True)
@click.pass_obj
def toggle_command(config: ClientConfig, name, sort_by):
    """Flip the favorite flag of NAME in the fetched list and show the list again."""
    store = open_favorites(config)
    records = fetch_rows(config, store)
    matches = [r for r in records if r.name == name]
    if not matches:
        console.print(f"[red]{name} is not in the current list[/red]")
        sys.exit(1)

    favorite = toggle_favorite(matches[0], store)
    # Records sharing the name share the flag
    for record in matches[1:]:
        record.favorite = favorite

    state = "added to" if favorite else "removed from"
    console.print(f"[green]{name} {state} favorites[/green]")
    console.print(render_table(sort_rows(records, sort_by)))


@cli.command("favorite")
@click.argument("name")
@click.option("--remove", is_flag=True, help="Unmark instead of mark")
@click.pass_obj
def favorite_command(config: ClientConfig, name, remove):
    """Mark NAME as favorite."""
    store = open_favorites(config)
    store.set_favorite(name, not remove)
    state = "removed from" if remove else "added to"
    console.print(f"[green]{name} {state} favorites[/green]")


@cli.command("favorites")
@click.pass_obj
def favorites_command(config: ClientConfig):
    """Show the persisted favorite names."""
    names = open_favorites(config).names
    if not names:
        console.print("[yellow]No favorites yet[/yellow]")
    for name in names:
        console.print(name)
