from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import click

from .airports import search_airports
from .api_client import FlightsApiClient
from .auth import CredentialStore, login as do_login, logout as do_logout
from .cache import ResultCache
from .config import Settings, get_settings
from .errors import AuthRequired, FavoriteError, FlightsApiError
from .export import export_csv
from .favorites import FavoritesClient
from .hasher import itinerary_hash
from .models import Itinerary
from .search import SearchOrchestrator, recent_searches
from .store import SQLiteStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class App:
    settings: Settings
    client: FlightsApiClient
    credentials: CredentialStore
    orchestrator: SearchOrchestrator
    favorites: FavoritesClient


def build_app(settings: Settings) -> App:
    store = SQLiteStore(settings.store_path)
    client = FlightsApiClient(settings.api_url, timeout=settings.http_timeout_s)
    credentials = CredentialStore(store)
    cache = ResultCache(store, ttl_ms=settings.cache_ttl_ms)
    return App(
        settings=settings,
        client=client,
        credentials=credentials,
        orchestrator=SearchOrchestrator(client, cache, credentials),
        favorites=FavoritesClient(client, credentials),
    )


def configure_logging(settings: Settings) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=settings.log_level,
        handlers=handlers,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def format_itinerary(idx: int, itin: Itinerary) -> str:
    stops = "direct" if itin.stopovers == 0 else f"{itin.stopovers} stop(s)"
    return (
        f"{idx:>3}. {itin.airline_display_name:<20} "
        f"{itin.origin_airport} {itin.departure_at} ➔ "
        f"{itin.destination_airport} {itin.arrival_at}  "
        f"{itin.total_duration_iso or '-'}  {stops}  ${itin.price:.2f}"
    )


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Search, cache and save flight itineraries."""
    settings = get_settings()
    configure_logging(settings)
    ctx.obj = build_app(settings)


@cli.command()
@click.argument("origin")
@click.argument("destination")
@click.argument("date")
@click.option("--csv", "csv_path", help="Also write results to this CSV file")
@click.pass_obj
def search(app: App, origin: str, destination: str, date: str, csv_path: Optional[str]) -> None:
    """Search flights ORIGIN ➔ DESTINATION on DATE (YYYY-MM-DD)."""
    result = app.orchestrator.search(origin.upper(), destination.upper(), date)
    if result.error is not None:
        raise click.ClickException(result.error.message)
    if not result.itineraries:
        click.echo("No flights found.")
        return
    if result.from_cache:
        click.echo("(cached results)")
    for idx, itin in enumerate(result.itineraries, start=1):
        click.echo(format_itinerary(idx, itin))
    if csv_path:
        export_csv(result.itineraries, csv_path)
        click.echo(f"Saved {len(result.itineraries)} rows to {csv_path}")


@cli.command()
@click.argument("query")
@click.pass_obj
def airports(app: App, query: str) -> None:
    """Look up airports matching QUERY."""
    for airport in search_airports(app.client, query, limit=app.settings.airport_limit):
        click.echo(f"{airport.label}  {airport.name}")


@cli.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
@click.pass_obj
def login(app: App, email: str, password: str) -> None:
    """Log in and remember the bearer token."""
    try:
        do_login(app.client, app.credentials, email, password)
    except FlightsApiError as exc:
        raise click.ClickException(exc.message)
    click.echo("Logged in.")


@cli.command()
@click.pass_obj
def logout(app: App) -> None:
    """Forget the stored bearer token."""
    do_logout(app.credentials)
    click.echo("Logged out.")


@cli.command()
@click.pass_obj
def saved(app: App) -> None:
    """List saved flights."""
    try:
        flights = app.favorites.load_saved()
    except FavoriteError as exc:
        raise click.ClickException(str(exc))
    if not flights:
        click.echo("No saved flights.")
    for idx, flight in enumerate(flights, start=1):
        click.echo(format_itinerary(idx, flight.itinerary))


def _set_saved(app: App, origin: str, destination: str, date: str, index: int, want: bool) -> None:
    result = app.orchestrator.search(origin.upper(), destination.upper(), date)
    if result.error is not None:
        raise click.ClickException(result.error.message)
    if not 1 <= index <= len(result.itineraries):
        raise click.BadParameter(f"must be between 1 and {len(result.itineraries)}", param_hint="INDEX")
    itin = result.itineraries[index - 1]
    try:
        app.credentials.require_token()
        app.favorites.load_saved()
        if app.favorites.is_favorited(itin) == want:
            click.echo(("Already saved " if want else "Not saved ") + itinerary_hash(itin.segments))
            return
        patch = app.favorites.toggle_favorite(itin)
    except AuthRequired as exc:
        raise click.ClickException(str(exc))
    except FavoriteError as exc:
        raise click.ClickException(f"Could not update saved flight: {exc}")
    click.echo(("Saved " if patch.favorited else "Removed ") + patch.identity)


@cli.command()
@click.argument("origin")
@click.argument("destination")
@click.argument("date")
@click.argument("index", type=int)
@click.pass_obj
def save(app: App, origin: str, destination: str, date: str, index: int) -> None:
    """Save result INDEX of a search ORIGIN ➔ DESTINATION on DATE."""
    _set_saved(app, origin, destination, date, index, want=True)


@cli.command()
@click.argument("origin")
@click.argument("destination")
@click.argument("date")
@click.argument("index", type=int)
@click.pass_obj
def unsave(app: App, origin: str, destination: str, date: str, index: int) -> None:
    """Remove result INDEX of a search from saved flights."""
    _set_saved(app, origin, destination, date, index, want=False)


@cli.command()
@click.pass_obj
def recent(app: App) -> None:
    """Show recent searches of the logged-in account."""
    try:
        searches = recent_searches(app.client, app.credentials)
    except FlightsApiError as exc:
        raise click.ClickException(exc.message)
    for item in searches:
        click.echo(f"{item.origin} ➔ {item.destination} {item.date}")


if __name__ == "__main__":
    cli()
