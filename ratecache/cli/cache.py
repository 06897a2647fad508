"""CLI commands for warming and invalidating cached rates."""

from __future__ import annotations

import click
from flask import current_app
from flask.cli import with_appcontext

from ratecache.errors import APIError
from ratecache.providers.base import ProviderError


@click.command("warm-cache")
@click.option("--date", "day", required=True, help="Day to cache, YYYY-MM-DD")
@click.option("--symbols", default=None, help="Comma-separated currency codes")
@click.option("--base", default=None, help="Base currency (defaults to DEFAULT_BASE_CURRENCY)")
@click.option(
    "--access-key",
    envvar="FIXER_DEFAULT_ACCESS_KEY",
    default=None,
    help="Fixer access key (defaults to FIXER_DEFAULT_ACCESS_KEY)",
)
@with_appcontext
def warm_cache(day: str, symbols: str | None, base: str | None, access_key: str | None) -> None:
    """Fetch the missing rates for one day and store them."""

    config = current_app.config
    service = current_app.extensions["rates_service"]
    base_currency = base or config["DEFAULT_BASE_CURRENCY"]
    try:
        snapshot = service.get_rates(
            day,
            base_currency,
            symbols or config["DEFAULT_SYMBOLS"],
            access_key or config.get("FIXER_DEFAULT_ACCESS_KEY"),
        )
    except (APIError, ProviderError) as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Cached {len(snapshot.rates)} rates for {snapshot.date.isoformat()}/{snapshot.base_currency}:")
    for code, rate in sorted(snapshot.rates.items()):
        click.echo(f"  {code} {rate}")


@click.command("clear-cache")
@click.option("--date", "day", required=True, help="Day to invalidate, YYYY-MM-DD")
@click.option("--base", default=None, help="Base currency (defaults to DEFAULT_BASE_CURRENCY)")
@with_appcontext
def clear_cache(day: str, base: str | None) -> None:
    """Remove the cached rates for one day and base currency."""

    service = current_app.extensions["rates_service"]
    base_currency = base or current_app.config["DEFAULT_BASE_CURRENCY"]
    try:
        removed = service.clear(day, base_currency)
    except APIError as exc:
        raise click.ClickException(str(exc)) from exc

    if removed:
        click.echo(f"Cleared cached rates for {day}/{base_currency.upper()}.")
    else:
        click.echo(f"No cached rates for {day}/{base_currency.upper()}.")
