"""Route handlers for cached historical rates."""

from __future__ import annotations

from flask import current_app
from flask.views import MethodView

from ratecache.errors import CacheEntryNotFoundError
from ratecache.providers.assembler import response_from_snapshot, response_to_payload
from ratecache.schemas import (
    CacheEntryQuerySchema,
    ErrorResponseSchema,
    RatesQuerySchema,
    RatesResponseSchema,
)
from ratecache.services.rates_cache import CachedRatesService
from ratecache.validation import validate_access_key, validate_currency_code, validate_date, validate_symbols

from . import blp


def _service() -> CachedRatesService:
    return current_app.extensions["rates_service"]


@blp.route("/<day>")
class HistoricalRates(MethodView):
    @blp.arguments(RatesQuerySchema, location="query")
    @blp.response(200, RatesResponseSchema())
    @blp.alt_response(400, schema=ErrorResponseSchema, description="Invalid input")
    @blp.alt_response(502, schema=ErrorResponseSchema, description="Upstream provider failed")
    def get(self, args, day):
        """Rates for one day, served from cache where possible.

        Defaults for ``symbols`` and ``base`` come from DEFAULT_SYMBOLS and
        DEFAULT_BASE_CURRENCY.
        """

        config = current_app.config
        rate_date = validate_date(day)
        symbols = validate_symbols(args.get("symbols") or config["DEFAULT_SYMBOLS"])
        access_key = validate_access_key(args.get("access_key"))
        base = validate_currency_code(args.get("base") or config["DEFAULT_BASE_CURRENCY"])

        snapshot = _service().get_rates(rate_date, base, symbols, access_key)
        return response_to_payload(response_from_snapshot(snapshot.subset(symbols)))

    @blp.arguments(CacheEntryQuerySchema, location="query")
    @blp.response(204)
    @blp.alt_response(404, schema=ErrorResponseSchema, description="Nothing cached for this key")
    def delete(self, args, day):
        """Invalidate the cached rates for one day and base currency."""

        rate_date = validate_date(day)
        base = validate_currency_code(args.get("base") or current_app.config["DEFAULT_BASE_CURRENCY"])
        if not _service().clear(rate_date, base):
            raise CacheEntryNotFoundError(
                f"No cached rates for {rate_date.isoformat()}/{base}",
                description="Nothing to invalidate for this date and base currency.",
            )
