"""Fixer provider: retrying, plan-aware retrieval of historical rates."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from time import perf_counter
from typing import Any

from ratecache.logging import provider_log_extra
from ratecache.utils.datetime import utc_now
from ratecache.validation import validate_access_key, validate_currency_code, validate_date, validate_symbols

from .assembler import AssemblyError, format_date, snapshot_from_response
from .base import BaseRateProvider, ProviderRequestError, ProviderUnavailable
from .fixer_client import FixerAPIError, FixerClient, FixerClientConfig
from .restrictions import RestrictedCredentials
from .retry_policy import (
    Action,
    ErrorCategory,
    ExponentialBackoff,
    RequestMode,
    RetryState,
    categorize,
    next_step,
)
from .schemas import FixerResponse, RateSnapshot
from .utils import RebaseError, rebase_rates

logger = logging.getLogger(__name__)


class FixerRateProvider(BaseRateProvider):
    """Fetch rates for one day, falling back to restricted mode when needed.

    Access keys on plans that cannot choose a base currency are remembered in
    the injected ``RestrictedCredentials``; for those keys the ``base``
    parameter is never sent again and the answer is rebased locally.
    """

    name = "fixer"

    def __init__(
        self,
        client: FixerClient,
        restrictions: RestrictedCredentials | None = None,
        *,
        max_retries: int = 3,
        backoff: ExponentialBackoff | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._restrictions = restrictions if restrictions is not None else RestrictedCredentials()
        self._max_retries = max_retries
        self._backoff = backoff or ExponentialBackoff()
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        restrictions: RestrictedCredentials | None = None,
    ) -> FixerRateProvider:
        client_config = FixerClientConfig(
            base_url=str(config.get("FIXER_API_BASE_URL") or "https://data.fixer.io/api"),
            connect_timeout=float(config.get("FIXER_CONNECT_TIMEOUT_SECONDS", 10)),
            read_timeout=float(config.get("FIXER_READ_TIMEOUT_SECONDS", 30)),
        )
        backoff = ExponentialBackoff(
            initial=float(config.get("FIXER_BACKOFF_SECONDS", 0.5)),
            multiplier=float(config.get("FIXER_BACKOFF_MULTIPLIER", 1.5)),
            max_delay=float(config.get("FIXER_BACKOFF_MAX_SECONDS", 15)),
            jitter=float(config.get("FIXER_BACKOFF_JITTER", 0)),
        )
        return cls(
            FixerClient(client_config),
            restrictions,
            max_retries=int(config.get("FIXER_MAX_RETRIES", 3)),
            backoff=backoff,
        )

    @property
    def restrictions(self) -> RestrictedCredentials:
        return self._restrictions

    def fetch(
        self,
        day: date | str,
        base: str,
        symbols: Iterable[str],
        access_key: str,
    ) -> RateSnapshot:
        """Return ``symbols`` quoted against ``base`` on ``day``.

        Raises:
            ValidationError: Malformed arguments; nothing is sent upstream.
            ProviderRequestError: The provider rejected the request for a
                reason retrying cannot fix.
            ProviderUnavailable: Retries and the restricted-mode fallback
                are exhausted.
        """

        rate_date = validate_date(day)
        base_currency = validate_currency_code(base, field="base")
        wanted = validate_symbols(symbols)
        key = validate_access_key(access_key)
        day_str = format_date(rate_date)

        mode = RequestMode.RESTRICTED if self._restrictions.is_restricted(key) else RequestMode.FULL
        state = RetryState(mode=mode)
        attempt = 0

        while True:
            attempt += 1
            start = perf_counter()
            try:
                response = self._request(state.mode, day_str, base_currency, wanted, key)
            except FixerAPIError as exc:
                duration = (perf_counter() - start) * 1000
                category = categorize(
                    status_code=exc.status_code,
                    error_code=exc.error_code,
                    network_error=exc.network_error,
                )
                decision = next_step(state, category, self._max_retries)
                logger.warning(
                    "Fixer request failed (attempt %s, %s mode, %s): %s",
                    attempt,
                    state.mode.value,
                    category.value,
                    exc,
                    extra=provider_log_extra(
                        provider=self.name,
                        day=day_str,
                        base=base_currency,
                        mode=state.mode.value,
                        attempt=attempt,
                        status="error",
                        duration_ms=duration,
                        access_key=key,
                        error=str(exc),
                    ),
                )

                if decision.action is Action.SWITCH_MODE:
                    self._restrictions.mark(key)
                    logger.warning(
                        "Subscription plan does not support the base parameter; "
                        "retrying %s in restricted mode.",
                        day_str,
                    )
                    state = decision.state
                    continue

                if decision.action is Action.ABORT:
                    if category is ErrorCategory.PLAN_RESTRICTED:
                        raise ProviderUnavailable(
                            f"Fixer rejected {day_str} even in restricted mode",
                            status_code=exc.status_code,
                            detail=_detail(exc),
                            attempts=attempt,
                        ) from exc
                    raise ProviderRequestError(
                        f"Fixer rejected the request for {day_str}: {exc}",
                        status_code=exc.status_code,
                        error_code=exc.error_code,
                        info=_detail(exc),
                    ) from exc

                if decision.action is Action.EXHAUSTED:
                    logger.error(
                        "Failed to fetch exchange rates for %s after %s attempts", day_str, attempt
                    )
                    raise ProviderUnavailable(
                        f"Fixer unavailable for {day_str} after {attempt} attempts",
                        status_code=exc.status_code,
                        detail=_detail(exc),
                        attempts=attempt,
                    ) from exc

                delay = self._backoff.delay(decision.state.retries_used)
                logger.info("Retrying %s in %.2fs", day_str, delay)
                self._sleep(delay)
                state = decision.state
                continue

            duration = (perf_counter() - start) * 1000
            logger.info(
                "Successfully fetched exchange rates for %s",
                day_str,
                extra=provider_log_extra(
                    provider=self.name,
                    day=day_str,
                    base=base_currency,
                    mode=state.mode.value,
                    attempt=attempt,
                    status="success",
                    duration_ms=duration,
                    access_key=key,
                ),
            )
            return self._to_snapshot(response, rate_date, base_currency, wanted)

    def _request(
        self,
        mode: RequestMode,
        day: str,
        base: str,
        wanted: tuple[str, ...],
        access_key: str,
    ) -> FixerResponse:
        if mode is RequestMode.FULL:
            return self._client.get_historical(day, access_key, base=base, symbols=wanted)
        # The provider answers in its own base; ask for ours too so we can rebase.
        symbols = wanted if base in wanted else (*wanted, base)
        return self._client.get_historical(day, access_key, symbols=symbols)

    def _to_snapshot(
        self,
        response: FixerResponse,
        rate_date: date,
        base: str,
        wanted: tuple[str, ...],
    ) -> RateSnapshot:
        try:
            snapshot = snapshot_from_response(response, executed_at=self._clock())
        except AssemblyError as exc:
            raise ProviderRequestError(f"Unusable Fixer response: {exc}") from exc

        if snapshot.date != rate_date:
            logger.warning(
                "Fixer answered %s for requested day %s", snapshot.date, rate_date
            )

        rates = snapshot.rates
        if snapshot.base_currency != base:
            try:
                rates = rebase_rates(rates, snapshot.base_currency, base)
            except RebaseError as exc:
                raise ProviderRequestError(
                    f"Cannot express {snapshot.base_currency} rates against {base}: {exc}"
                ) from exc

        missing = [code for code in wanted if code not in rates]
        if missing:
            logger.warning("Fixer returned no rate for %s on %s", ",".join(missing), rate_date)

        return RateSnapshot(
            date=rate_date,
            base_currency=base,
            rates={code: rates[code] for code in wanted if code in rates},
            executed_at=snapshot.executed_at,
        )


def _detail(exc: FixerAPIError) -> str:
    if exc.error is None:
        return str(exc)
    parts = [f"code={exc.error.code}"]
    if exc.error.type:
        parts.append(f"type={exc.error.type}")
    if exc.error.info:
        parts.append(f"info={exc.error.info}")
    return ", ".join(parts)
