"""Fetch upstream portfolios and normalize them into snapshots."""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from piefolio.core.exceptions import UpstreamFormatError
from piefolio.core.timezone import now_utc, parse_datetime_utc
from piefolio.domain.models import (
    DepositInfo,
    InstrumentPosition,
    InstrumentType,
    OverallSummary,
    Pie,
    PortfolioSnapshot,
    UserSettings,
)
from piefolio.providers.portfolio_provider import PortfolioProvider
from piefolio.services.portfolio_cache import PortfolioCache

logger = logging.getLogger(__name__)

RETURN_QUANT = Decimal("0.0001")
TOTALS_TOLERANCE = Decimal("0.01")

_INSTRUMENT_TYPES = {
    "STOCK": InstrumentType.STOCK,
    "EQUITY": InstrumentType.STOCK,
    "ETF": InstrumentType.FUND,
    "FUND": InstrumentType.FUND,
}

# Upstream spellings of the performance windows
_PERFORMANCE_FIELDS = {
    "performance_1w": ("performance_1week", "performance1Week", "performance_1w"),
    "performance_1m": ("performance_1month", "performance1Month", "performance_1m"),
    "performance_3m": ("performance_3months", "performance3Months", "performance_3m"),
    "performance_1y": ("performance_1year", "performance1Year", "performance_1y"),
}


def _pick(data: dict[str, Any], *keys: str) -> Any:
    """Return the value of the first key present in data (None if none is)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _to_decimal(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise UpstreamFormatError(f"Field {field_name} is not numeric: {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation as exc:
        raise UpstreamFormatError(f"Field {field_name} is not numeric: {value!r}") from exc
    if not result.is_finite():
        raise UpstreamFormatError(f"Field {field_name} is not finite: {value!r}")
    return result


def _to_text(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise UpstreamFormatError(f"Field {field_name} is not text: {value!r}")
    return value


def _return_percentage(result: Decimal, invested: Decimal) -> Decimal:
    if invested == 0:
        return Decimal("0")
    return (result / invested * 100).quantize(RETURN_QUANT)


def _normalize_instrument(raw: Any, pie_name: str) -> InstrumentPosition:
    if not isinstance(raw, dict):
        raise UpstreamFormatError(f"Instrument entry in pie {pie_name!r} is not an object")

    ticker = _pick(raw, "ticker", "symbol")
    if not isinstance(ticker, str) or not ticker.strip():
        raise UpstreamFormatError(f"Instrument in pie {pie_name!r} has no ticker")
    ticker = ticker.strip()

    # Raw brokerage payloads nest values under "result"
    result_block = raw.get("result") if isinstance(raw.get("result"), dict) else {}

    quantity = _to_decimal(_pick(raw, "ownedQuantity", "owned_quantity", "quantity"), f"{ticker}.ownedQuantity")
    if quantity is None:
        quantity = Decimal("0")
    if quantity < 0:
        raise UpstreamFormatError(f"Instrument {ticker} has negative quantity {quantity}")

    invested = _to_decimal(
        _pick(raw, "investedValue", "invested_value") or _pick(result_block, "priceAvgInvestedValue"),
        f"{ticker}.investedValue",
    ) or Decimal("0")
    current = _to_decimal(
        _pick(raw, "currentValue", "current_value") or _pick(result_block, "priceAvgValue"),
        f"{ticker}.currentValue",
    ) or Decimal("0")
    result_value = _to_decimal(_pick(raw, "resultValue", "result_value"), f"{ticker}.resultValue")
    if result_value is None:
        result_value = current - invested

    raw_type = _pick(raw, "type", "instrumentType", "instrument_type")
    if raw_type is None:
        instrument_type = InstrumentType.STOCK
    else:
        instrument_type = _INSTRUMENT_TYPES.get(str(raw_type).upper())
        if instrument_type is None:
            raise UpstreamFormatError(f"Instrument {ticker} has unknown type {raw_type!r}")

    # Upstream reports yield as a percentage
    yield_pct = _to_decimal(_pick(raw, "dividendYield", "dividend_yield"), f"{ticker}.dividendYield")
    dividend_yield = yield_pct / 100 if yield_pct is not None else None

    performance = {
        attr: _to_decimal(_pick(raw, *spellings), f"{ticker}.{attr}")
        for attr, spellings in _PERFORMANCE_FIELDS.items()
    }

    return InstrumentPosition(
        ticker=ticker,
        owned_quantity=quantity,
        invested_value=invested,
        current_value=current,
        result_value=result_value,
        instrument_type=instrument_type,
        currency_code=_to_text(_pick(raw, "currencyCode", "currency_code", "currency"), f"{ticker}.currencyCode"),
        full_name=_to_text(_pick(raw, "fullName", "full_name", "name"), f"{ticker}.fullName"),
        dividend_yield=dividend_yield,
        **performance,
    )


def _normalize_pie(raw: Any) -> Pie:
    if not isinstance(raw, dict):
        raise UpstreamFormatError("Pie entry is not an object")

    settings_block = raw.get("settings") if isinstance(raw.get("settings"), dict) else {}
    name = _pick(raw, "name") or _pick(settings_block, "name")
    if not isinstance(name, str) or not name.strip():
        raise UpstreamFormatError("Pie has no name")
    name = name.strip()

    raw_instruments = raw.get("instruments") or []
    if not isinstance(raw_instruments, list):
        raise UpstreamFormatError(f"Instruments of pie {name!r} are not a list")

    instruments: list[InstrumentPosition] = []
    seen: set[str] = set()
    for raw_instrument in raw_instruments:
        instrument = _normalize_instrument(raw_instrument, name)
        if instrument.ticker in seen:
            raise UpstreamFormatError(f"Ticker {instrument.ticker} appears twice in pie {name!r}")
        seen.add(instrument.ticker)
        instruments.append(instrument)

    total_invested = _to_decimal(_pick(raw, "totalInvested", "total_invested"), f"{name}.totalInvested")
    if total_invested is None:
        total_invested = sum((i.invested_value for i in instruments), Decimal("0"))
    current_value = _to_decimal(_pick(raw, "currentValue", "current_value"), f"{name}.currentValue")
    if current_value is None:
        current_value = sum((i.current_value for i in instruments), Decimal("0"))
    total_result = _to_decimal(_pick(raw, "totalResult", "total_result"), f"{name}.totalResult")
    if total_result is None:
        total_result = (
            sum((i.result_value for i in instruments), Decimal("0"))
            if instruments else current_value - total_invested
        )
    return_percentage = _to_decimal(_pick(raw, "returnPercentage", "return_percentage"), f"{name}.returnPercentage")
    if return_percentage is None:
        return_percentage = _return_percentage(total_result, total_invested)

    return Pie(
        name=name,
        total_invested=total_invested,
        current_value=current_value,
        total_result=total_result,
        return_percentage=return_percentage,
        instruments=instruments,
        creation_date=_to_text(
            _pick(raw, "creationDate", "creation_date") or _pick(settings_block, "creationDate"),
            f"{name}.creationDate",
        ),
        dividend_cash_action=_to_text(
            _pick(raw, "dividendCashAction", "dividend_cash_action")
            or _pick(settings_block, "dividendCashAction"),
            f"{name}.dividendCashAction",
        ),
    )


def _normalize_deposit_info(raw: Any) -> DepositInfo:
    if raw is None:
        return DepositInfo()
    if not isinstance(raw, dict):
        raise UpstreamFormatError("Deposit info is not an object")

    expected = _pick(raw, "expectedDepositDate", "expected_deposit_date")
    expected_date: Optional[datetime] = None
    if expected:
        try:
            expected_date = parse_datetime_utc(str(expected))
        except (ValueError, OverflowError) as exc:
            raise UpstreamFormatError(f"Unparseable expected deposit date {expected!r}") from exc

    return DepositInfo(
        total_deposited_this_month=_to_decimal(
            _pick(raw, "totalDepositedThisMonth", "total_deposited_this_month"), "totalDepositedThisMonth"
        ) or Decimal("0"),
        free_cash_available=_to_decimal(
            _pick(raw, "freeCashAvailable", "free_cash_available"), "freeCashAvailable"
        ) or Decimal("0"),
        budget_status=_to_text(
            _pick(raw, "budgetMetThisMonth", "budget_status", "budgetStatus"), "budgetMetThisMonth"
        ),
        expected_deposit_date=expected_date,
        expected_deposit_message=_to_text(
            _pick(raw, "expectedDepositMessage", "expected_deposit_message"), "expectedDepositMessage"
        ),
    )


def normalize_portfolio(payload: Any, user_id: str, fetched_at: datetime) -> PortfolioSnapshot:
    """
    Convert an upstream portfolio document into a PortfolioSnapshot.

    Unknown fields are ignored. The overall summary is recomputed from the
    pies; an upstream total that disagrees is logged and not used.

    Raises:
        UpstreamFormatError: the document does not have the expected shape
    """
    if not isinstance(payload, dict):
        raise UpstreamFormatError("Portfolio document is not an object")

    raw_pies = _pick(payload, "pies", "portfolio")
    if raw_pies is None:
        raise UpstreamFormatError("Portfolio document has no pies")
    if not isinstance(raw_pies, list):
        raise UpstreamFormatError("Portfolio pies are not a list")

    pies: list[Pie] = []
    names: set[str] = set()
    for raw_pie in raw_pies:
        # The original sample document mixed the summary into the pie list
        if isinstance(raw_pie, dict) and "overallSummary" in raw_pie and "instruments" not in raw_pie:
            continue
        pie = _normalize_pie(raw_pie)
        if pie.name in names:
            raise UpstreamFormatError(f"Pie name {pie.name!r} appears twice")
        names.add(pie.name)
        pies.append(pie)

    total_invested = sum((p.total_invested for p in pies), Decimal("0"))
    total_result = sum((p.total_result for p in pies), Decimal("0"))

    summary = _pick(payload, "overallSummary", "overall_summary", "overall")
    if isinstance(summary, dict) and isinstance(summary.get("overallSummary"), dict):
        summary = summary["overallSummary"]
    if isinstance(summary, dict):
        reported = _to_decimal(
            _pick(summary, "totalInvestedOverall", "total_invested"), "overallSummary.totalInvestedOverall"
        )
        if reported is not None and abs(reported - total_invested) > TOTALS_TOLERANCE:
            logger.warning(
                "Upstream overall invested %s differs from pie sum %s user=%s",
                reported, total_invested, user_id,
            )

    return PortfolioSnapshot(
        user_id=user_id,
        fetched_at=fetched_at,
        pies=pies,
        overall=OverallSummary(
            total_invested=total_invested,
            total_result=total_result,
            return_percentage=_return_percentage(total_result, total_invested),
        ),
        deposit_info=_normalize_deposit_info(_pick(payload, "depositInfo", "deposit_info")),
    )


class PortfolioFetcher:
    """
    Pulls a user's portfolio from upstream and stores it in the cache.

    A successful fetch always ends in PortfolioCache.put; there is no
    fetch-without-store path. Failures propagate untouched and are never
    retried here.
    """

    def __init__(
        self,
        provider: PortfolioProvider,
        cache: PortfolioCache,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._provider = provider
        self._cache = cache
        self._clock = clock

    def fetch(self, user_id: str, settings: UserSettings) -> PortfolioSnapshot:
        """
        Fetch, normalize and persist the portfolio for user_id.

        Raises:
            UpstreamError: upstream call failed or returned non-success
            UpstreamFormatError: upstream body could not be normalized
            CacheWriteError: the snapshot could not be persisted
        """
        logger.info("Fetching portfolio from upstream user=%s", user_id)
        payload = self._provider.fetch_portfolio(
            country=settings.country,
            currency=settings.currency,
            budget=settings.monthly_budget,
        )
        snapshot = normalize_portfolio(payload, user_id=user_id, fetched_at=self._clock())
        self._cache.put(user_id, snapshot)
        return snapshot
