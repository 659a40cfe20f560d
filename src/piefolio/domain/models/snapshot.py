"""Portfolio snapshot models and their JSON form."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from piefolio.core.timezone import now_utc, parse_datetime_utc, to_utc
from piefolio.domain.models.enums import InstrumentType


@dataclass
class InstrumentPosition:
    """
    One held security inside a pie.

    dividend_yield is a fraction of current value (0.035 == 3.5%); None means
    upstream did not report one, which is different from a yield of zero.
    """

    ticker: str
    owned_quantity: Decimal
    invested_value: Decimal
    current_value: Decimal
    result_value: Decimal
    instrument_type: InstrumentType = InstrumentType.STOCK
    currency_code: Optional[str] = None
    full_name: Optional[str] = None
    dividend_yield: Optional[Decimal] = None
    performance_1w: Optional[Decimal] = None
    performance_1m: Optional[Decimal] = None
    performance_3m: Optional[Decimal] = None
    performance_1y: Optional[Decimal] = None


@dataclass
class Pie:
    """Named sub-portfolio grouping a set of positions."""

    name: str
    total_invested: Decimal
    current_value: Decimal
    total_result: Decimal
    return_percentage: Decimal
    instruments: list[InstrumentPosition] = field(default_factory=list)
    creation_date: Optional[str] = None
    dividend_cash_action: Optional[str] = None


@dataclass
class OverallSummary:
    """Aggregate figures across all pies."""

    total_invested: Decimal
    total_result: Decimal
    return_percentage: Decimal


@dataclass
class DepositInfo:
    """Monthly budget consumption and next-deposit projection."""

    total_deposited_this_month: Decimal = field(default_factory=lambda: Decimal("0"))
    free_cash_available: Decimal = field(default_factory=lambda: Decimal("0"))
    budget_status: Optional[str] = None
    expected_deposit_date: Optional[datetime] = None
    expected_deposit_message: Optional[str] = None


@dataclass
class PortfolioSnapshot:
    """
    Point-in-time capture of a user's whole portfolio.

    This is the unit PortfolioCache stores, one per user. ``stale`` is never
    persisted; it is set on the copy handed back when a refresh failed and
    the last known snapshot is served instead.
    """

    user_id: str
    fetched_at: datetime
    pies: list[Pie] = field(default_factory=list)
    overall: OverallSummary = field(
        default_factory=lambda: OverallSummary(Decimal("0"), Decimal("0"), Decimal("0"))
    )
    deposit_info: DepositInfo = field(default_factory=DepositInfo)
    stale: bool = field(default=False, compare=False)

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        """Seconds elapsed since the snapshot was produced."""
        now = now or now_utc()
        return (to_utc(now) - to_utc(self.fetched_at)).total_seconds()

    def pie_names(self) -> list[str]:
        return [pie.name for pie in self.pies]


# =============================================================================
# SERIALIZATION
# =============================================================================


def _dec(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(value)


def _instrument_to_dict(instrument: InstrumentPosition) -> dict[str, Any]:
    return {
        "ticker": instrument.ticker,
        "owned_quantity": str(instrument.owned_quantity),
        "invested_value": str(instrument.invested_value),
        "current_value": str(instrument.current_value),
        "result_value": str(instrument.result_value),
        "instrument_type": instrument.instrument_type.value,
        "currency_code": instrument.currency_code,
        "full_name": instrument.full_name,
        "dividend_yield": None if instrument.dividend_yield is None else str(instrument.dividend_yield),
        "performance_1w": None if instrument.performance_1w is None else str(instrument.performance_1w),
        "performance_1m": None if instrument.performance_1m is None else str(instrument.performance_1m),
        "performance_3m": None if instrument.performance_3m is None else str(instrument.performance_3m),
        "performance_1y": None if instrument.performance_1y is None else str(instrument.performance_1y),
    }


def _instrument_from_dict(data: dict[str, Any]) -> InstrumentPosition:
    return InstrumentPosition(
        ticker=data["ticker"],
        owned_quantity=Decimal(data["owned_quantity"]),
        invested_value=Decimal(data["invested_value"]),
        current_value=Decimal(data["current_value"]),
        result_value=Decimal(data["result_value"]),
        instrument_type=InstrumentType(data["instrument_type"]),
        currency_code=data.get("currency_code"),
        full_name=data.get("full_name"),
        dividend_yield=_dec(data.get("dividend_yield")),
        performance_1w=_dec(data.get("performance_1w")),
        performance_1m=_dec(data.get("performance_1m")),
        performance_3m=_dec(data.get("performance_3m")),
        performance_1y=_dec(data.get("performance_1y")),
    )


def snapshot_to_dict(snapshot: PortfolioSnapshot) -> dict[str, Any]:
    """Convert a snapshot to plain JSON-compatible data (money as strings)."""
    info = snapshot.deposit_info
    return {
        "user_id": snapshot.user_id,
        "fetched_at": to_utc(snapshot.fetched_at).isoformat(),
        "pies": [
            {
                "name": pie.name,
                "total_invested": str(pie.total_invested),
                "current_value": str(pie.current_value),
                "total_result": str(pie.total_result),
                "return_percentage": str(pie.return_percentage),
                "creation_date": pie.creation_date,
                "dividend_cash_action": pie.dividend_cash_action,
                "instruments": [_instrument_to_dict(i) for i in pie.instruments],
            }
            for pie in snapshot.pies
        ],
        "overall": {
            "total_invested": str(snapshot.overall.total_invested),
            "total_result": str(snapshot.overall.total_result),
            "return_percentage": str(snapshot.overall.return_percentage),
        },
        "deposit_info": {
            "total_deposited_this_month": str(info.total_deposited_this_month),
            "free_cash_available": str(info.free_cash_available),
            "budget_status": info.budget_status,
            "expected_deposit_date": (
                to_utc(info.expected_deposit_date).isoformat() if info.expected_deposit_date else None
            ),
            "expected_deposit_message": info.expected_deposit_message,
        },
    }


def snapshot_from_dict(data: dict[str, Any]) -> PortfolioSnapshot:
    """Rebuild a snapshot from snapshot_to_dict output."""
    overall = data["overall"]
    info = data.get("deposit_info") or {}
    expected = info.get("expected_deposit_date")
    return PortfolioSnapshot(
        user_id=data["user_id"],
        fetched_at=parse_datetime_utc(data["fetched_at"]),
        pies=[
            Pie(
                name=p["name"],
                total_invested=Decimal(p["total_invested"]),
                current_value=Decimal(p["current_value"]),
                total_result=Decimal(p["total_result"]),
                return_percentage=Decimal(p["return_percentage"]),
                creation_date=p.get("creation_date"),
                dividend_cash_action=p.get("dividend_cash_action"),
                instruments=[_instrument_from_dict(i) for i in p.get("instruments", [])],
            )
            for p in data.get("pies", [])
        ],
        overall=OverallSummary(
            total_invested=Decimal(overall["total_invested"]),
            total_result=Decimal(overall["total_result"]),
            return_percentage=Decimal(overall["return_percentage"]),
        ),
        deposit_info=DepositInfo(
            total_deposited_this_month=Decimal(info.get("total_deposited_this_month", "0")),
            free_cash_available=Decimal(info.get("free_cash_available", "0")),
            budget_status=info.get("budget_status"),
            expected_deposit_date=parse_datetime_utc(expected) if expected else None,
            expected_deposit_message=info.get("expected_deposit_message"),
        ),
    )


def snapshot_to_json(snapshot: PortfolioSnapshot) -> str:
    """Deterministic JSON text for storage."""
    return json.dumps(snapshot_to_dict(snapshot), sort_keys=True, separators=(",", ":"))


def snapshot_from_json(text: str) -> PortfolioSnapshot:
    return snapshot_from_dict(json.loads(text))
