"""Pydantic schemas for portfolio endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from piefolio.domain.models import InstrumentType, PortfolioSnapshot


class InstrumentResponse(BaseModel):
    """Response schema for one instrument inside a pie."""

    ticker: str
    owned_quantity: Decimal
    invested_value: Decimal
    current_value: Decimal
    result_value: Decimal
    instrument_type: InstrumentType
    currency_code: Optional[str] = None
    full_name: Optional[str] = None
    dividend_yield: Optional[Decimal] = None
    performance_1w: Optional[Decimal] = None
    performance_1m: Optional[Decimal] = None
    performance_3m: Optional[Decimal] = None
    performance_1y: Optional[Decimal] = None


class PieResponse(BaseModel):
    """Response schema for a pie."""

    name: str
    total_invested: Decimal
    current_value: Decimal
    total_result: Decimal
    return_percentage: Decimal
    instruments: list[InstrumentResponse]
    creation_date: Optional[str] = None
    dividend_cash_action: Optional[str] = None


class OverallSummaryResponse(BaseModel):
    total_invested: Decimal
    total_result: Decimal
    return_percentage: Decimal


class DepositInfoResponse(BaseModel):
    total_deposited_this_month: Decimal
    free_cash_available: Decimal
    budget_status: Optional[str] = None
    expected_deposit_date: Optional[datetime] = None
    expected_deposit_message: Optional[str] = None


class PortfolioResponse(BaseModel):
    """Response schema for a user's portfolio snapshot."""

    user_id: str
    fetched_at: datetime
    age_seconds: float
    stale: bool
    pies: list[PieResponse]
    overall: OverallSummaryResponse
    deposit_info: DepositInfoResponse

    @classmethod
    def from_snapshot(cls, snapshot: PortfolioSnapshot, age_seconds: float) -> "PortfolioResponse":
        return cls(
            user_id=snapshot.user_id,
            fetched_at=snapshot.fetched_at,
            age_seconds=age_seconds,
            stale=snapshot.stale,
            pies=[
                PieResponse(
                    name=pie.name,
                    total_invested=pie.total_invested,
                    current_value=pie.current_value,
                    total_result=pie.total_result,
                    return_percentage=pie.return_percentage,
                    instruments=[
                        InstrumentResponse(
                            ticker=i.ticker,
                            owned_quantity=i.owned_quantity,
                            invested_value=i.invested_value,
                            current_value=i.current_value,
                            result_value=i.result_value,
                            instrument_type=i.instrument_type,
                            currency_code=i.currency_code,
                            full_name=i.full_name,
                            dividend_yield=i.dividend_yield,
                            performance_1w=i.performance_1w,
                            performance_1m=i.performance_1m,
                            performance_3m=i.performance_3m,
                            performance_1y=i.performance_1y,
                        )
                        for i in pie.instruments
                    ],
                    creation_date=pie.creation_date,
                    dividend_cash_action=pie.dividend_cash_action,
                )
                for pie in snapshot.pies
            ],
            overall=OverallSummaryResponse(
                total_invested=snapshot.overall.total_invested,
                total_result=snapshot.overall.total_result,
                return_percentage=snapshot.overall.return_percentage,
            ),
            deposit_info=DepositInfoResponse(
                total_deposited_this_month=snapshot.deposit_info.total_deposited_this_month,
                free_cash_available=snapshot.deposit_info.free_cash_available,
                budget_status=snapshot.deposit_info.budget_status,
                expected_deposit_date=snapshot.deposit_info.expected_deposit_date,
                expected_deposit_message=snapshot.deposit_info.expected_deposit_message,
            ),
        )
