"""Pydantic schemas for allocation endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from piefolio.domain.views import AllocationReport


class TargetUpdateRequest(BaseModel):
    """Request schema for setting one pie target."""

    target_percentage: Decimal = Field(..., ge=0, le=100, description="Target share of invested value")


class TargetsReplaceRequest(BaseModel):
    """Request schema for replacing all targets of a user."""

    targets: dict[str, Decimal] = Field(default_factory=dict, description="Target percentage per pie name")


class TargetsResponse(BaseModel):
    targets: dict[str, Decimal]
    total_percentage: Decimal


class AllocationLineResponse(BaseModel):
    """Response schema for one pie's allocation."""

    pie_name: str
    current_value: Decimal
    current_percentage: Decimal
    target_percentage: Decimal
    difference: Decimal


class RebalanceLineResponse(BaseModel):
    pie_name: str
    current_value: Decimal
    target_value: Decimal
    amount_to_invest: Decimal


class AllocationReportResponse(BaseModel):
    """Response schema for the allocation report."""

    allocations: list[AllocationLineResponse]
    planned_investment: dict[str, Decimal]
    planned_deposit: Optional[Decimal] = None
    unallocated_deposit: Decimal
    rebalance: list[RebalanceLineResponse]
    rebalancing_recommended: bool
    estimated_annual_dividend: Decimal
    projected_annual_dividend: Optional[Decimal] = None
    target_total_percentage: Decimal
    targets_exceed_total: bool
    total_invested: Decimal
    free_cash_available: Decimal
    as_of: Optional[datetime] = None
    stale: bool

    @classmethod
    def from_report(cls, report: AllocationReport) -> "AllocationReportResponse":
        return cls(
            allocations=[
                AllocationLineResponse(
                    pie_name=line.pie_name,
                    current_value=line.current_value,
                    current_percentage=line.current_percentage,
                    target_percentage=line.target_percentage,
                    difference=line.difference,
                )
                for line in report.allocations.values()
            ],
            planned_investment=report.planned_investment,
            planned_deposit=report.planned_deposit,
            unallocated_deposit=report.unallocated_deposit,
            rebalance=[
                RebalanceLineResponse(
                    pie_name=line.pie_name,
                    current_value=line.current_value,
                    target_value=line.target_value,
                    amount_to_invest=line.amount_to_invest,
                )
                for line in report.rebalance.values()
            ],
            rebalancing_recommended=report.rebalancing_recommended,
            estimated_annual_dividend=report.estimated_annual_dividend,
            projected_annual_dividend=report.projected_annual_dividend,
            target_total_percentage=report.target_total_percentage,
            targets_exceed_total=report.targets_exceed_total,
            total_invested=report.total_invested,
            free_cash_available=report.free_cash_available,
            as_of=report.as_of,
            stale=report.stale,
        )
