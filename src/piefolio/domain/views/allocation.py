"""View models for allocation analysis outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class AllocationLine:
    """Current versus target position of one pie."""

    pie_name: str
    current_value: Decimal
    current_percentage: Decimal
    target_percentage: Decimal
    difference: Decimal  # target - current; positive means under-allocated


@dataclass
class RebalanceLine:
    """Value a pie should reach at target after the deposit and what it takes to get there."""

    pie_name: str
    current_value: Decimal
    target_value: Decimal
    amount_to_invest: Decimal


@dataclass
class AllocationReport:
    """Derived allocation analysis for one snapshot. Never persisted."""

    allocations: dict[str, AllocationLine] = field(default_factory=dict)
    planned_investment: dict[str, Decimal] = field(default_factory=dict)
    planned_deposit: Optional[Decimal] = None
    unallocated_deposit: Decimal = field(default_factory=lambda: Decimal("0"))
    rebalance: dict[str, RebalanceLine] = field(default_factory=dict)
    rebalancing_recommended: bool = False
    estimated_annual_dividend: Decimal = field(default_factory=lambda: Decimal("0"))
    projected_annual_dividend: Optional[Decimal] = None
    target_total_percentage: Decimal = field(default_factory=lambda: Decimal("0"))
    targets_exceed_total: bool = False
    total_invested: Decimal = field(default_factory=lambda: Decimal("0"))
    free_cash_available: Decimal = field(default_factory=lambda: Decimal("0"))
    as_of: Optional[datetime] = None
    stale: bool = False
