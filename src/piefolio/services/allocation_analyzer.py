"""Allocation analysis: current vs target pie weights and deposit planning."""

import logging
import re
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Mapping, Optional, Union

from piefolio.core.exceptions import ValidationError
from piefolio.domain.models import PortfolioSnapshot
from piefolio.domain.views import AllocationLine, AllocationReport, RebalanceLine

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
PERCENT_QUANT = Decimal("0.01")
HUNDRED = Decimal("100")
MONTHS_PER_YEAR = 12

_TARGET_IN_NAME = re.compile(r"\((\d+(?:\.\d+)?)\s*%\)")

Number = Union[Decimal, int, float, str]


def targets_from_pie_names(pie_names: list[str]) -> dict[str, Decimal]:
    """
    Read targets embedded in pie names, e.g. "REIT (20%)" -> 20.

    Pies without such a suffix are left out (and so default to 0%).
    """
    targets: dict[str, Decimal] = {}
    for name in pie_names:
        match = _TARGET_IN_NAME.search(name)
        if match:
            targets[name] = Decimal(match.group(1))
    return targets


def _as_decimal(value: Number, label: str) -> Decimal:
    try:
        result = Decimal(str(value))
    except ArithmeticError as exc:
        raise ValidationError(f"{label} is not a number: {value!r}") from exc
    if not result.is_finite():
        raise ValidationError(f"{label} is not a finite number: {value!r}")
    return result


class AllocationAnalyzer:
    """
    Stateless allocation calculator.

    Percentages use the overall invested total as denominator; free cash is
    reported next to them and never folded in. ``difference`` is
    target minus current, so a positive value means the pie is
    under-allocated and should get more of the next deposit.
    """

    def __init__(self, rebalance_threshold: Number = Decimal("5")):
        self._threshold = _as_decimal(rebalance_threshold, "rebalance_threshold")

    def analyze(
        self,
        snapshot: Optional[PortfolioSnapshot],
        targets: Optional[Mapping[str, Number]] = None,
        planned_deposit: Optional[Number] = None,
        monthly_budget: Optional[Number] = None,
    ) -> AllocationReport:
        """
        Build the allocation report for a snapshot.

        Args:
            snapshot: Portfolio to analyze (required)
            targets: Target percentage per pie name; missing pies count as 0%
            planned_deposit: Optional amount to split across under-allocated pies
            monthly_budget: Optional budget used for the projected dividend

        Raises:
            ValidationError: snapshot missing, non-numeric input or negative deposit
        """
        if snapshot is None:
            raise ValidationError("A portfolio snapshot is required for allocation analysis")

        target_map = {
            name: _as_decimal(value, f"target for {name}")
            for name, value in (targets or {}).items()
        }
        deposit: Optional[Decimal] = None
        if planned_deposit is not None:
            deposit = _as_decimal(planned_deposit, "planned_deposit").quantize(CENT, rounding=ROUND_HALF_UP)
            if deposit < 0:
                raise ValidationError("planned_deposit cannot be negative")

        total_invested = snapshot.overall.total_invested
        current_values = {pie.name: pie.total_invested for pie in snapshot.pies}
        names = list(current_values) + [name for name in target_map if name not in current_values]

        allocations: dict[str, AllocationLine] = {}
        for name in names:
            current_value = current_values.get(name, Decimal("0"))
            if total_invested > 0:
                current_pct = (current_value / total_invested * HUNDRED).quantize(
                    PERCENT_QUANT, rounding=ROUND_HALF_UP
                )
            else:
                current_pct = Decimal("0.00")
            target_pct = target_map.get(name, Decimal("0"))
            allocations[name] = AllocationLine(
                pie_name=name,
                current_value=current_value,
                current_percentage=current_pct,
                target_percentage=target_pct,
                difference=target_pct - current_pct,
            )

        target_total = sum(target_map.values(), Decimal("0"))
        if target_total > HUNDRED:
            logger.warning("Target allocations add up to %s%% (over 100%%)", target_total)

        planned, unallocated = self._plan_deposit(allocations, deposit)
        estimated, projected = self._dividends(snapshot, monthly_budget)

        return AllocationReport(
            allocations=allocations,
            planned_investment=planned,
            planned_deposit=deposit,
            unallocated_deposit=unallocated,
            rebalance=self._rebalance(allocations, total_invested, deposit),
            rebalancing_recommended=any(
                abs(line.difference) > self._threshold for line in allocations.values()
            ),
            estimated_annual_dividend=estimated,
            projected_annual_dividend=projected,
            target_total_percentage=target_total,
            targets_exceed_total=target_total > HUNDRED,
            total_invested=total_invested,
            free_cash_available=snapshot.deposit_info.free_cash_available,
            as_of=snapshot.fetched_at,
            stale=snapshot.stale,
        )

    def _plan_deposit(
        self,
        allocations: dict[str, AllocationLine],
        deposit: Optional[Decimal],
    ) -> tuple[dict[str, Decimal], Decimal]:
        """
        Split deposit in proportion to each pie's positive difference.

        Amounts are rounded down to the cent and whatever is left goes to the
        pie with the largest positive difference, so the split always adds
        up to the deposit. With no under-allocated pie the deposit follows
        the target weights instead; with no positive target either it stays
        unallocated.
        """
        if deposit is None:
            return {}, Decimal("0")

        weights = {name: line.difference for name, line in allocations.items() if line.difference > 0}
        if not weights:
            weights = {
                name: line.target_percentage
                for name, line in allocations.items()
                if line.target_percentage > 0
            }

        planned = {name: Decimal("0.00") for name in allocations}
        if not weights or deposit == 0:
            return planned, deposit

        total_weight = sum(weights.values(), Decimal("0"))
        for name, weight in weights.items():
            planned[name] = (deposit * weight / total_weight).quantize(CENT, rounding=ROUND_DOWN)

        remainder = deposit - sum(planned.values(), Decimal("0"))
        if remainder:
            largest = max(weights, key=lambda name: weights[name])
            planned[largest] += remainder

        return planned, Decimal("0.00")

    @staticmethod
    def _rebalance(
        allocations: dict[str, AllocationLine],
        total_invested: Decimal,
        deposit: Optional[Decimal],
    ) -> dict[str, RebalanceLine]:
        new_total = total_invested + (deposit or Decimal("0"))
        rebalance: dict[str, RebalanceLine] = {}
        for name, line in allocations.items():
            target_value = (new_total * line.target_percentage / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
            rebalance[name] = RebalanceLine(
                pie_name=name,
                current_value=line.current_value,
                target_value=target_value,
                amount_to_invest=max(Decimal("0.00"), (target_value - line.current_value).quantize(CENT)),
            )
        return rebalance

    @staticmethod
    def _dividends(
        snapshot: PortfolioSnapshot,
        monthly_budget: Optional[Number],
    ) -> tuple[Decimal, Optional[Decimal]]:
        """
        Annual dividend estimate from current holdings, plus a projection that
        also spreads twelve months of budget over holdings by current weight.
        Instruments without a reported yield contribute nothing.
        """
        instruments = [i for pie in snapshot.pies for i in pie.instruments]
        estimated = sum(
            (i.current_value * i.dividend_yield for i in instruments if i.dividend_yield is not None),
            Decimal("0"),
        )

        projected: Optional[Decimal] = None
        if monthly_budget is not None:
            annual_budget = _as_decimal(monthly_budget, "monthly_budget") * MONTHS_PER_YEAR
            total_current = sum((i.current_value for i in instruments), Decimal("0"))
            from_budget = Decimal("0")
            if total_current > 0:
                from_budget = sum(
                    (
                        annual_budget * (i.current_value / total_current) * i.dividend_yield
                        for i in instruments
                        if i.dividend_yield is not None
                    ),
                    Decimal("0"),
                )
            projected = (estimated + from_budget).quantize(CENT, rounding=ROUND_HALF_UP)

        return estimated.quantize(CENT, rounding=ROUND_HALF_UP), projected
