"""Target allocation storage and the allocation report."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional, Union

from piefolio.core.exceptions import NotFoundError, ValidationError
from piefolio.domain.models import PortfolioSnapshot
from piefolio.domain.views import AllocationReport
from piefolio.repositories.protocols import AllocationTargetRepository
from piefolio.services.allocation_analyzer import AllocationAnalyzer, targets_from_pie_names
from piefolio.services.portfolio_service import PortfolioService
from piefolio.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _validate_target(pie_name: str, value: Union[Decimal, int, float, str]) -> Decimal:
    if not pie_name or not pie_name.strip():
        raise ValidationError("Pie name cannot be empty")
    try:
        target = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"Target for {pie_name!r} is not a number: {value!r}") from exc
    if not target.is_finite() or target < 0 or target > HUNDRED:
        raise ValidationError(f"Target for {pie_name!r} must be between 0 and 100, got {value}")
    return target


class AllocationService:
    """
    Manages per-user target percentages and builds allocation reports.

    Target resolution for a report: targets passed by the caller, else the
    user's stored targets, else percentages written in the pie names.
    """

    def __init__(
        self,
        target_repo: AllocationTargetRepository,
        portfolio_service: PortfolioService,
        settings_service: SettingsService,
        analyzer: Optional[AllocationAnalyzer] = None,
        max_staleness_seconds: float = 3600,
    ):
        self._target_repo = target_repo
        self._portfolio_service = portfolio_service
        self._settings_service = settings_service
        self._analyzer = analyzer or AllocationAnalyzer()
        self._max_staleness = max_staleness_seconds

    # ---- targets ----

    def get_targets(self, user_id: str) -> dict[str, Decimal]:
        return self._target_repo.get_targets(user_id)

    def set_target(self, user_id: str, pie_name: str, target_percentage: Decimal) -> dict[str, Decimal]:
        """Set one pie's target and return all of the user's targets."""
        target = _validate_target(pie_name, target_percentage)
        self._target_repo.set_target(user_id, pie_name.strip(), target)
        targets = self._target_repo.get_targets(user_id)
        self._warn_if_over_total(user_id, targets)
        return targets

    def replace_targets(self, user_id: str, targets: Mapping[str, Decimal]) -> dict[str, Decimal]:
        """Replace every stored target of the user with targets."""
        validated = {name.strip(): _validate_target(name, value) for name, value in targets.items()}
        self._target_repo.replace_targets(user_id, validated)
        self._warn_if_over_total(user_id, validated)
        return self._target_repo.get_targets(user_id)

    def delete_target(self, user_id: str, pie_name: str) -> None:
        """
        Raises:
            NotFoundError: the user has no target for pie_name
        """
        if not self._target_repo.delete_target(user_id, pie_name):
            raise NotFoundError("Allocation target", pie_name)

    @staticmethod
    def _warn_if_over_total(user_id: str, targets: Mapping[str, Decimal]) -> None:
        total = sum(targets.values(), Decimal("0"))
        if total > HUNDRED:
            logger.warning("Stored targets exceed 100%% user=%s total=%s", user_id, total)

    # ---- report ----

    def resolve_targets(
        self,
        user_id: str,
        snapshot: PortfolioSnapshot,
        targets: Optional[Mapping[str, Decimal]] = None,
    ) -> dict[str, Decimal]:
        if targets:
            return {name: _validate_target(name, value) for name, value in targets.items()}
        stored = self._target_repo.get_targets(user_id)
        if stored:
            return stored
        return targets_from_pie_names(snapshot.pie_names())

    def get_allocation_report(
        self,
        user_id: str,
        targets: Optional[Mapping[str, Decimal]] = None,
        planned_deposit: Optional[Decimal] = None,
        max_staleness_seconds: Optional[float] = None,
        force_refresh: bool = False,
    ) -> AllocationReport:
        """
        Load the user's portfolio and analyze it against their targets.

        The portfolio is read through PortfolioService, so the report may
        carry ``stale=True`` when upstream was unavailable.
        """
        settings = self._settings_service.get_settings(user_id)
        snapshot = self._portfolio_service.get_portfolio(
            user_id,
            settings,
            max_staleness_seconds=(
                self._max_staleness if max_staleness_seconds is None else max_staleness_seconds
            ),
            force_refresh=force_refresh,
        )
        return self._analyzer.analyze(
            snapshot,
            self.resolve_targets(user_id, snapshot, targets),
            planned_deposit=planned_deposit,
            monthly_budget=settings.monthly_budget,
        )
