"""User settings service."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from piefolio.core.exceptions import ValidationError
from piefolio.domain.models import UserSettings
from piefolio.repositories.protocols import UserSettingsRepository

logger = logging.getLogger(__name__)


class SettingsService:
    """
    Per-user country, currency and monthly budget.

    Users that never saved settings get the configured defaults; reading
    them does not persist anything.
    """

    def __init__(
        self,
        settings_repo: UserSettingsRepository,
        default_country: str = "BG",
        default_currency: str = "BGN",
        default_monthly_budget: Decimal = Decimal("1000"),
    ):
        self._repo = settings_repo
        self._default_country = default_country
        self._default_currency = default_currency
        self._default_budget = default_monthly_budget

    def get_settings(self, user_id: str) -> UserSettings:
        """Return stored settings for user_id, or the defaults."""
        stored = self._repo.get(user_id)
        if stored is not None:
            return stored
        return UserSettings(
            user_id=user_id,
            country=self._default_country,
            currency=self._default_currency,
            monthly_budget=self._default_budget,
        )

    def update_settings(
        self,
        user_id: str,
        country: Optional[str] = None,
        currency: Optional[str] = None,
        monthly_budget: Optional[Decimal] = None,
    ) -> UserSettings:
        """
        Update a user's settings; omitted fields keep their current value.

        Raises:
            ValidationError: empty country/currency or negative budget
        """
        current = self.get_settings(user_id)

        if country is not None:
            country = country.strip().upper()
            if not country:
                raise ValidationError("Country cannot be empty")
            current.country = country
        if currency is not None:
            currency = currency.strip().upper()
            if not currency:
                raise ValidationError("Currency cannot be empty")
            current.currency = currency
        if monthly_budget is not None:
            try:
                budget = Decimal(str(monthly_budget))
            except InvalidOperation as exc:
                raise ValidationError(f"Monthly budget is not a number: {monthly_budget!r}") from exc
            if not budget.is_finite() or budget < 0:
                raise ValidationError("Monthly budget must be a non-negative number")
            current.monthly_budget = budget

        saved = self._repo.upsert(current)
        logger.info("Updated settings user=%s country=%s currency=%s", user_id, saved.country, saved.currency)
        return saved
