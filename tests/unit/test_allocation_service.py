"""
Unit tests for AllocationService and SettingsService.

Tests cover:
- Target CRUD and 0-100 validation
- Target resolution order (explicit, stored, pie names)
- Allocation report through the read-through portfolio
- User settings defaults and updates
"""

from decimal import Decimal

import pytest

from piefolio.core.exceptions import NotFoundError, UpstreamError, ValidationError


# =============================================================================
# TARGET CRUD TESTS
# =============================================================================


class TestTargets:
    """Tests for stored target percentages."""

    def test_set_and_list(self, allocation_service):
        allocation_service.set_target("user-1", "Growth", Decimal("60"))
        targets = allocation_service.set_target("user-1", "Income", Decimal("40"))

        assert targets == {"Growth": Decimal("60"), "Income": Decimal("40")}

    def test_set_overwrites(self, allocation_service):
        allocation_service.set_target("user-1", "Growth", Decimal("60"))

        targets = allocation_service.set_target("user-1", "Growth", Decimal("55.5"))

        assert targets == {"Growth": Decimal("55.5")}

    @pytest.mark.parametrize("value", [Decimal("-1"), Decimal("100.01"), "abc"])
    def test_out_of_range_rejected(self, allocation_service, value):
        with pytest.raises(ValidationError):
            allocation_service.set_target("user-1", "Growth", value)

    def test_empty_pie_name_rejected(self, allocation_service):
        with pytest.raises(ValidationError):
            allocation_service.set_target("user-1", "  ", Decimal("10"))

    def test_replace_all(self, allocation_service):
        allocation_service.set_target("user-1", "Old", Decimal("100"))

        targets = allocation_service.replace_targets("user-1", {"A": Decimal("70"), "B": Decimal("30")})

        assert targets == {"A": Decimal("70"), "B": Decimal("30")}

    def test_replace_is_all_or_nothing_on_validation(self, allocation_service):
        allocation_service.set_target("user-1", "Old", Decimal("100"))

        with pytest.raises(ValidationError):
            allocation_service.replace_targets("user-1", {"A": Decimal("70"), "B": Decimal("130")})

        assert allocation_service.get_targets("user-1") == {"Old": Decimal("100")}

    def test_over_100_total_is_stored(self, allocation_service):
        allocation_service.replace_targets("user-1", {"A": Decimal("80"), "B": Decimal("80")})

        assert sum(allocation_service.get_targets("user-1").values()) == Decimal("160")

    def test_delete(self, allocation_service):
        allocation_service.set_target("user-1", "Growth", Decimal("60"))

        allocation_service.delete_target("user-1", "Growth")

        assert allocation_service.get_targets("user-1") == {}

    def test_delete_missing(self, allocation_service):
        with pytest.raises(NotFoundError):
            allocation_service.delete_target("user-1", "Nope")

    def test_targets_are_per_user(self, allocation_service):
        allocation_service.set_target("user-1", "Growth", Decimal("60"))

        assert allocation_service.get_targets("user-2") == {}


# =============================================================================
# REPORT TESTS
# =============================================================================


class TestAllocationReport:
    """Tests for get_allocation_report."""

    def test_falls_back_to_pie_name_targets(self, allocation_service):
        """
        GIVEN no stored targets and none supplied
        WHEN the report is built for the sample portfolio
        THEN targets come from the (NN%) suffixes in pie names
        """
        report = allocation_service.get_allocation_report("user-1")

        assert report.allocations["REIT (20%)"].target_percentage == Decimal("20")
        assert report.target_total_percentage == Decimal("100")

    def test_stored_targets_take_precedence(self, allocation_service):
        allocation_service.set_target("user-1", "REIT (20%)", Decimal("50"))

        report = allocation_service.get_allocation_report("user-1")

        assert report.allocations["REIT (20%)"].target_percentage == Decimal("50")
        assert report.allocations["Next-Gen Growth (40%)"].target_percentage == Decimal("0")

    def test_explicit_targets_take_precedence(self, allocation_service):
        allocation_service.set_target("user-1", "REIT (20%)", Decimal("50"))

        report = allocation_service.get_allocation_report("user-1", targets={"REIT (20%)": Decimal("10")})

        assert report.allocations["REIT (20%)"].target_percentage == Decimal("10")

    def test_deposit_plan_and_projection(self, allocation_service):
        report = allocation_service.get_allocation_report("user-1", planned_deposit=Decimal("1000"))

        assert report.planned_investment["Defensive Growth (40%)"] == Decimal("879.51")
        # Default monthly budget is used for the projection
        assert report.projected_annual_dividend is not None
        assert report.projected_annual_dividend > report.estimated_annual_dividend

    def test_report_marked_stale_on_fallback(self, allocation_service, controllable_provider, clock):
        allocation_service.get_allocation_report("user-1")
        clock.advance(7200)
        controllable_provider.error = UpstreamError("down")

        report = allocation_service.get_allocation_report("user-1")

        assert report.stale is True


# =============================================================================
# SETTINGS TESTS
# =============================================================================


class TestSettingsService:
    """Tests for per-user settings."""

    def test_defaults_when_nothing_stored(self, settings_service):
        settings = settings_service.get_settings("user-1")

        assert settings.country == "BG"
        assert settings.currency == "BGN"
        assert settings.monthly_budget == Decimal("1000")
        assert settings.updated_at is None

    def test_partial_update_keeps_other_fields(self, settings_service):
        settings_service.update_settings("user-1", currency="eur")

        settings = settings_service.update_settings("user-1", monthly_budget=Decimal("250"))

        assert settings.currency == "EUR"
        assert settings.country == "BG"
        assert settings.monthly_budget == Decimal("250")
        assert settings.updated_at is not None

    def test_negative_budget_rejected(self, settings_service):
        with pytest.raises(ValidationError):
            settings_service.update_settings("user-1", monthly_budget=Decimal("-5"))

    def test_blank_country_rejected(self, settings_service):
        with pytest.raises(ValidationError):
            settings_service.update_settings("user-1", country="  ")

    def test_settings_reach_upstream(self, allocation_service, settings_service, controllable_provider):
        settings_service.update_settings("user-1", country="de", currency="eur", monthly_budget=Decimal("300"))

        allocation_service.get_allocation_report("user-1")

        assert controllable_provider.last_request == {
            "country": "DE", "currency": "EUR", "budget": Decimal("300"),
        }
